"""VPAT conformance extraction, AI interpretation and quality checklist pipelines."""

__version__ = "0.1.0"
