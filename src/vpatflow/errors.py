"""Domain errors shared by the extraction, interpretation and quality pipelines."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(slots=True)
class ConfigurationError(Exception):
    """Fatal setup problem detected before any document load or remote call."""

    message: str

    def __str__(self) -> str:
        return self.message


@dataclass(slots=True)
class SourceLoadError(Exception):
    """Domain error for unreadable, unsupported or table-less source documents."""

    path: Path
    message: str

    def __str__(self) -> str:
        return f"{self.message} (path={self.path})"


class RemoteProtocolError(RuntimeError):
    """Base class for failures confined to a single AI batch."""


@dataclass(slots=True)
class ProviderRequestError(RemoteProtocolError):
    """Raised when an AI provider call fails or returns an unusable envelope."""

    provider: str
    model: str
    message: str
    status_code: int | None = None

    def __str__(self) -> str:
        return f"{self.message} (provider={self.provider}, model={self.model})"


@dataclass(slots=True)
class ResponseParseError(RemoteProtocolError):
    """Raised when an AI reply cannot be recovered as JSON."""

    message: str
    raw_content: str

    def __str__(self) -> str:
        return f"{self.message}. Response length: {len(self.raw_content)} chars"
