"""CLI entrypoint for quality checklist analysis against a VPAT document."""

from __future__ import annotations

from dotenv import load_dotenv

load_dotenv()

from vpatflow.cli._common import build_parser, configure_logging, emit_error, finish, open_inputs
from vpatflow.errors import ConfigurationError
from vpatflow.pipelines.quality import run_quality_analysis


def main(argv: list[str] | None = None) -> int:
    parser = build_parser("Answer the quality checklist from a VPAT document", document=True, sheet=False)
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    try:
        settings, store = open_inputs(args)
    except ConfigurationError as exc:
        return emit_error(args, str(exc))

    result = run_quality_analysis(store, args.document, settings=settings)
    return finish(args, store, [result])


if __name__ == "__main__":
    raise SystemExit(main())
