"""CLI entrypoint that fills the original conformance columns from a VPAT document."""

from __future__ import annotations

from dotenv import load_dotenv

load_dotenv()

from vpatflow.cli._common import (
    build_parser,
    configure_logging,
    emit_error,
    finish,
    open_inputs,
    row_range_from_args,
)
from vpatflow.errors import ConfigurationError
from vpatflow.pipelines.extraction import run_extraction


def main(argv: list[str] | None = None) -> int:
    parser = build_parser("Extract VPAT conformance tables into the workbook", document=True, sheet=True)
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    try:
        settings, store = open_inputs(args)
    except ConfigurationError as exc:
        return emit_error(args, str(exc))

    result = run_extraction(
        store,
        args.document,
        sheet_name=args.sheet,
        row_range=row_range_from_args(args),
        settings=settings,
    )
    return finish(args, store, [result])


if __name__ == "__main__":
    raise SystemExit(main())
