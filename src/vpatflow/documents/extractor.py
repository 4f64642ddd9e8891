"""Table-driven extraction of (criteria, conformance, remarks) rows."""

from __future__ import annotations

import logging
from typing import Iterable, Mapping, Sequence

from vpatflow.documents.models import DocumentTable, ExtractedRecord
from vpatflow.normalize.criteria import normalize_criteria_key

logger = logging.getLogger(__name__)

DEFAULT_EXPECTED_COLUMNS = 3


def _cell_text(row: Sequence[object], position: int) -> str:
    try:
        value = row[position]
    except Exception as exc:
        logger.warning("Error reading cell %d: %s", position, exc)
        return ""
    if value is None:
        return ""
    try:
        return str(value).strip()
    except Exception as exc:
        logger.warning("Error reading cell %d text: %s", position, exc)
        return ""


def extract_vpat_records(
    tables: Iterable[DocumentTable],
    index: Mapping[str, int],
    *,
    expected_columns: int = DEFAULT_EXPECTED_COLUMNS,
) -> dict[int, ExtractedRecord]:
    """Join document table rows against a criteria index.

    The first row of every table is treated as a header. Rows with fewer than
    *expected_columns* cells and rows whose key is not in *index* are skipped.
    When several rows map to the same workbook row, the one found last in
    document order wins. An empty dict means nothing matched.
    """
    if expected_columns < 3:
        raise ValueError("expected_columns must be >= 3")

    records: dict[int, ExtractedRecord] = {}
    matched = 0

    for table_number, table in enumerate(tables, start=1):
        logger.debug("Processing table %d with %d rows", table_number, table.num_rows)

        for row_index, row in enumerate(table.rows[1:], start=1):
            try:
                if len(row) < expected_columns:
                    logger.debug(
                        "Table %d row %d has %d cells, expected %d, skipping",
                        table_number,
                        row_index,
                        len(row),
                        expected_columns,
                    )
                    continue

                criteria_text = _cell_text(row, 0)
                conformance_text = _cell_text(row, 1)
                remarks_text = _cell_text(row, 2)
                key = normalize_criteria_key(criteria_text)

                target_row = index.get(key) if key is not None else None
                if target_row is None:
                    logger.debug("No criteria match for %r (key=%r)", criteria_text, key)
                    continue

                records[target_row] = ExtractedRecord(
                    conformance_level=conformance_text,
                    remarks=remarks_text,
                    original_criteria=criteria_text,
                )
                matched += 1
                logger.debug("Matched key %s -> workbook row %d: %r", key, target_row, conformance_text)
            except Exception as exc:
                logger.warning("Error processing table %d row %d: %s", table_number, row_index, exc)

    logger.info("Extraction complete: %d table rows matched, %d workbook rows", matched, len(records))
    return records
