from __future__ import annotations

from pathlib import Path

import docx

from vpatflow.documents.adapters.docx_adapter import DocxAdapter


def _build_docx(path: Path) -> None:
    document = docx.Document()
    document.add_paragraph("Product Accessibility Report")

    table = document.add_table(rows=3, cols=3)
    values = [
        ["Criteria", "Conformance Level", "Remarks and Explanations"],
        ["1.1.1 Non-text Content", "Supports", "Images have alt text"],
        ["1.4.3 Contrast (Minimum)", "Partially Supports", "Some buttons are low contrast"],
    ]
    for row_index, row_values in enumerate(values):
        for column_index, value in enumerate(row_values):
            table.cell(row_index, column_index).text = value

    document.add_paragraph("Legal disclaimer")
    second = document.add_table(rows=2, cols=3)
    second.cell(0, 0).text = "Criteria"
    second.cell(1, 0).text = "2.1.1 Keyboard"
    second.cell(1, 1).text = "Supports"
    second.cell(1, 2).text = "All functions reachable"

    document.save(str(path))


def test_docx_adapter_reads_tables_in_document_order(tmp_path: Path) -> None:
    docx_path = tmp_path / "vpat.docx"
    _build_docx(docx_path)

    loaded = DocxAdapter().load(docx_path)

    assert loaded.format_name == "docx"
    assert len(loaded.tables) == 2
    assert loaded.tables[0].rows[1] == ["1.1.1 Non-text Content", "Supports", "Images have alt text"]
    assert loaded.tables[1].rows[1][0] == "2.1.1 Keyboard"


def test_docx_adapter_text_keeps_paragraph_and_table_order(tmp_path: Path) -> None:
    docx_path = tmp_path / "vpat.docx"
    _build_docx(docx_path)

    text = DocxAdapter().load(docx_path).text

    assert text.index("Product Accessibility Report") < text.index("Images have alt text")
    assert text.index("Images have alt text") < text.index("Legal disclaimer")
    assert text.index("Legal disclaimer") < text.index("All functions reachable")


def test_docx_adapter_supports_suffix_or_zip_signature(tmp_path: Path) -> None:
    adapter = DocxAdapter()

    assert adapter.supports(tmp_path / "report.DOCX", None)
    assert adapter.supports(tmp_path / "download.bin", b"PK\x03\x04....word/document.xml")
    assert not adapter.supports(tmp_path / "archive.zip", b"PK\x03\x04....xl/workbook.xml")
    assert not adapter.supports(tmp_path / "report.pdf", b"%PDF-1.7")
