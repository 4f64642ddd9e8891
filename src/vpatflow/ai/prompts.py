"""Work items sent to the AI provider and the batch messages built from them."""

from __future__ import annotations

from dataclasses import dataclass
import json
from typing import Sequence

_RULER = "=" * 80

DEFAULT_QUALITY_PROMPT = """You are a VPAT (Voluntary Product Accessibility Template) quality assurance expert.

Your task is to analyze VPAT documents and answer specific quality checklist questions.

For each question, you will receive:
1. The question text
2. Expected response type (e.g., Date, Yes/No, Short Text)
3. Optional AI guidelines with specific instructions or hints
4. Optional VPAT section name to focus on

Guidelines:
- "response": Answer ONLY according to the response type requested
  - For Yes/No questions: answer only "Yes" or "No"
  - For Date questions: provide just the date (e.g., "March 2024") or "Not Found"
  - For Short Text: provide brief text answer
- "originalFromVpat": Provide the EXACT quote from the VPAT document that supports your answer
  - Copy the text verbatim
  - If not found, use empty string
- "explanation": Explain your reasoning and interpretation
  - Why did you answer this way?
  - What made you confident or uncertain?
  - Any relevant context or nuances

Return your responses in a structured JSON format with these three separate fields."""


@dataclass(frozen=True, slots=True)
class RowInterpretationItem:
    """One populated VPAT row awaiting interpretation."""

    row_number: int
    criteria: str
    conformance_level: str
    remarks: str


@dataclass(frozen=True, slots=True)
class QualityRequirement:
    """One checklist question from the quality requirements sheet."""

    req_id: str
    question: str
    row_index: int
    ai_guidelines: str = ""
    response_type: str = ""
    criteria_num: int = 0
    criteria_name: str = ""
    impact: str = ""
    requirement_type: str = ""


_INTERPRETATION_SHAPE = {
    "rowNumber": 12,
    "conformanceLevel": "Supports|Partially Supports|Does Not Support|Not Applicable|Not Evaluated",
    "web": "...",
    "electronicDocs": "...",
    "software": "...",
    "closed": "...",
    "authoring": "...",
    "comment": "Brief explanation of interpretation",
    "confidence": 85,
}

_QUALITY_SHAPE = {
    "reqId": "E-07",
    "response": "Your direct answer ONLY based on Response Type (e.g., just 'Yes', 'March 2024', or brief text)",
    "originalFromVpat": "Exact quote from VPAT document if found, otherwise empty string",
    "explanation": "Your reasoning and interpretation that led to this answer",
    "confidence": 85,
}


def build_interpretation_message(items: Sequence[RowInterpretationItem]) -> str:
    lines = ["Analyze the following VPAT entries and return a JSON array with interpretations:", ""]

    for index, item in enumerate(items):
        lines.append(f"Entry {index}:")
        lines.append(f"rowNumber: {item.row_number}")
        if item.criteria:
            lines.append(f"Criteria: {item.criteria}")
        lines.append(f"Conformance Level: {item.conformance_level}")
        lines.append(f"Remarks: {item.remarks}")
        lines.append("")

    lines.append(
        f"Return a JSON array with exactly {len(items)} objects (one object per entry, in the same order, "
        "echoing each entry's rowNumber) with this structure for each:"
    )
    lines.append(json.dumps(_INTERPRETATION_SHAPE, indent=2))
    return "\n".join(lines)


def build_quality_message(requirements: Sequence[QualityRequirement], document_text: str) -> str:
    """Combine the document and one batch of checklist questions into a single message."""

    lines = [
        "VPAT Document Content:",
        _RULER,
        document_text,
        _RULER,
        "",
        "Analyze the document above and answer the following quality checklist questions.",
        "",
    ]

    for index, requirement in enumerate(requirements):
        lines.append(f"Question {index}:")
        lines.append(f"Req ID: {requirement.req_id}")
        lines.append(f"Question: {requirement.question}")
        if requirement.response_type:
            lines.append(f"Expected Response Type: {requirement.response_type}")
        if requirement.criteria_name:
            lines.append(f"VPAT Section to Check: {requirement.criteria_name}")
        if requirement.ai_guidelines:
            lines.append(f"AI Guidelines: {requirement.ai_guidelines}")
        lines.append("")

    lines.append(
        f"Return a JSON array with {len(requirements)} objects (one per question, in the same order):"
    )
    shape = json.dumps(_QUALITY_SHAPE, indent=2)
    lines.append("[")
    lines.extend(f"  {line}" for line in shape.splitlines())
    lines[-1] += ","
    lines.append("  ...")
    lines.append("]")
    return "\n".join(lines)
