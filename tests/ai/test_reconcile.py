from __future__ import annotations

from dataclasses import dataclass

import pytest

from vpatflow.ai.reconcile import align_responses, parse_ai_json, strip_code_fence
from vpatflow.errors import RemoteProtocolError, ResponseParseError


@dataclass
class _Item:
    key: str


def test_strip_code_fence_removes_language_tagged_fence() -> None:
    assert strip_code_fence('```json\n[{"a": 1}]\n```') == '[{"a": 1}]'
    assert strip_code_fence("```\n{}\n```  ") == "{}"
    assert strip_code_fence("[1, 2]") == "[1, 2]"


def test_fenced_reply_parses_like_unfenced_reply() -> None:
    body = '[{"rowNumber": 2, "web": "Supports"}, {"rowNumber": 3, "web": "n/a"}]'

    assert parse_ai_json(f"```json\n{body}\n```") == parse_ai_json(body)


def test_single_object_is_wrapped_in_list() -> None:
    assert parse_ai_json('{"reqId": "E-07"}') == [{"reqId": "E-07"}]


def test_json_embedded_in_prose_is_extracted() -> None:
    reply = 'Here are the results:\n[{"reqId": "E-01", "response": "Yes"}]\nLet me know if you need more.'

    assert parse_ai_json(reply) == [{"reqId": "E-01", "response": "Yes"}]


def test_truncated_array_keeps_complete_elements() -> None:
    reply = '[{"reqId": "E-01", "response": "Yes"}, {"reqId": "E-02", "response": "No"}, {"reqId": "E-03", "resp'

    assert parse_ai_json(reply) == [
        {"reqId": "E-01", "response": "Yes"},
        {"reqId": "E-02", "response": "No"},
    ]


def test_truncated_array_with_nested_objects_is_salvaged() -> None:
    reply = '```json\n[{"a": {"b": 1}}, {"a": {"b": 2}}, {"a": {"b": 3'

    assert parse_ai_json(reply) == [{"a": {"b": 1}}, {"a": {"b": 2}}]


def test_unrecoverable_reply_raises_parse_error_with_raw_content() -> None:
    with pytest.raises(ResponseParseError) as exc_info:
        parse_ai_json("I could not analyze this document.")

    assert exc_info.value.raw_content == "I could not analyze this document."
    assert isinstance(exc_info.value, RemoteProtocolError)
    assert "Response length" in str(exc_info.value)


def test_align_prefers_identity_then_position() -> None:
    requests = [_Item("E-01"), _Item("E-02"), _Item("E-03")]
    responses = [
        {"reqId": "E-02", "response": "second"},
        {"response": "no id"},
        {"reqId": "E-01", "response": "first"},
    ]

    aligned = align_responses(requests, responses, request_key=lambda item: item.key, response_key="reqId")

    assert [entry.get("response") for entry in aligned] == ["first", "second", "first"]


def test_align_output_matches_request_length_and_order() -> None:
    requests = [_Item(str(row)) for row in (4, 5, 6, 7)]

    short = align_responses(requests, [{"rowNumber": 6, "web": "Supports"}], request_key=lambda i: i.key, response_key="rowNumber")
    long = align_responses(
        requests[:1],
        [{"rowNumber": 9}, {"rowNumber": 4, "web": "Supports"}, {"rowNumber": 5}],
        request_key=lambda i: i.key,
        response_key="rowNumber",
    )

    assert len(short) == 4
    assert short[2] == {"rowNumber": 6, "web": "Supports"}
    assert short[0] == {"rowNumber": 6, "web": "Supports"}
    assert short[1] == {} and short[3] == {}
    assert long == [{"rowNumber": 4, "web": "Supports"}]


def test_align_treats_non_objects_as_missing() -> None:
    aligned = align_responses([_Item("a"), _Item("b")], ["oops", None], request_key=lambda i: i.key, response_key="id")

    assert aligned == [{}, {}]


def test_align_falls_back_to_position_when_identity_missing() -> None:
    aligned = align_responses(
        [_Item("E-01"), _Item("E-02")],
        [{"reqId": "E-01", "response": "Yes"}, {"response": "no id"}],
        request_key=lambda item: item.key,
        response_key="reqId",
    )

    assert aligned == [{"reqId": "E-01", "response": "Yes"}, {"response": "no id"}]
