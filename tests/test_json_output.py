import pytest
from pydantic import BaseModel

from llm_support.shared.json_output import (
    JsonOutputError,
    parse_json_output,
    remove_json_wrapper,
)


class Answer(BaseModel):
    answer: str
    confidence: float = 0.0


@pytest.mark.parametrize(
    "raw, expected",
    [
        ('```json\n{"answer": "hi"}\n```', '{"answer": "hi"}'),
        ('```\n{"answer": "hi"}\n```', '{"answer": "hi"}'),
        ('```json{"answer": "hi"}```', '{"answer": "hi"}'),
        ('  {"answer": "hi"}\n', '{"answer": "hi"}'),
        ('```json\n{"answer": "hi"}\n```\nLet me know if you need more.', '{"answer": "hi"}'),
    ],
)
def test_remove_json_wrapper(raw, expected):
    assert remove_json_wrapper(raw) == expected


def test_remove_json_wrapper_keeps_inner_json_word():
    raw = '```json\n{"format": "json\\n"}\n```'
    assert remove_json_wrapper(raw) == '{"format": "json\\n"}'


def test_parse_json_output_validates_fenced_answer():
    result = parse_json_output('```json\n{"answer": "42", "confidence": 0.9}\n```', Answer)
    assert result == Answer(answer="42", confidence=0.9)


def test_parse_json_output_repairs_trailing_comma():
    result = parse_json_output('{"answer": "42",}', Answer)
    assert result.answer == "42"


def test_parse_json_output_raises_when_unrepairable():
    with pytest.raises(JsonOutputError):
        parse_json_output('{"confidence": 0.5}', Answer)
