import json

import pytest

from quiznova.errors import (
    AnswerMismatch,
    CountMismatch,
    DuplicateOptions,
    IncompleteQuestion,
    MalformedResponse,
)
from quiznova.normalizer import normalize_questions, repair_prefix, strip_fence
from tests.conftest import make_items


def test_plain_array_is_accepted():
    questions = normalize_questions(json.dumps(make_items(3)), 3)
    assert [q.text for q in questions] == ["Ocean question 1?", "Ocean question 2?", "Ocean question 3?"]
    for q in questions:
        assert len(q.options) == 4
        assert len(set(q.options)) == 4
        assert q.correct_answer in q.options


def test_fenced_reply_parses_like_unwrapped():
    raw = json.dumps(make_items(4), indent=2)
    fenced = f"```json\n{raw}\n```"
    assert normalize_questions(fenced, 4) == normalize_questions(raw, 4)


def test_fence_without_language_tag():
    raw = json.dumps(make_items(3))
    assert normalize_questions(f"```\n{raw}\n```", 3) == normalize_questions(raw, 3)


def test_strip_fence_leaves_unfenced_text_alone():
    assert strip_fence("  [1, 2]  ") == "[1, 2]"
    assert strip_fence("```json\n[1]\n```") == "[1]"


def test_text_around_array_is_ignored():
    raw = "Sure! Here is your quiz:\n" + json.dumps(make_items(3)) + "\nGood luck."
    assert len(normalize_questions(raw, 3)) == 3


@pytest.mark.parametrize("raw", ["no json here", "{\"questions\": 1}", "] backwards [", ""])
def test_missing_brackets_is_malformed(raw):
    with pytest.raises(MalformedResponse):
        normalize_questions(raw, 3)


def test_bad_json_is_malformed():
    with pytest.raises(MalformedResponse):
        normalize_questions('[{"text": "Q?", "options": [}]', 3)


def test_bare_letter_answer_expands_to_option():
    items = make_items(3)
    items[0]["correctAnswer"] = "B"
    items[1]["correctAnswer"] = "c"
    items[2]["correctAnswer"] = "(D)"
    questions = normalize_questions(json.dumps(items), 3)
    assert questions[0].correct_answer == "B) Atlantic"
    assert questions[1].correct_answer == "C) Indian"
    assert questions[2].correct_answer == "D) Arctic"


def test_missing_prefixes_are_added_per_position():
    items = make_items(3)
    items[0]["options"] = ["Pacific", "B) Atlantic", "Indian", "Arctic"]
    items[0]["correctAnswer"] = "B) Atlantic"
    questions = normalize_questions(json.dumps(items), 3)
    assert questions[0].options == ["A) Pacific", "B) Atlantic", "C) Indian", "D) Arctic"]


def test_repair_prefix_rewrites_loose_labels_for_same_position():
    assert repair_prefix("A. Pacific", 0) == "A) Pacific"
    assert repair_prefix("(B) Atlantic", 1) == "B) Atlantic"
    assert repair_prefix("c)Indian", 2) == "C) Indian"
    assert repair_prefix("D) Arctic", 3) == "D) Arctic"


def test_repair_prefix_does_not_treat_words_as_labels():
    assert repair_prefix("A.M. radio", 0) == "A) A.M. radio"
    assert repair_prefix("B) Atlantic", 0) == "A) B) Atlantic"


def test_answer_with_loose_label_matches_repaired_option():
    items = make_items(3)
    items[1]["options"] = ["A. Pacific", "B. Atlantic", "C. Indian", "D. Arctic"]
    items[1]["correctAnswer"] = "B. Atlantic"
    questions = normalize_questions(json.dumps(items), 3)
    assert questions[1].correct_answer == "B) Atlantic"


@pytest.mark.parametrize("field, value", [
    ("text", ""),
    ("text", None),
    ("options", ["A) one", "B) two", "C) three"]),
    ("options", "A) one"),
    ("options", ["A) one", "B) two", "", "D) four"]),
    ("correctAnswer", "   "),
])
def test_incomplete_question_reports_index(field, value):
    items = make_items(3)
    items[2][field] = value
    with pytest.raises(IncompleteQuestion) as exc:
        normalize_questions(json.dumps(items), 3)
    assert exc.value.index == 2
    assert exc.value.detail == {"index": 2}


def test_non_object_element_is_incomplete():
    items = make_items(3)
    items[1] = "not a question"
    with pytest.raises(IncompleteQuestion) as exc:
        normalize_questions(json.dumps(items), 3)
    assert exc.value.index == 1


def test_duplicate_options_rejected_even_with_labels():
    items = make_items(3)
    items[1]["options"] = ["Atlantic", "Atlantic", "Indian", "Arctic"]
    with pytest.raises(DuplicateOptions) as exc:
        normalize_questions(json.dumps(items), 3)
    assert exc.value.index == 1


def test_answer_not_in_options():
    items = make_items(3)
    items[0]["correctAnswer"] = "Atlantic"
    with pytest.raises(AnswerMismatch) as exc:
        normalize_questions(json.dumps(items), 3)
    assert exc.value.index == 0


@pytest.mark.parametrize("produced", [2, 4])
def test_count_mismatch(produced):
    with pytest.raises(CountMismatch) as exc:
        normalize_questions(json.dumps(make_items(produced)), 3)
    assert exc.value.expected == 3
    assert exc.value.actual == produced
    assert exc.value.detail == {"expected": 3, "actual": produced}


def test_whitespace_is_trimmed():
    items = make_items(3)
    items[0]["text"] = "  Padded?  "
    items[0]["options"] = [" A) Pacific ", "B) Atlantic", "C) Indian", "D) Arctic"]
    items[0]["correctAnswer"] = " A) Pacific "
    q = normalize_questions(json.dumps(items), 3)[0]
    assert q.text == "Padded?"
    assert q.options[0] == "A) Pacific"
    assert q.correct_answer == "A) Pacific"
