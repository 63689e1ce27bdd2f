from __future__ import annotations

import pytest

from chara_profile.schemas.validation import NameRequestError, validate_name_request


def test_name_is_trimmed():
    request = validate_name_request({"name": "  ルフィ  "})
    assert request.name == "ルフィ"


def test_full_width_space_is_trimmed():
    request = validate_name_request({"name": "　ナルト　"})
    assert request.name == "ナルト"


@pytest.mark.parametrize("name", ["", "   ", "\t\n"])
def test_empty_after_trim_is_required(name):
    with pytest.raises(NameRequestError) as exc_info:
        validate_name_request({"name": name})

    violation = exc_info.value.violations[0]
    assert violation.path == "name"
    assert violation.reason == "required"
    assert exc_info.value.details == {"form_errors": [], "field_errors": {"name": ["name is required"]}}


@pytest.mark.parametrize("length", [1, 2, 99, 100])
def test_length_within_limit_is_accepted(length):
    assert len(validate_name_request({"name": "あ" * length}).name) == length


@pytest.mark.parametrize("length", [101, 150])
def test_over_length_is_too_long(length):
    with pytest.raises(NameRequestError) as exc_info:
        validate_name_request({"name": "a" * length})

    violation = exc_info.value.violations[0]
    assert violation.path == "name"
    assert violation.reason == "too_long"
    assert exc_info.value.details["field_errors"] == {"name": ["name is too long"]}


def test_length_is_checked_after_trim():
    request = validate_name_request({"name": "   " + "a" * 100 + "   "})
    assert request.name == "a" * 100


def test_missing_name_references_name():
    with pytest.raises(NameRequestError) as exc_info:
        validate_name_request({"title": "ルフィ"})

    assert [v.path for v in exc_info.value.violations] == ["name"]
    assert "name" in exc_info.value.details["field_errors"]


@pytest.mark.parametrize("value", [123, 1.5, True, None, ["ルフィ"], {"first": "ルフィ"}])
def test_non_text_name_is_rejected(value):
    with pytest.raises(NameRequestError) as exc_info:
        validate_name_request({"name": value})

    assert exc_info.value.violations[0].path == "name"
    assert exc_info.value.violations[0].reason == "invalid_type"
    assert "name" in exc_info.value.details["field_errors"]


@pytest.mark.parametrize("raw", ["ルフィ", ["ルフィ"], None, 42])
def test_non_object_input_is_a_form_error(raw):
    with pytest.raises(NameRequestError) as exc_info:
        validate_name_request(raw)

    details = exc_info.value.details
    assert details["form_errors"]
    assert details["field_errors"] == {}


def test_unknown_keys_are_ignored():
    request = validate_name_request({"name": "ルフィ", "extra": 1})
    assert request.model_dump() == {"name": "ルフィ"}
