"""Tests for the product model name rules."""
from __future__ import annotations

import pytest

from manualhub.errors import ValidationError
from manualhub.services.name_validator import (
    ModelNameError,
    NameRejection,
    contains_forbidden_script,
    ensure_model_name_available,
    parse_codepoint_ranges,
    validate_model_name,
)
from manualhub.models import ProductModel


@pytest.mark.parametrize("name", [None, "", "   ", "\t\n"])
def test_blank_names_are_rejected_as_empty(name):
    with pytest.raises(ModelNameError) as excinfo:
        validate_model_name(name, name_exists=lambda _: False)
    assert excinfo.value.reason is NameRejection.EMPTY_NAME


@pytest.mark.parametrize("name", ["a", "ab", "  ab  ", "가나", " ㄱ "])
def test_short_names_are_rejected(name):
    with pytest.raises(ModelNameError) as excinfo:
        validate_model_name(name, name_exists=lambda _: False)
    assert excinfo.value.reason is NameRejection.TOO_SHORT


def test_hangul_characters_are_rejected():
    with pytest.raises(ModelNameError) as excinfo:
        validate_model_name("프린터-200", name_exists=lambda _: False)
    assert excinfo.value.reason is NameRejection.FORBIDDEN_SCRIPT

    with pytest.raises(ModelNameError) as jamo:
        validate_model_name("PRNT-ㄱ", name_exists=lambda _: False)
    assert jamo.value.reason is NameRejection.FORBIDDEN_SCRIPT


def test_duplicate_lookup_runs_only_after_local_checks():
    calls: list[str] = []

    def _exists(candidate: str) -> bool:
        calls.append(candidate)
        return True

    with pytest.raises(ModelNameError) as excinfo:
        validate_model_name("ab", name_exists=_exists)
    assert excinfo.value.reason is NameRejection.TOO_SHORT
    assert calls == []

    with pytest.raises(ModelNameError) as duplicate:
        validate_model_name("PRNT-200", name_exists=_exists)
    assert duplicate.value.reason is NameRejection.DUPLICATE_NAME
    assert duplicate.value.status_code == 409
    assert calls == ["PRNT-200"]


def test_valid_name_is_returned_unchanged():
    assert validate_model_name("PRNT-200", name_exists=lambda _: False) == "PRNT-200"
    assert validate_model_name("Ärger 3000", name_exists=lambda _: False) == "Ärger 3000"


def test_model_name_error_is_a_validation_error():
    with pytest.raises(ValidationError):
        validate_model_name("", name_exists=None)


def test_custom_ranges_override_the_default():
    ranges = parse_codepoint_ranges("0041-005A")
    assert ranges == ((0x41, 0x5A),)
    assert contains_forbidden_script("abc", ranges) is False
    with pytest.raises(ModelNameError) as excinfo:
        validate_model_name("abC", forbidden_ranges=ranges)
    assert excinfo.value.reason is NameRejection.FORBIDDEN_SCRIPT
    # Hangul passes once the default ranges are replaced.
    assert validate_model_name("프린터", forbidden_ranges=ranges) == "프린터"


@pytest.mark.parametrize("raw", ["zz-10", "20-10"])
def test_invalid_range_strings_raise(raw):
    with pytest.raises(ValueError):
        parse_codepoint_ranges(raw)


def test_duplicate_check_is_case_sensitive_and_can_exclude_a_model(db_session):
    model = ProductModel(name="PRNT-200")
    db_session.add(model)
    db_session.commit()

    assert ensure_model_name_available(db_session, "prnt-200") == "prnt-200"
    with pytest.raises(ModelNameError) as excinfo:
        ensure_model_name_available(db_session, "PRNT-200")
    assert excinfo.value.reason is NameRejection.DUPLICATE_NAME

    assert ensure_model_name_available(db_session, "PRNT-200", exclude_model_id=model.id) == "PRNT-200"
