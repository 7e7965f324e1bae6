"""Tests for the Result type and patient domain models."""

import pytest
from hypothesis import given
from hypothesis import strategies as st

from core.domain.errors import EmptyStoreError, NotFoundError, ValidationError
from core.domain.models import (
    Condition,
    ConditionReport,
    Gender,
    PatientFields,
    PatientRecord,
    SummaryCards,
)
from core.domain.result import Result


class TestResult:
    """Test the Result type for explicit error handling."""

    def test_result_ok_creates_successful_result(self) -> None:
        result: Result[str, Exception] = Result.ok("success")
        assert result.is_ok()
        assert not result.is_err()
        assert result.unwrap() == "success"

    def test_result_error_creates_failed_result(self) -> None:
        error = EmptyStoreError()
        result: Result[bytes, EmptyStoreError] = Result.err(error)
        assert not result.is_ok()
        assert result.is_err()
        assert result.unwrap_err() is error

    def test_unwrap_raises_on_error_result(self) -> None:
        result: Result[str, NotFoundError] = Result.err(NotFoundError("abc"))

        with pytest.raises(NotFoundError, match="abc"):
            result.unwrap()

    def test_unwrap_err_on_ok_raises(self) -> None:
        with pytest.raises(ValueError):
            Result.ok(1).unwrap_err()

    def test_ok_may_carry_none(self) -> None:
        result: Result[None, Exception] = Result.ok(None)
        assert result.is_ok()
        assert result.unwrap() is None
        assert repr(result) == "Result.ok(None)"


class TestPatientFields:
    @given(age=st.integers(min_value=0, max_value=130))
    def test_age_text_is_normalized_to_int(self, age: int) -> None:
        fields = PatientFields(
            name="Sara Ali", gender="Female", age=str(age), condition="Thyroid"
        )
        assert fields.age == age
        assert isinstance(fields.age, int)

    @pytest.mark.parametrize("age", ["abc", "4.5", "-3", -1, 4.0, True])
    def test_non_numeric_or_negative_age_rejected(self, age: object) -> None:
        with pytest.raises(ValueError):
            PatientFields(name="Sara Ali", gender="Female", age=age, condition="Thyroid")

    def test_name_is_stripped(self) -> None:
        fields = PatientFields(name="  Aisha Khan ", gender="Female", age=52, condition="Diabetes")
        assert fields.name == "Aisha Khan"

    def test_unknown_condition_rejected(self) -> None:
        with pytest.raises(ValueError):
            PatientFields(name="Aisha", gender="Female", age=52, condition="Migraine")

    def test_enums_parse_from_form_values(self) -> None:
        fields = PatientFields(
            name="Bilal", gender="Male", age=45, condition="High Blood Pressure"
        )
        assert fields.gender is Gender.MALE
        assert fields.condition is Condition.HIGH_BLOOD_PRESSURE


class TestPatientRecord:
    def test_record_gets_id_and_timestamp(self) -> None:
        record = PatientRecord(name="Sara", gender="Female", age=30, condition="Thyroid")
        assert record.id
        assert record.added.endswith("Z")

    def test_record_is_immutable(self) -> None:
        record = PatientRecord(name="Sara", gender="Female", age=30, condition="Thyroid")
        with pytest.raises(ValueError, match="frozen"):
            record.age = 31  # type: ignore

    def test_with_fields_keeps_id_and_added(self) -> None:
        record = PatientRecord(name="Sara", gender="Female", age=30, condition="Thyroid")
        changed = record.with_fields(
            PatientFields(name="Sara A.", gender="Other", age=31, condition="Diabetes")
        )
        assert changed.id == record.id
        assert changed.added == record.added
        assert (changed.name, changed.gender, changed.age, changed.condition) == (
            "Sara A.",
            Gender.OTHER,
            31,
            Condition.DIABETES,
        )


def test_report_summary_text() -> None:
    report = ConditionReport(
        total=4,
        per_condition={
            Condition.DIABETES: 2,
            Condition.THYROID: 1,
            Condition.HIGH_BLOOD_PRESSURE: 1,
        },
    )
    assert report.summary_text() == "Total: 4\nDiabetes: 2 | Thyroid: 1 | High BP: 1"


def test_summary_cards_order() -> None:
    cards = SummaryCards(total=3, diabetes=1, thyroid=1, high_bp=1).cards()
    assert [label for label, _ in cards] == ["Total", "Diabetes", "Thyroid", "High BP"]


def test_validation_error_names_fields() -> None:
    error = ValidationError(["name", "age"])
    assert error.fields == ["name", "age"]
    assert "name, age" in str(error)
