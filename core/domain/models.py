"""
Domain models for patient tracking.

These models represent the core business concepts and are framework-agnostic.
They use Pydantic for validation at the store boundary; everything downstream
of the Record Store receives already-normalized values.
"""

from datetime import UTC, datetime
from enum import Enum
from typing import Literal
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Condition(str, Enum):
    """The fixed condition buckets used by reports and the dashboard."""

    DIABETES = "Diabetes"
    THYROID = "Thyroid"
    HIGH_BLOOD_PRESSURE = "High Blood Pressure"


class Gender(str, Enum):
    """Choices offered by the gender radio group."""

    MALE = "Male"
    FEMALE = "Female"
    OTHER = "Other"


class SortKey(str, Enum):
    """Options of the sort selector."""

    NONE = "none"
    NAME = "name"
    AGE = "age"
    CONDITION = "condition"


# Bucket order is part of the observable contract (chart labels, cards).
BUCKETS: tuple[Condition, ...] = (
    Condition.DIABETES,
    Condition.THYROID,
    Condition.HIGH_BLOOD_PRESSURE,
)


def new_record_id() -> str:
    return uuid4().hex


def utc_timestamp() -> str:
    """ISO-8601 UTC timestamp with millisecond precision and a Z suffix."""
    return datetime.now(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class PatientFields(BaseModel):
    """User-editable patient fields, normalized at the store boundary."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    gender: Gender
    age: int = Field(ge=0)
    condition: Condition

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, v: object) -> object:
        return v.strip() if isinstance(v, str) else v

    @field_validator("age", mode="before")
    @classmethod
    def normalize_age(cls, v: object) -> object:
        # Form input arrives as text; floats and bools are not ages.
        if isinstance(v, bool):
            raise ValueError("age must be a whole number")
        if isinstance(v, str):
            text = v.strip()
            if not text.isdigit():
                raise ValueError("age must be a whole number")
            return int(text)
        if isinstance(v, float):
            raise ValueError("age must be a whole number")
        return v


class PatientRecord(PatientFields):
    """A stored patient. Immutable; updates replace the record in the store."""

    id: str = Field(default_factory=new_record_id, min_length=1)
    added: str = Field(default_factory=utc_timestamp)

    def with_fields(self, fields: PatientFields) -> "PatientRecord":
        """Copy with every editable field replaced; id and added are preserved."""
        return self.model_copy(update=fields.model_dump())


class ConditionReference(BaseModel):
    """One entry of the static condition reference dataset."""

    model_config = ConfigDict(frozen=True)

    name: str
    imagesrc: str | None = None
    symptoms: list[str] = Field(default_factory=list)
    prevention: list[str] = Field(default_factory=list)
    treatment: str = ""


class ConditionDataset(BaseModel):
    """Shape of the reference document: {"conditions": [...]}."""

    conditions: list[ConditionReference]


class ConditionReport(BaseModel):
    """Condition counts over the full store."""

    model_config = ConfigDict(frozen=True)

    total: int = Field(ge=0)
    per_condition: dict[Condition, int]

    def summary_text(self) -> str:
        counts = self.per_condition
        return (
            f"Total: {self.total}\n"
            f"Diabetes: {counts[Condition.DIABETES]} | "
            f"Thyroid: {counts[Condition.THYROID]} | "
            f"High BP: {counts[Condition.HIGH_BLOOD_PRESSURE]}"
        )


class SummaryCards(BaseModel):
    """Fixed-shape summary shown as four cards: Total, Diabetes, Thyroid, High BP."""

    model_config = ConfigDict(frozen=True)

    total: int
    diabetes: int
    thyroid: int
    high_bp: int

    def cards(self) -> list[tuple[str, int]]:
        return [
            ("Total", self.total),
            ("Diabetes", self.diabetes),
            ("Thyroid", self.thyroid),
            ("High BP", self.high_bp),
        ]


class RecentItem(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    condition: Condition
    age: int


class DashboardProjection(BaseModel):
    """Chart-ready series derived from the store."""

    model_config = ConfigDict(frozen=True)

    distribution: dict[Condition, int]
    age_averages: dict[Condition, int]
    summary: SummaryCards
    recent: list[RecentItem]


class ChartDataset(BaseModel):
    model_config = ConfigDict(frozen=True)

    data: list[int]
    label: str | None = None


class ChartSpec(BaseModel):
    """Definition handed to the charting collaborator for one canvas."""

    model_config = ConfigDict(frozen=True)

    canvas_id: str
    chart_type: Literal["pie", "bar"]
    labels: list[str]
    datasets: list[ChartDataset]
    responsive: bool = True
