# diagnosis/models.py
"""
Diagnosis report models.

The report is the JSON object the vision model is asked to return. Field
aliases keep the camelCase wire format; attributes are snake_case.
Reports are immutable after creation.
"""
from __future__ import annotations

from enum import Enum
from typing import List

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Level(str, Enum):
    """Shared low/medium/high scale for risk, severity and priority."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


def normalize_level(value):
    # Models sometimes answer "Low" or " medium "
    if isinstance(value, str):
        return value.strip().lower()
    return value


class Disease(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    probability: int = Field(ge=0, le=100)
    severity: Level

    @field_validator("severity", mode="before")
    @classmethod
    def lowercase_severity(cls, value):
        return normalize_level(value)


class Recommendation(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str
    description: str
    priority: Level

    @field_validator("priority", mode="before")
    @classmethod
    def lowercase_priority(cls, value):
        return normalize_level(value)


class Medication(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    dosage: str
    frequency: str
    duration: str
    purpose: str


class DiagnosisReport(BaseModel):
    """
    Structured pet health report.

    Sequences keep the order the model returned them in.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    health_score: int = Field(alias="healthScore", ge=0, le=100)
    risk_level: Level = Field(alias="riskLevel")
    diagnosis: str
    description: str
    diseases: List[Disease] = Field(default_factory=list)
    recommendations: List[Recommendation] = Field(default_factory=list)
    medications: List[Medication] = Field(default_factory=list)

    @field_validator("risk_level", mode="before")
    @classmethod
    def lowercase_risk_level(cls, value):
        return normalize_level(value)

    def to_dict(self) -> dict:
        """Wire format (camelCase, enums as plain strings)."""
        return self.model_dump(by_alias=True, mode="json")
