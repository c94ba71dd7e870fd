"""Typed models for defects, retrieval hits and duplicate reports.

``Defect`` and ``DuplicateReport`` are validated with pydantic so that a
malformed LLM payload surfaces as a ``ValidationError`` instead of a
half-populated object.  Keys are matched case-insensitively (``IsDuplicate``,
``isDuplicate`` and ``is_duplicate`` are all accepted); the on-disk format
always uses the PascalCase aliases.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _fold(key: str) -> str:
    return key.replace("_", "").lower()


def normalize_keys(payload: Dict[str, Any], model: type) -> Dict[str, Any]:
    """Rename keys of ``payload`` to the aliases declared on ``model``.

    Keys that do not match any field are kept as-is so the model's own
    ``extra`` policy decides what happens to them.
    """
    if not isinstance(payload, dict):
        raise ValueError(f"Expected JSON object, got {type(payload).__name__}")

    canonical = {}
    for name, info in model.model_fields.items():
        alias = info.alias or name
        canonical[_fold(alias)] = alias
        canonical[_fold(name)] = alias

    return {canonical.get(_fold(str(key)), key): value for key, value in payload.items()}


class Defect(BaseModel):
    """A tracked software issue record."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    id: int = Field(alias="Id")
    summary: str = Field("", alias="Summary")
    description: str = Field("", alias="Description")
    severity: str = Field("", alias="Severity")
    status: str = Field("", alias="Status")
    resolution: str = Field("", alias="Resolution")
    keywords: List[str] = Field(default_factory=list, alias="Keywords")
    component: str = Field("", alias="Component")
    priority: str = Field("", alias="Priority")
    comments: List[str] = Field(default_factory=list, alias="Comments")

    @field_validator(
        "summary", "description", "severity", "status",
        "resolution", "component", "priority",
        mode="before",
    )
    @classmethod
    def _none_to_empty(cls, v):
        return "" if v is None else v

    @field_validator("keywords", "comments", mode="before")
    @classmethod
    def _none_to_list(cls, v):
        return [] if v is None else v

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "Defect":
        return cls.model_validate(normalize_keys(payload, cls))

    def embedding_text(self) -> str:
        """Text that is embedded and stored as ``fullText``."""
        return f"{self.summary}. {self.description}"


@dataclass(frozen=True)
class SimilarDefect:
    """Projection of a stored defect returned by a similarity query.

    Attributes:
        id: Stored ``defectId`` (``"unknown"`` if the hit had none).
        summary: Stored summary.
        description: Stored description.
        score: Similarity in [0, 1], ``1 - distance``.
    """

    id: str
    summary: str
    description: str
    score: float


class DuplicateReport(BaseModel):
    """Verdict produced by the duplicate adjudicator."""

    model_config = ConfigDict(populate_by_name=True, extra="forbid", frozen=True)

    is_duplicate: bool = Field(alias="IsDuplicate")
    reason: str = Field(alias="Reason")
    defects: List[Defect] = Field(default_factory=list, alias="Defects")
    confidence: float = Field(alias="Confidence", ge=0.0, le=1.0)

    @field_validator("defects", mode="before")
    @classmethod
    def _normalize_defects(cls, v):
        if v is None:
            return []
        if isinstance(v, list):
            return [
                normalize_keys(item, Defect) if isinstance(item, dict) else item
                for item in v
            ]
        return v

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "DuplicateReport":
        """Validate a decoded JSON object (LLM output or saved report)."""
        return cls.model_validate(normalize_keys(payload, cls))

    @classmethod
    def fail_closed(cls, reason: str) -> "DuplicateReport":
        """Conservative verdict used whenever adjudication cannot complete."""
        return cls(is_duplicate=False, reason=reason, defects=[], confidence=0.0)

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2, ensure_ascii=False)
