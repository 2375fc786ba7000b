"""
Request/response models for the catalog API.

Wire names are camelCase (``coreConcepts``, ``categoryId``, ``createdAt``);
attributes are snake_case. Unknown request fields are ignored.
"""

from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

SolutionType = Literal["query", "implementation", "documentation"]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


# ============= Category =============


class Specification(CamelModel):
    """Fixed-shape category specification; both sequences are always present."""

    definition: str
    core_concepts: list[str]
    properties: list[str]


class CategoryCreate(CamelModel):
    name: str = Field(..., min_length=1)
    description: str
    icon: str
    specification: Specification


class CategoryUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    icon: Optional[str] = None
    specification: Optional[Specification] = None


class Category(CamelModel):
    id: str
    name: str
    description: str
    icon: str
    specification: Specification
    created_at: datetime


# ============= Dataset =============


class Dataset(CamelModel):
    id: str
    category_id: str
    name: str
    filename: str
    size: str = Field(..., description="Human-readable size, e.g. '2.4 MB'")
    uploaded_at: datetime


# ============= Solution =============


class SolutionCreate(CamelModel):
    """Solution body; ``categoryId`` always comes from the URL path."""

    title: str
    language: str
    code: str
    type: SolutionType = "query"


class SolutionUpdate(CamelModel):
    category_id: Optional[str] = None
    title: Optional[str] = None
    language: Optional[str] = None
    code: Optional[str] = None
    type: Optional[SolutionType] = None


class Solution(CamelModel):
    id: str
    category_id: str
    title: str
    language: str
    code: str
    type: str


def specification_to_record(spec: Specification) -> dict:
    """Store the specification with its wire (camelCase) keys."""
    return spec.model_dump(by_alias=True)
