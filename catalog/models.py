"""
Recipe record plus the pydantic schemas collaborators use around it.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator

from catalog.errors import InvalidArgumentError


@dataclass
class Recipe:
    title: str = ""
    ingredients: list[str] = field(default_factory=list)
    instructions: str = ""
    cooking_time: Optional[int] = None
    category: Optional[str] = None
    created_by: Optional[str] = None
    id: Optional[str] = None

    def as_document(self) -> dict:
        """Stored document shape; ``id`` is left out until one is assigned."""
        doc: dict[str, Any] = {
            "title": self.title,
            "ingredients": list(self.ingredients),
            "instructions": self.instructions,
            "cookingTime": self.cooking_time,
            "category": self.category,
            "createdBy": self.created_by,
        }
        if self.id:
            doc["id"] = self.id
        return doc

    @classmethod
    def from_document(cls, doc: dict) -> "Recipe":
        return cls(
            id=doc.get("id"),
            title=doc.get("title") or "",
            ingredients=list(doc.get("ingredients") or []),
            instructions=doc.get("instructions") or "",
            cooking_time=doc.get("cookingTime"),
            category=doc.get("category"),
            created_by=doc.get("createdBy"),
        )


class RecipeInput(BaseModel):
    """Caller-supplied recipe details, validated before they reach the store."""

    title: str = Field(..., min_length=1)
    ingredients: list[str] = Field(..., min_length=1)
    instructions: str = Field(..., min_length=1)
    cooking_time: Optional[int] = Field(default=None, ge=1)
    category: Optional[str] = None

    @field_validator("title", "instructions")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value

    def to_recipe(self) -> Recipe:
        return Recipe(
            title=self.title,
            ingredients=list(self.ingredients),
            instructions=self.instructions,
            cooking_time=self.cooking_time,
            category=self.category,
        )


class RecipePage(BaseModel):
    content: list[Recipe]
    page_no: int
    page_size: int
    total_elements: int
    total_pages: int
    last: bool

    @classmethod
    def from_items(
        cls, items: list[Recipe], page_no: int = 0, page_size: int = 10
    ) -> "RecipePage":
        if page_no < 0:
            raise InvalidArgumentError(f"page_no must be >= 0, got {page_no}")
        if page_size < 1:
            raise InvalidArgumentError(f"page_size must be >= 1, got {page_size}")
        total = len(items)
        total_pages = math.ceil(total / page_size)
        start = page_no * page_size
        return cls(
            content=items[start : start + page_size],
            page_no=page_no,
            page_size=page_size,
            total_elements=total,
            total_pages=total_pages,
            last=page_no >= total_pages - 1,
        )
