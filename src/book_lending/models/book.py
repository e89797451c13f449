"""
Book model for the Book Lending Tracker.

A book is a lendable catalog title. Its author list is free text; the
repository reconciles it against the authors table on every write.
"""

from datetime import datetime
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Book(BaseModel):
    """
    Represents a book in the catalog.

    ``is_available`` is ``None`` only on objects that have not been persisted
    yet; books read back from the store always carry a concrete flag.
    """

    id: UUID = Field(
        default_factory=uuid4,
        description="Opaque unique identifier of the book",
    )

    name: str = Field(
        ...,
        description="Title of the book",
        min_length=1,
        max_length=500,
        examples=["Dune", "The Left Hand of Darkness"],
    )

    authors: list[str] = Field(
        default_factory=list,
        description="Author names; order is not significant",
        examples=[["Frank Herbert"], ["Terry Pratchett", "Neil Gaiman"]],
    )

    year: int = Field(
        ...,
        description="Publication year",
        le=datetime.now().year + 1,
        examples=[1965, 1969],
    )

    is_available: bool | None = Field(
        default=True,
        description="Whether the book can currently be taken",
    )

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Book name cannot be blank")
        return v

    @field_validator("authors", mode="before")
    @classmethod
    def normalize_authors(cls, v):
        """Trim names, drop blanks and collapse repeated names."""
        if v is None:
            return []
        if isinstance(v, str):
            v = [v]
        seen: list[str] = []
        for name in v:
            if not isinstance(name, str):
                raise ValueError("Author names must be strings")
            name = name.strip()
            if name and name not in seen:
                seen.append(name)
        return seen

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": "3f1b7e0c-1c7a-4b36-9d5e-2f0d5c1a9e10",
                "name": "Dune",
                "authors": ["Frank Herbert"],
                "year": 1965,
                "is_available": True,
            }
        }
    )
