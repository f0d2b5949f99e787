"""
CleanRecord model representing a validated movie ready for the warehouse.
"""

from typing import Any

from pydantic import BaseModel, Field

from src.core.schema import SCHEMA_COLUMNS


class CleanRecord(BaseModel):
    """
    A fully-typed movie row. Maps 1:1 to a row of the movie table.

    Attributes:
        primary_id: Business key (PK), always > 0
        title: Movie title
        year: Release year (0 when unknown)
        category: Genre
        duration: Running time in minutes
        origin: Production country
        score_average: Average vote
        score_critics: Critics vote
        score_public: Public vote
        vote_count: Total number of votes
    """

    primary_id: int = Field(..., gt=0)
    title: str
    year: int
    category: str
    duration: int
    origin: str
    score_average: float
    score_critics: float
    score_public: float
    vote_count: int

    class Config:
        strict = True
        frozen = True
        json_schema_extra = {
            "example": {
                "primary_id": 1,
                "title": "Example Movie",
                "year": 2021,
                "category": "Drama",
                "duration": 120,
                "origin": "USA",
                "score_average": 8.5,
                "score_critics": 9.0,
                "score_public": 8.0,
                "vote_count": 1000,
            }
        }

    def as_row(self) -> tuple[Any, ...]:
        """Column values in table order, for parameterized inserts."""
        return tuple(getattr(self, name) for name in SCHEMA_COLUMNS)
