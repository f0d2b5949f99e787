"""
RawRecord model representing one ingested CSV row before cleaning (ephemeral).
"""

from pydantic import BaseModel


class RawRecord(BaseModel):
    """
    A loosely-typed movie row as produced by the CSV reader.

    Every field is optional. None means the cell was missing from the row or
    could not be coerced to the column type; it is distinct from 0 or "".

    Attributes:
        primary_id: Movie identifier (FilmTV id)
        title: Movie title
        year: Release year
        category: Genre
        duration: Running time in minutes
        origin: Production country
        score_average: Average vote
        score_critics: Critics vote
        score_public: Public vote
        vote_count: Total number of votes
        directors, actors, description, notes: Free text, not persisted
        humor, rhythm, effort, tension, erotism: Rating components, not persisted
    """

    primary_id: int | None = None
    title: str | None = None
    year: int | None = None
    category: str | None = None
    duration: int | None = None
    origin: str | None = None
    directors: str | None = None
    actors: str | None = None
    score_average: float | None = None
    score_critics: float | None = None
    score_public: float | None = None
    vote_count: int | None = None
    description: str | None = None
    notes: str | None = None
    humor: int | None = None
    rhythm: int | None = None
    effort: int | None = None
    tension: int | None = None
    erotism: int | None = None

    class Config:
        strict = True
        extra = "ignore"
        json_schema_extra = {
            "example": {
                "primary_id": 2,
                "title": "Another Movie",
                "year": None,
                "category": "Comedy",
                "duration": 90,
                "origin": "",
                "score_average": 7.5,
                "score_critics": 8.0,
                "score_public": 7.0,
                "vote_count": 500,
                "humor": 6,
            }
        }
