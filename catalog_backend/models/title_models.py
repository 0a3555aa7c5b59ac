# Models for catalog source records (one row of netflix_titles)
from pydantic import BaseModel, field_validator
from typing import Any, Dict, List, Optional

# Column order of the catalog CSV and of the titles table
TITLE_COLUMNS: List[str] = [
    "show_id",
    "type",
    "title",
    "director",
    "cast",
    "country",
    "date_added",
    "release_year",
    "rating",
    "duration",
    "listed_in",
    "description",
]

# Fields concatenated, in this order, into the text that gets vectorized
VECTORIZED_FIELDS: List[str] = [
    "type",
    "title",
    "director",
    "cast",
    "country",
    "release_year",
    "rating",
    "duration",
    "listed_in",
    "description",
]


class SourceRecord(BaseModel):
    """One catalog item. Missing text fields become empty strings."""
    show_id: str
    type: str = ""
    title: str = ""
    director: str = ""
    cast: str = ""
    country: str = ""
    date_added: str = ""
    release_year: Optional[int] = None
    rating: str = ""
    duration: str = ""
    listed_in: str = ""
    description: str = ""

    @field_validator("show_id", mode="before")
    @classmethod
    def _key_as_string(cls, value: Any) -> str:
        if value is None:
            raise ValueError("show_id is required")
        key = str(value).strip()
        if not key:
            raise ValueError("show_id must not be empty")
        return key

    @field_validator(
        "type", "title", "director", "cast", "country", "date_added",
        "rating", "duration", "listed_in", "description",
        mode="before",
    )
    @classmethod
    def _blank_if_missing(cls, value: Any) -> str:
        if value is None:
            return ""
        return str(value).strip()

    @field_validator("release_year", mode="before")
    @classmethod
    def _parse_year(cls, value: Any) -> Optional[int]:
        if value is None or isinstance(value, bool):
            return None
        if isinstance(value, int):
            return value
        text = str(value).strip()
        if not text:
            return None
        try:
            return int(float(text))
        except (ValueError, OverflowError):
            return None

    def to_row(self) -> Dict[str, Any]:
        return self.model_dump()
