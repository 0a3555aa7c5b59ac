# Data classes for storing vector embeddings
import ast
from pydantic import BaseModel, field_validator
from typing import Any, Dict, List

# Display fields copied from the source row so results render without a join
DISPLAY_FIELDS: List[str] = ["title", "type", "listed_in", "description"]


class EmbeddingRecord(BaseModel):
    show_id: str
    title: str = ""
    type: str = ""
    listed_in: str = ""
    description: str = ""
    embedding: List[float]

    @field_validator("title", "type", "listed_in", "description", mode="before")
    @classmethod
    def _blank_if_missing(cls, value: Any) -> str:
        return "" if value is None else str(value)

    @field_validator("embedding", mode="before")
    @classmethod
    def _parse_embedding(cls, value: Any) -> List[float]:
        # Older rows hold the vector as its text representation
        if isinstance(value, str):
            text = value.strip()
            # Postgres array literal: {0.1,0.2}
            if text.startswith("{") and text.endswith("}"):
                text = "[" + text[1:-1] + "]"
            try:
                value = ast.literal_eval(text)
            except (ValueError, SyntaxError) as e:
                raise ValueError(f"embedding text is not a list of numbers: {value[:40]!r}") from e
        if hasattr(value, "tolist"):
            value = value.tolist()
        if not isinstance(value, (list, tuple)):
            raise ValueError(f"embedding must be a list of numbers, got {type(value).__name__}")
        try:
            return [float(x) for x in value]
        except (TypeError, ValueError) as e:
            raise ValueError(f"embedding must be a list of numbers: {str(e)}") from e

    def to_row(self) -> Dict[str, Any]:
        return self.model_dump()


class RankedResult(BaseModel):
    """One scored recommendation. Never persisted."""
    show_id: str
    title: str
    type: str
    listed_in: str
    description: str
    similarity: float
