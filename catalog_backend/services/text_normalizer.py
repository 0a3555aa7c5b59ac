# Text normalization and the record/query text builders fed to the vectorizer
import re
from typing import Any, Mapping, Optional, Union

from catalog_backend.models.title_models import SourceRecord, VECTORIZED_FIELDS

# Everything outside a-z, digits, whitespace and lowercase Latin accented letters
_DISALLOWED = re.compile(r"[^a-z0-9\sà-öø-ÿßā-ž]")

QUERY_FIELDS = ["type", "genre", "tone", "duration", "country", "query"]


def normalize_text(text: Optional[str]) -> str:
    """
    Lowercase and delete (not replace) every character outside the allowed set.
    Idempotent: normalizing normalized text returns it unchanged.
    """
    if not text:
        return ""
    return _DISALLOWED.sub("", text.lower())


def build_record_text(record: Union[SourceRecord, Mapping[str, Any]]) -> str:
    """
    Concatenate a record's descriptive fields in a fixed order with single spaces.
    Absent values count as empty strings.
    """
    if isinstance(record, SourceRecord):
        record = record.model_dump()

    parts = []
    for field in VECTORIZED_FIELDS:
        value = record.get(field)
        parts.append("" if value is None else str(value))
    return " ".join(parts)


def build_query_text(criteria: Union[Mapping[str, Any], Any]) -> str:
    """
    Join the selected criteria (type, genre, tone, duration, country, free text)
    in that order; unselected criteria are skipped.
    """
    if not isinstance(criteria, Mapping):
        criteria = criteria.model_dump()

    parts = []
    for field in QUERY_FIELDS:
        value = criteria.get(field)
        if value is not None and str(value).strip():
            parts.append(str(value).strip())
    return " ".join(parts)
