# Parsing of uploaded catalog CSV files into source records
import csv
import io
import logging
from typing import Any, Dict, Iterable, List

from pydantic import ValidationError

from catalog_backend.exceptions import InvalidRequestError
from catalog_backend.models.title_models import SourceRecord, TITLE_COLUMNS

logger = logging.getLogger(__name__)


def parse_source_records(csv_text: str) -> List[SourceRecord]:
    """
    Parse CSV text with a header row into SourceRecords.

    Unknown columns are ignored, missing optional columns become empty.
    A row with more cells than the header, or without a show_id, is rejected
    with an InvalidRequestError naming its row, before anything is stored.
    """
    if csv_text.startswith("\ufeff"):
        csv_text = csv_text[1:]
    if not csv_text.strip():
        raise InvalidRequestError("CSV file is empty")

    reader = csv.DictReader(io.StringIO(csv_text), restkey="__extra__")
    if not reader.fieldnames:
        raise InvalidRequestError("CSV file has no header row")

    header = [name.strip() for name in reader.fieldnames]
    if "show_id" not in header:
        raise InvalidRequestError(f"CSV header must contain show_id, got {header}")
    reader.fieldnames = header

    unknown = [name for name in header if name not in TITLE_COLUMNS]
    if unknown:
        logger.warning(f"Ignoring unknown CSV columns: {unknown}")

    try:
        return parse_rows(reader)
    except csv.Error as e:
        raise InvalidRequestError(f"CSV could not be parsed: {str(e)}") from e


def parse_rows(rows: Iterable[Dict[str, Any]]) -> List[SourceRecord]:
    records = []
    for index, row in enumerate(rows, start=2):
        if row.get("__extra__"):
            raise InvalidRequestError(f"Row {index}: more values than header columns")
        if all(value is None or not str(value).strip() for value in row.values()):
            continue
        fields = {k: v for k, v in row.items() if k in TITLE_COLUMNS}
        try:
            records.append(SourceRecord.model_validate(fields))
        except ValidationError as e:
            reason = "; ".join(err["msg"] for err in e.errors())
            raise InvalidRequestError(f"Row {index}: {reason}") from e

    logger.info(f"Parsed {len(records)} records from CSV")
    return records
