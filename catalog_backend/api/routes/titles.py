from fastapi import APIRouter, Depends, File, Query, UploadFile
from typing import Optional
import logging

from catalog_backend.api.dependencies import get_record_store
from catalog_backend.config import Settings, get_settings
from catalog_backend.database.record_store import RecordStore
from catalog_backend.exceptions import InvalidRequestError
from catalog_backend.models.response_models import ImportResponse
from catalog_backend.services.batch_import_service import BatchImporter
from catalog_backend.services.csv_service import parse_source_records

logger = logging.getLogger(__name__)
router = APIRouter()

@router.post("/import-csv", response_model=ImportResponse)
def import_csv(
    file: UploadFile = File(..., description="Catalog CSV with a header row"),
    batch_size: Optional[int] = Query(None, ge=1, description="Rows per upsert (defaults to IMPORT_BATCH_SIZE)"),
    offset: int = Query(0, ge=0, description="First row to import, for resuming a failed run"),
    store: RecordStore = Depends(get_record_store),
    settings: Settings = Depends(get_settings)
):
    """
    Parse an uploaded catalog CSV and upsert it in batches.
    The whole file is validated before the first batch is written.
    """
    raw = file.file.read()
    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise InvalidRequestError(f"CSV must be UTF-8 encoded: {str(e)}") from e

    records = parse_source_records(text)
    logger.info(f"Importing {len(records)} records from {file.filename}")

    importer = BatchImporter.from_settings(store, settings, batch_size=batch_size)
    summary = importer.import_records(records, offset=offset)

    return ImportResponse(
        message=f"Imported {summary.processed} of {summary.total} records",
        imported=summary.processed,
        total=summary.total,
        progress=[p.percent for p in summary.progress]
    )

@router.get("/count")
def count_titles(
    store: RecordStore = Depends(get_record_store),
    settings: Settings = Depends(get_settings)
):
    return {"success": True, "total": store.count_records(settings.titles_table)}
