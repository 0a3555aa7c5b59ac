# Error taxonomy shared by services, storage clients and the API layer
from typing import Any, Dict, Optional


class CatalogPipelineError(Exception):
    """Base error. The API layer renders it as {"error": message}."""
    status_code: int = 500

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    def to_payload(self) -> Dict[str, Any]:
        return {"error": self.message}


class InvalidRequestError(CatalogPipelineError):
    """Malformed request, missing criteria or unparseable CSV row"""
    status_code = 400


class UnknownActionError(InvalidRequestError):
    pass


class StorageError(CatalogPipelineError):
    """Storage unreachable or rejected the call"""
    status_code = 502


class StorageTimeoutError(StorageError):
    status_code = 504


class SchemaDriftError(StorageError):
    """A column type no longer matches what the importer writes"""
    status_code = 500


class BatchImportError(CatalogPipelineError):
    """
    A batch failed. Batches before it are committed; re-run from `offset`
    to resume (upserts make re-processing a stored key a no-op replacement).
    """

    def __init__(self, message: str, offset: int, processed: int, cause: Optional[Exception] = None):
        status_code = cause.status_code if isinstance(cause, CatalogPipelineError) else 502
        super().__init__(message, status_code=status_code)
        self.offset = offset
        self.processed = processed
        self.cause = cause

    def to_payload(self) -> Dict[str, Any]:
        return {"error": self.message, "offset": self.offset, "processed": self.processed}
