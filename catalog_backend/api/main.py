# Load environment variables from .env file first, before any other imports
from dotenv import load_dotenv
load_dotenv()

import logging
import os

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from catalog_backend.api.routes import actions, recommendations, titles, training
from catalog_backend.exceptions import CatalogPipelineError

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Catalog Recommendation Services", version="1.0.0")

app.include_router(actions.router, prefix="/external-db", tags=["external-db"])
app.include_router(titles.router, prefix="/titles", tags=["titles"])
app.include_router(training.router, prefix="/training", tags=["training"])
app.include_router(recommendations.router, prefix="/recommendations", tags=["recommendations"])


@app.exception_handler(CatalogPipelineError)
async def pipeline_error_handler(request: Request, exc: CatalogPipelineError):
    logger.error(f"{request.method} {request.url.path} failed ({exc.status_code}): {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload())


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    details = "; ".join(f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors())
    logger.warning(f"Rejected {request.method} {request.url.path}: {details}")
    return JSONResponse(status_code=400, content={"error": f"Invalid request: {details}"})


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(status_code=500, content={"error": str(exc)})


@app.get("/health")
def health_check():
    return {"status": "healthy"}

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
