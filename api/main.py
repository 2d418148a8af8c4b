# ============================================================================
# api/main.py
# ============================================================================
"""
FastAPI Backend for the Prescription Matching Engine

Runs on port 8000.
Accepts OCR'd prescription text and returns catalog matches, suggestions,
price estimate and the consultation flag.
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, ConfigDict, Field

from rx_matching import __version__
from rx_matching.catalog import create_catalog
from rx_matching.config import logging_settings
from rx_matching.core.config import get_config
from rx_matching.core.orchestrator import AnalysisOrchestrator
from rx_matching.utils.exceptions import CatalogError
from rx_matching.utils.logging import setup_logging
from rx_matching.utils.metrics import get_metrics

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open the catalog once and share one orchestrator across requests."""
    config = get_config()
    setup_logging(
        level=config['log_level'],
        log_file=logging_settings.LOG_FILE,
        format_json=config['log_json'],
    )

    catalog = create_catalog(config)
    app.state.catalog = catalog
    app.state.orchestrator = AnalysisOrchestrator(catalog, config)
    logger.info(f"Catalog backend ready: {config['catalog_backend']}")
    try:
        yield
    finally:
        await catalog.close()
        logger.info("Catalog closed")


app = FastAPI(
    title="Prescription Matching API",
    description="Match OCR'd prescriptions against the pharmacy catalog",
    version=__version__,
    lifespan=lifespan,
)

# CORS for the storefront and pharmacist dashboard
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ],
    allow_origin_regex=r"http://192\.168\.\d+\.\d+:\d+",
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ============================================================================
# Models
# ============================================================================

class AnalyzeRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    text: str = Field(default="", max_length=20000)
    suggestion_limit: Optional[int] = Field(default=None, alias="suggestionLimit", ge=0, le=20)


# ============================================================================
# Dependencies
# ============================================================================

def get_orchestrator(request: Request) -> AnalysisOrchestrator:
    return request.app.state.orchestrator


# ============================================================================
# Endpoints
# ============================================================================

@app.get("/")
async def root():
    """Health check endpoint."""
    return {"status": "ok", "service": "Prescription Matching API"}


@app.get("/api/health")
async def health(orchestrator: AnalysisOrchestrator = Depends(get_orchestrator)):
    """Health check for monitoring; reports whether the catalog answers."""
    try:
        await orchestrator.catalog.search_by_name("a", limit=1)
        catalog_status = "available"
    except CatalogError as e:
        logger.warning(f"Catalog health check failed: {e}")
        catalog_status = "unavailable"
    return {"status": "healthy", "catalog": catalog_status, "version": __version__}


@app.post("/api/analyze")
async def analyze_prescription(
    body: AnalyzeRequest,
    orchestrator: AnalysisOrchestrator = Depends(get_orchestrator)
) -> Dict[str, Any]:
    """
    Analyze one prescription.

    Catalog outages never surface as errors: affected lines come back
    as not found and the result carries an incompleteness note.
    """
    result = await orchestrator.analyze(body.text, suggestion_limit=body.suggestion_limit)
    return result.to_dict()


@app.get("/api/metrics")
async def metrics():
    """Match counters and analysis timings."""
    return get_metrics().get_all_metrics()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
