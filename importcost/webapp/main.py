"""
FastAPI application entry point for the import cost calculator.

Run with:
    uvicorn importcost.webapp.main:app --reload

Open: http://127.0.0.1:8000/docs
"""

import logging
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from importcost.utils.config_loader import load_config, load_env
from importcost.utils.logging_setup import setup_logging
from importcost.webapp.exceptions import AppException
from importcost.webapp.routes import get_calculator_session, router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown."""
    load_env()
    config = load_config()
    setup_logging(
        level=config.logging.level,
        log_format=config.logging.format,
        log_file=config.logging.file,
    )

    logger.info("Import Cost Calculator - Web API starting...")
    yield
    logger.info("Import Cost Calculator - Web API shutting down...")


app = FastAPI(
    title="Import Cost Calculator",
    description="Import cost breakdown (freight, import tax, ICMS) for product lists",
    version="1.0.0",
    lifespan=lifespan,
)


@app.exception_handler(AppException)
async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Map application errors to JSON responses."""
    logger.warning(f"{exc.error_code} on {request.url.path}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.middleware("http")
async def error_handling_middleware(request: Request, call_next):
    """Global error handling middleware."""
    start_time = time.time()
    try:
        response = await call_next(request)
        process_time = time.time() - start_time
        response.headers["X-Process-Time"] = str(process_time)
        return response
    except Exception as e:
        process_time = time.time() - start_time
        logger.exception(f"Unhandled error processing {request.url.path}: {e}")
        return JSONResponse(
            status_code=500,
            content={
                "error": "Internal server error",
                "detail": str(e) if app.debug else "An unexpected error occurred",
                "path": str(request.url.path),
            },
            headers={"X-Process-Time": str(process_time)},
        )


@app.get("/health")
async def health_check() -> dict[str, Any]:
    """Health check with a short session summary."""
    session = get_calculator_session()
    return {
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "products": len(session.ledger),
        "exchange_rate_available": session.exchange_rate > 0,
    }


app.include_router(router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("importcost.webapp.main:app", host="127.0.0.1", port=8000, reload=True)
