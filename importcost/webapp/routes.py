"""
FastAPI routes for the import cost calculator.

Handles:
- Product ledger edits (add/update/remove, file import)
- Exchange-rate and ICMS-rate setters
- Current result, formatted values and calculation trace
- Live FX rate lookup

Every edit recomputes the breakdown and returns the full session state.
Handlers are async and do no awaiting while they compute, so edits run one
at a time on the event loop.
"""

import logging
import tempfile
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict

from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.responses import PlainTextResponse

from importcost.importer.product_importer import SUPPORTED_SUFFIXES, load_products
from importcost.pricing.fx_provider import fetch_google_fx_rate
from importcost.services.calculator_service import CalculatorSession
from importcost.utils.config_loader import AppConfig, load_config, load_env
from importcost.webapp.exceptions import FileValidationError
from importcost.webapp.schemas import FXRateResponse, ProductCreate, ProductUpdate, RateUpdate

logger = logging.getLogger(__name__)

router = APIRouter()


# ============================================================================
# Dependency Injection
# ============================================================================

@lru_cache()
def get_app_config() -> AppConfig:
    """
    Get application config (cached).

    Clear cache with get_app_config.cache_clear() if config changes.
    """
    load_env()
    return load_config()


@lru_cache()
def get_calculator_session() -> CalculatorSession:
    """
    Get the single in-memory calculator session.

    Clear cache with get_calculator_session.cache_clear() to start over.
    """
    return CalculatorSession(get_app_config())


# ============================================================================
# State
# ============================================================================

@router.get("/api/state")
async def get_state(session: CalculatorSession = Depends(get_calculator_session)) -> Dict[str, Any]:
    """Current products, configuration, result and trace."""
    return session.state()


@router.get("/api/trace", response_class=PlainTextResponse)
async def get_trace(session: CalculatorSession = Depends(get_calculator_session)) -> str:
    """Calculation trace as plain text."""
    return session.state()["trace"] or ""


@router.post("/api/examples")
async def load_examples(session: CalculatorSession = Depends(get_calculator_session)) -> Dict[str, Any]:
    """Add the reference products and exchange rate."""
    session.load_examples()
    return session.state()


@router.post("/api/reset")
async def reset_session(session: CalculatorSession = Depends(get_calculator_session)) -> Dict[str, Any]:
    """Clear all products and restore configured rates."""
    session.reset()
    return session.state()


# ============================================================================
# Products
# ============================================================================

@router.post("/api/products", status_code=201)
async def add_product(
    product: ProductCreate,
    session: CalculatorSession = Depends(get_calculator_session),
) -> Dict[str, Any]:
    """Add a product row."""
    session.add_product(product.price, product.quantity, product.weight)
    return session.state()


@router.patch("/api/products/{product_id}")
async def update_product(
    product_id: int,
    update: ProductUpdate,
    session: CalculatorSession = Depends(get_calculator_session),
) -> Dict[str, Any]:
    """Edit one field of a product row."""
    session.update_product(product_id, update.field, update.value)
    return session.state()


@router.delete("/api/products/{product_id}")
async def remove_product(
    product_id: int,
    session: CalculatorSession = Depends(get_calculator_session),
) -> Dict[str, Any]:
    """Remove a product row."""
    session.remove_product(product_id)
    return session.state()


@router.post("/api/products/import")
async def import_products(
    file: UploadFile = File(...),
    session: CalculatorSession = Depends(get_calculator_session),
) -> Dict[str, Any]:
    """Add every product row from an uploaded CSV/Excel file."""
    filename = file.filename or ""
    suffix = Path(filename).suffix.lower()
    if suffix not in SUPPORTED_SUFFIXES:
        raise FileValidationError(
            f"Unsupported file format: {suffix or '(none)'}. Expected .csv, .xlsx or .xls",
            filename=filename,
        )

    content = await file.read()
    with tempfile.TemporaryDirectory() as tmpdir:
        tmp_path = Path(tmpdir) / f"upload{suffix}"
        tmp_path.write_bytes(content)
        rows = load_products(tmp_path)

    session.add_products(rows)
    logger.info(f"Imported {len(rows)} products from upload {filename}")
    return {"success": True, "imported": len(rows), "filename": filename, "state": session.state()}


# ============================================================================
# Configuration
# ============================================================================

@router.put("/api/config/exchange-rate")
async def set_exchange_rate(
    update: RateUpdate,
    session: CalculatorSession = Depends(get_calculator_session),
) -> Dict[str, Any]:
    """Set the exchange rate; blank/zero means unknown (degraded mode)."""
    session.set_exchange_rate(update.value)
    return session.state()


@router.put("/api/config/icms-rate")
async def set_icms_rate(
    update: RateUpdate,
    session: CalculatorSession = Depends(get_calculator_session),
) -> Dict[str, Any]:
    """Set the ICMS rate; out-of-range values block recalculation."""
    session.set_icms_rate(update.value)
    return session.state()


@router.get("/api/fx/live", response_model=FXRateResponse)
async def fetch_fx_rate_endpoint(
    apply: bool = False,
    config: AppConfig = Depends(get_app_config),
    session: CalculatorSession = Depends(get_calculator_session),
) -> FXRateResponse:
    """Fetch the live FX rate from Google Finance, optionally applying it."""
    rate, source = fetch_google_fx_rate(config)

    if rate is not None:
        if apply:
            session.set_exchange_rate(rate)
        return FXRateResponse(success=True, rate=rate, source=source, applied=apply)

    logger.warning(f"Live FX lookup failed: {source}")
    return FXRateResponse(success=False, rate=config.fx.default_rate, source="default", error=source)
