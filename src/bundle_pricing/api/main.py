import logging
from decimal import Decimal
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from ..config.settings import get_settings
from ..engine.currency import currency_symbol, list_currencies
from ..engine.models import PriceType, strategy_from_fields
from ..engine.validation import validate_strategy
from ..services.bundle_service import BundleService
from .bundles_api import router as bundles_router
from .state import get_bundle_service

settings = get_settings()

logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Bundle Pricing API",
    description="Bundle pricing, validation and listing for the business console",
    version="1.0.0"
)

# Enable CORS for frontend development
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include bundle management API
app.include_router(bundles_router)


class QuoteRequest(BaseModel):
    service_ids: list[int] = Field(default_factory=list, alias="serviceIds")
    price_type: PriceType = Field(default=PriceType.SUM, alias="priceType")
    fixed_price_amount_minor: Optional[int] = Field(default=None, alias="fixedPriceAmountMinor")
    discount_percentage: Optional[Decimal] = Field(default=None, alias="discountPercentage")


@app.get("/")
async def root():
    return {"status": "online", "message": "Bundle Pricing API Active"}


@app.post("/pricing/quote")
async def quote(req: QuoteRequest, service: BundleService = Depends(get_bundle_service)):
    try:
        strategy = strategy_from_fields(
            req.price_type,
            fixed_price_minor=req.fixed_price_amount_minor,
            discount_percentage=req.discount_percentage,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    catalog = {s.id: s for s in service.catalog}
    unknown = [i for i in req.service_ids if i not in catalog]
    if unknown:
        raise HTTPException(status_code=400, detail=f"Unknown service IDs: {unknown}")

    services = [catalog[i] for i in dict.fromkeys(req.service_ids)]
    try:
        result = service.price_engine.quote(services, strategy)
    except Exception as e:
        logger.exception("Quote failed")
        raise HTTPException(status_code=500, detail=str(e))
    return {
        "currency": result.currency,
        "symbol": currency_symbol(result.currency),
        "priceType": result.price_type.value,
        "sumMinor": result.sum_minor,
        "finalMinor": result.final_minor,
        "deltaMinor": result.delta_minor,
        "hasDifference": result.has_difference,
        "validation": validate_strategy(strategy).to_dict(),
        "trace": result.get_trace_text(),
    }


@app.get("/currencies")
async def currencies(include_legacy: bool = False):
    return {"currencies": list_currencies(selectable_only=not include_legacy)}


@app.get("/system/status")
async def get_status(service: BundleService = Depends(get_bundle_service)):
    return {
        "engine_active": True,
        "currency": service.currency,
        "catalog_services": len(service.catalog),
        "bundles_count": service.get_stats()["total"],
    }
