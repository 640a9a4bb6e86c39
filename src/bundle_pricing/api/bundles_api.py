"""
Bundles API - FastAPI router for bundle management.
"""
from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, ConfigDict, Field

from ..engine.models import BundleDraft, BundleFilterSpec, PriceType, strategy_from_fields
from ..services.bundle_service import BundleNotFoundError, BundleService, BundleValidationError
from .state import get_bundle_service

router = APIRouter(prefix="/api/bundles", tags=["bundles"])


# Pydantic models for API
class BundlePayload(BaseModel):
    """Request model for creating or updating a bundle."""
    model_config = ConfigDict(populate_by_name=True)

    name: str
    description: Optional[str] = None
    price_type: PriceType = Field(default=PriceType.SUM, alias="priceType")
    fixed_price_amount_minor: Optional[int] = Field(default=None, alias="fixedPriceAmountMinor")
    discount_percentage: Optional[Decimal] = Field(default=None, alias="discountPercentage")
    service_ids: list[int] = Field(default_factory=list, alias="serviceIds")

    def to_draft(self) -> BundleDraft:
        """Convert to a draft; a field of an inactive strategy is a 400."""
        try:
            strategy = strategy_from_fields(
                self.price_type,
                fixed_price_minor=self.fixed_price_amount_minor,
                discount_percentage=self.discount_percentage,
            )
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        return BundleDraft(
            name=self.name,
            description=self.description,
            strategy=strategy,
            service_ids=self.service_ids,
        )


class ValidationResponse(BaseModel):
    """Response model for validation."""
    valid: bool
    errors: list[dict]
    warnings: list[str]


# Endpoints

@router.get("")
async def list_bundles(
    search: str = Query(default=""),
    price_min: str = Query(default="", alias="priceMin"),
    price_max: str = Query(default="", alias="priceMax"),
    service_count_min: str = Query(default="", alias="serviceCountMin"),
    service_count_max: str = Query(default="", alias="serviceCountMax"),
    price_types: list[PriceType] = Query(default=[], alias="priceTypes"),
    sort_field: str = Query(default="createdAt", alias="sortField"),
    sort_direction: str = Query(default="desc", alias="sortDirection"),
    service: BundleService = Depends(get_bundle_service),
):
    """List bundles, filtered and sorted."""
    try:
        spec = BundleFilterSpec(
            search_term=search,
            price_min=price_min,
            price_max=price_max,
            service_count_min=service_count_min,
            service_count_max=service_count_max,
            price_types=price_types,
            sort_field=sort_field,
            sort_direction=sort_direction,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    try:
        bundles = service.list_bundles(spec)
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))
    return {"bundles": [b.to_dict() for b in bundles]}


@router.get("/stats")
async def get_stats(service: BundleService = Depends(get_bundle_service)):
    """Get bundle statistics."""
    return service.get_stats()


@router.post("/validate", response_model=ValidationResponse)
async def validate_bundle(payload: BundlePayload, service: BundleService = Depends(get_bundle_service)):
    """Validate a bundle without saving."""
    result = service.validate_draft(payload.to_draft())
    return ValidationResponse(**result.to_dict())


@router.get("/{bundle_id}")
async def get_bundle(bundle_id: int, service: BundleService = Depends(get_bundle_service)):
    """Get a single bundle by ID."""
    bundle = service.get_bundle(bundle_id)
    if not bundle:
        raise HTTPException(status_code=404, detail=f"Bundle '{bundle_id}' not found")
    return bundle.to_dict()


@router.post("")
async def create_bundle(payload: BundlePayload, service: BundleService = Depends(get_bundle_service)):
    """Create a new bundle."""
    try:
        created = service.create_bundle(payload.to_draft())
    except BundleValidationError as e:
        raise HTTPException(status_code=400, detail={"errors": [i.to_dict() for i in e.result.errors]})
    return {"message": "Bundle created", "bundle": created.to_dict()}


@router.put("/{bundle_id}")
async def update_bundle(bundle_id: int, payload: BundlePayload,
                        service: BundleService = Depends(get_bundle_service)):
    """Update an existing bundle."""
    try:
        updated = service.update_bundle(bundle_id, payload.to_draft())
    except BundleNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except BundleValidationError as e:
        raise HTTPException(status_code=400, detail={"errors": [i.to_dict() for i in e.result.errors]})
    return {"message": "Bundle updated", "bundle": updated.to_dict()}


@router.delete("/{bundle_id}")
async def delete_bundle(bundle_id: int, service: BundleService = Depends(get_bundle_service)):
    """Delete a bundle."""
    try:
        service.delete_bundle(bundle_id)
        return {"success": True, "message": f"Bundle '{bundle_id}' deleted"}
    except BundleNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
