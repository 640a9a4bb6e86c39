"""
Bundle Service - list/create/update/delete operations for bundles.

Holds bundles in memory and recomputes the authoritative calculated price
on every create/update from the draft's raw strategy inputs.
"""
import logging
from datetime import datetime, timezone
from typing import Iterable, Optional

from ..engine.bundle_query import BundleQueryEngine
from ..engine.models import Bundle, BundleDraft, BundleFilterSpec, PriceType, Service
from ..engine.price_engine import PriceEngine
from ..engine.validation import (
    IssueCode,
    ValidationResult,
    validate_description,
    validate_name,
    validate_service_selection,
    validate_strategy,
)

logger = logging.getLogger(__name__)


class BundleNotFoundError(ValueError):
    """No bundle with the requested id."""

    def __init__(self, bundle_id: int):
        super().__init__(f"Bundle with ID '{bundle_id}' not found")
        self.bundle_id = bundle_id


class BundleValidationError(ValueError):
    """A draft failed validation; carries the per-field issues."""

    def __init__(self, result: ValidationResult):
        messages = "; ".join(e.message for e in result.errors)
        super().__init__(f"Invalid bundle: {messages}")
        self.result = result


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec='milliseconds').replace('+00:00', 'Z')


class BundleService:
    """Service for managing bundles against a service catalog."""

    def __init__(self, catalog: Iterable[Service] = (), currency: str = 'eur', clock=utc_now_iso):
        self.currency = currency
        self.price_engine = PriceEngine(currency)
        self.query_engine = BundleQueryEngine(currency)
        self._clock = clock
        self._catalog: dict[int, Service] = {}
        self._bundles: dict[int, Bundle] = {}
        self._next_id = 1
        self.load_catalog(catalog)

    def load_catalog(self, catalog: Iterable[Service]):
        """Replace the service catalog snapshot."""
        self._catalog = {service.id: service for service in catalog}

    @property
    def catalog(self) -> list[Service]:
        return list(self._catalog.values())

    def list_bundles(self, spec: Optional[BundleFilterSpec] = None) -> list[Bundle]:
        """All bundles, optionally filtered and sorted."""
        bundles = list(self._bundles.values())
        if spec is None:
            return bundles
        return self.query_engine.apply(bundles, spec)

    def get_bundle(self, bundle_id: int) -> Optional[Bundle]:
        return self._bundles.get(bundle_id)

    def validate_draft(self, draft: BundleDraft) -> ValidationResult:
        """Validate a draft before saving."""
        result = ValidationResult()
        result.merge(validate_name(draft.name))
        result.merge(validate_description(draft.description))
        result.merge(validate_strategy(draft.strategy))
        result.merge(validate_service_selection(draft.service_ids, touched=True))

        unknown = [i for i in draft.service_ids if i not in self._catalog]
        if unknown:
            result.add_error(
                "serviceIds",
                IssueCode.UNKNOWN_SERVICE,
                f"Unknown service IDs: {', '.join(str(i) for i in unknown)}",
            )
        return result

    def create_bundle(self, draft: BundleDraft) -> Bundle:
        """Create a new bundle."""
        self._raise_if_invalid(draft)

        now = self._clock()
        bundle = self._build(self._next_id, draft, created_at=now, updated_at=now)
        self._bundles[bundle.id] = bundle
        self._next_id += 1

        logger.info("Created bundle %s (%s, %s minor units)",
                    bundle.id, bundle.price_type.value, bundle.calculated_price_minor)
        return bundle

    def update_bundle(self, bundle_id: int, draft: BundleDraft) -> Bundle:
        """Replace an existing bundle's inputs and recompute its price."""
        existing = self._bundles.get(bundle_id)
        if existing is None:
            raise BundleNotFoundError(bundle_id)
        self._raise_if_invalid(draft)

        bundle = self._build(bundle_id, draft, created_at=existing.created_at, updated_at=self._clock())
        self._bundles[bundle_id] = bundle

        logger.info("Updated bundle %s (%s, %s minor units)",
                    bundle.id, bundle.price_type.value, bundle.calculated_price_minor)
        return bundle

    def delete_bundle(self, bundle_id: int) -> bool:
        if bundle_id not in self._bundles:
            raise BundleNotFoundError(bundle_id)
        del self._bundles[bundle_id]
        logger.info("Deleted bundle %s", bundle_id)
        return True

    def get_stats(self) -> dict:
        """Get statistics about bundles."""
        bundles = list(self._bundles.values())
        by_price_type = {t.value: 0 for t in PriceType}
        for b in bundles:
            by_price_type[b.price_type.value] += 1

        return {
            'total': len(bundles),
            'by_price_type': by_price_type,
            'catalog_services': len(self._catalog),
        }

    def _raise_if_invalid(self, draft: BundleDraft):
        result = self.validate_draft(draft)
        if not result.valid:
            raise BundleValidationError(result)

    def _build(self, bundle_id: int, draft: BundleDraft, created_at: str, updated_at: str) -> Bundle:
        services = [self._catalog[i] for i in dict.fromkeys(draft.service_ids)]
        quote = self.price_engine.quote(services, draft.strategy)
        return Bundle(
            id=bundle_id,
            name=draft.name.strip(),
            description=(draft.description or "").strip() or None,
            strategy=draft.strategy,
            calculated_price_minor=quote.final_minor,
            services=services,
            created_at=created_at,
            updated_at=updated_at,
        )
