"""
Bundle Query Engine - filters and sorts bundle lists for display.

Pure and synchronous. Steps always run in order:
search -> price bounds -> service-count bounds -> price-type tags -> sort.
"""
from datetime import datetime, timezone
from decimal import Decimal
from typing import Iterable, Optional

from .currency import from_minor, normalize_currency_code, to_decimal
from .models import Bundle, BundleFilterSpec


def parse_price_bound(value: Optional[str]) -> Optional[Decimal]:
    """
    Parse a price bound typed into the filter.

    Empty, zero, negative and malformed input all mean "no bound".
    """
    parsed = to_decimal(value)
    if parsed is None or parsed <= 0:
        return None
    return parsed


def parse_count_bound(value: Optional[str]) -> Optional[int]:
    """Parse a service-count bound; unparsable or non-positive means "no bound"."""
    parsed = to_decimal(value)
    if parsed is None:
        return None
    count = int(parsed)  # truncates like parseInt
    if count <= 0:
        return None
    return count


def timestamp_millis(value: Optional[str]) -> int:
    """ISO-8601 timestamp to epoch milliseconds. Naive values are UTC, bad values 0."""
    if not value:
        return 0
    text = str(value).strip()
    if text.endswith('Z'):
        text = text[:-1] + '+00:00'
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return 0
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return int(parsed.timestamp() * 1000)


SORT_KEYS = {
    "price": lambda b: b.calculated_price_minor,
    "serviceCount": lambda b: b.service_count,
    "createdAt": lambda b: timestamp_millis(b.created_at),
    "updatedAt": lambda b: timestamp_millis(b.updated_at),
}


def has_active_filters(spec: BundleFilterSpec) -> bool:
    """True when any filter (not sort) component deviates from its unset value."""
    has_search = bool(spec.search_term.strip())
    has_price = (
        (spec.price_min != "" and spec.price_min != "0")
        or (spec.price_max != "" and spec.price_max != "0")
    )
    has_count = spec.service_count_min != "" or spec.service_count_max != ""
    return has_search or has_price or has_count or bool(spec.price_types)


class BundleQueryEngine:
    """Derives the visible, ordered subset of a bundle collection."""

    def __init__(self, currency: str = 'eur'):
        self.currency = normalize_currency_code(currency)

    def apply(self, bundles: Iterable[Bundle], spec: BundleFilterSpec) -> list[Bundle]:
        """Filter then stable-sort; the input list is never mutated."""
        result = list(bundles)

        # Search
        if spec.search_term.strip():
            term = spec.search_term.lower()
            result = [b for b in result if self._matches_search(b, term)]

        # Price bounds, compared in major units
        price_min = parse_price_bound(spec.price_min)
        price_max = parse_price_bound(spec.price_max)
        if price_min is not None:
            result = [b for b in result if self._price(b) >= price_min]
        if price_max is not None:
            result = [b for b in result if self._price(b) <= price_max]

        # Service count bounds
        count_min = parse_count_bound(spec.service_count_min)
        count_max = parse_count_bound(spec.service_count_max)
        if count_min is not None:
            result = [b for b in result if b.service_count >= count_min]
        if count_max is not None:
            result = [b for b in result if b.service_count <= count_max]

        # Price type tags
        if spec.price_types:
            accepted = set(spec.price_types)
            result = [b for b in result if b.price_type in accepted]

        # Sort; sorted() is stable in both directions
        result = sorted(
            result,
            key=SORT_KEYS[spec.sort_field],
            reverse=spec.sort_direction == "desc",
        )
        return result

    def is_filtered_empty(self, bundles: list[Bundle], spec: BundleFilterSpec) -> bool:
        """Empty only because of filters, as opposed to no bundles at all."""
        return bool(bundles) and has_active_filters(spec) and not self.apply(bundles, spec)

    def _price(self, bundle: Bundle) -> Decimal:
        return from_minor(bundle.calculated_price_minor, self.currency)

    @staticmethod
    def _matches_search(bundle: Bundle, term: str) -> bool:
        name_match = term in (bundle.name or "").lower()
        description_match = term in (bundle.description or "").lower()
        return name_match or description_match
