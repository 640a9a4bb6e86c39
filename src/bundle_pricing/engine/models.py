"""
Data models for the bundle pricing engine.

Uses dataclasses for structured, type-safe data representation. A pricing
strategy is a tagged union: exactly one of SumStrategy, FixedStrategy or
DiscountStrategy, each carrying only its own payload.
"""
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import ClassVar, Optional, Union

from .currency import from_minor


class PriceType(str, Enum):
    """Pricing strategy tag, matching the wire values of the bundle API."""
    SUM = "sum"
    FIXED = "fixed"
    DISCOUNT = "discount"


@dataclass(frozen=True)
class Service:
    """A catalog service. Read-only to the engine."""
    id: int
    name: str
    price: Decimal | float | str  # major units, e.g. 15.50
    currency: str = "eur"
    duration: int = 0  # minutes


@dataclass(frozen=True)
class SumStrategy:
    """Final price is the sum of the selected services."""
    tag: ClassVar[PriceType] = PriceType.SUM


@dataclass(frozen=True)
class FixedStrategy:
    """Final price is a fixed amount in minor units."""
    tag: ClassVar[PriceType] = PriceType.FIXED
    fixed_price_minor: Optional[int] = None


@dataclass(frozen=True)
class DiscountStrategy:
    """Final price is the sum reduced by a percentage in [0, 100]."""
    tag: ClassVar[PriceType] = PriceType.DISCOUNT
    discount_percentage: Optional[Decimal | float | int] = None


PricingStrategy = Union[SumStrategy, FixedStrategy, DiscountStrategy]


def strategy_for(price_type: PriceType | str) -> PricingStrategy:
    """Build an empty strategy variant for a tag."""
    price_type = PriceType(price_type)
    if price_type == PriceType.FIXED:
        return FixedStrategy()
    elif price_type == PriceType.DISCOUNT:
        return DiscountStrategy()
    return SumStrategy()


def strategy_from_fields(
    price_type: PriceType | str,
    fixed_price_minor: Optional[int] = None,
    discount_percentage: Optional[Decimal | float | int] = None,
) -> PricingStrategy:
    """
    Build a strategy from the flat payload fields used on the wire.

    Raises ValueError when a field belonging to another strategy is populated.
    """
    price_type = PriceType(price_type)

    if price_type != PriceType.FIXED and fixed_price_minor is not None:
        raise ValueError(f"fixedPriceAmountMinor is not allowed for '{price_type.value}' bundles")
    if price_type != PriceType.DISCOUNT and discount_percentage is not None:
        raise ValueError(f"discountPercentage is not allowed for '{price_type.value}' bundles")

    if price_type == PriceType.FIXED:
        return FixedStrategy(fixed_price_minor=fixed_price_minor)
    elif price_type == PriceType.DISCOUNT:
        return DiscountStrategy(discount_percentage=discount_percentage)
    return SumStrategy()


def strategy_to_fields(strategy: PricingStrategy) -> dict:
    """Flatten a strategy into the wire payload fields."""
    fields = {
        "priceType": strategy.tag.value,
        "fixedPriceAmountMinor": None,
        "discountPercentage": None,
    }
    if isinstance(strategy, FixedStrategy):
        fields["fixedPriceAmountMinor"] = strategy.fixed_price_minor
    elif isinstance(strategy, DiscountStrategy):
        fields["discountPercentage"] = strategy.discount_percentage
    return fields


@dataclass
class Bundle:
    """A persisted bundle as returned by the bundle collaborator."""
    id: int
    name: str
    strategy: PricingStrategy
    calculated_price_minor: int
    services: list[Service] = field(default_factory=list)
    description: Optional[str] = None
    created_at: str = ""
    updated_at: str = ""

    @property
    def price_type(self) -> PriceType:
        return self.strategy.tag

    @property
    def service_ids(self) -> list[int]:
        return [s.id for s in self.services]

    @property
    def service_count(self) -> int:
        return len(self.services)

    @property
    def total_duration(self) -> int:
        """Total duration of all services in minutes."""
        return sum(s.duration or 0 for s in self.services)

    def to_dict(self) -> dict:
        """Convert to the camelCase dict shape used by the bundle API."""
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            **strategy_to_fields(self.strategy),
            "calculatedPriceAmountMinor": self.calculated_price_minor,
            "serviceIds": self.service_ids,
            "totalDuration": self.total_duration,
            "services": [
                {
                    "id": s.id,
                    "name": s.name,
                    "price": str(s.price),
                    "currency": s.currency,
                    "duration": s.duration,
                }
                for s in self.services
            ],
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }


@dataclass
class BundleDraft:
    """
    Create/update payload: the user's raw inputs.

    Never carries the derived price; the collaborator recomputes it.
    """
    name: str
    strategy: PricingStrategy
    service_ids: list[int]
    description: Optional[str] = None


def format_duration(minutes: int) -> str:
    """Format minutes as "1h 30m", "2h" or "45m"."""
    hours, mins = divmod(int(minutes or 0), 60)
    if hours > 0:
        return f"{hours}h {mins}m" if mins > 0 else f"{hours}h"
    return f"{mins}m"


SORT_FIELDS = ("price", "serviceCount", "createdAt", "updatedAt")
SORT_DIRECTIONS = ("asc", "desc")


@dataclass
class BundleFilterSpec:
    """
    Search/bound/tag/sort parameters for a bundle list.

    Bounds are kept as the raw strings typed into the filter controls.
    """
    search_term: str = ""
    price_min: str = ""
    price_max: str = ""
    service_count_min: str = ""
    service_count_max: str = ""
    price_types: list[PriceType] = field(default_factory=list)
    sort_field: str = "createdAt"
    sort_direction: str = "desc"

    def __post_init__(self):
        if self.sort_field not in SORT_FIELDS:
            raise ValueError(f"Unknown sort field '{self.sort_field}'")
        if self.sort_direction not in SORT_DIRECTIONS:
            raise ValueError(f"Unknown sort direction '{self.sort_direction}'")
        self.price_types = [PriceType(t) for t in self.price_types]

    @classmethod
    def default(cls) -> 'BundleFilterSpec':
        return cls()


@dataclass
class TraceStep:
    """A single step in the price resolution trace."""
    step: str
    description: str
    value: Optional[str] = None


@dataclass
class PriceQuote:
    """Derived price of a bundle for display."""
    currency: str
    price_type: PriceType
    sum_minor: int
    final_minor: int
    delta_minor: int
    has_difference: bool
    trace: list[TraceStep] = field(default_factory=list)

    def add_trace(self, step: str, description: str, value: str = None):
        """Add a step to the trace for this quote."""
        self.trace.append(TraceStep(step=step, description=description, value=value))

    @property
    def sum_major(self) -> Decimal:
        return from_minor(self.sum_minor, self.currency)

    @property
    def final_major(self) -> Decimal:
        return from_minor(self.final_minor, self.currency)

    @property
    def delta_major(self) -> Decimal:
        return from_minor(self.delta_minor, self.currency)

    @property
    def is_savings(self) -> bool:
        return self.has_difference and self.delta_minor < 0

    def get_trace_text(self) -> str:
        """Get human-readable trace as formatted text."""
        lines = []
        for t in self.trace:
            if t.value:
                lines.append(f"→ {t.step}: {t.description} = {t.value}")
            else:
                lines.append(f"→ {t.step}: {t.description}")
        return "\n".join(lines)
