"""
Bundle Form - live state of the add/edit bundle form.

Every change re-runs the price engine and validation. Only one strategy
variant is held at a time, so switching strategy drops the payload of the
previous one.
"""
from dataclasses import dataclass, field
from typing import Iterable, Optional

from ..engine.models import (
    Bundle,
    BundleDraft,
    DiscountStrategy,
    FixedStrategy,
    PriceQuote,
    PriceType,
    PricingStrategy,
    Service,
    SumStrategy,
    strategy_for,
)
from ..engine.price_engine import PriceEngine
from ..engine.validation import (
    MIN_SERVICES,
    ValidationResult,
    validate_description,
    validate_name,
    validate_service_selection,
    validate_strategy,
)


@dataclass
class BundleForm:
    """Form state for creating or editing a bundle."""
    name: str = ""
    description: str = ""
    strategy: PricingStrategy = field(default_factory=SumStrategy)
    service_ids: list[int] = field(default_factory=list)
    services_touched: bool = False
    submitted: bool = False
    bundle_id: Optional[int] = None  # set when editing

    @classmethod
    def from_bundle(cls, bundle: Bundle) -> 'BundleForm':
        """Prefill the form from an existing bundle for editing."""
        return cls(
            name=bundle.name,
            description=bundle.description or "",
            strategy=bundle.strategy,
            service_ids=list(bundle.service_ids),
            bundle_id=bundle.id,
        )

    @property
    def price_type(self) -> PriceType:
        return self.strategy.tag

    def reset(self):
        """Back to an empty form."""
        self.name = ""
        self.description = ""
        self.strategy = SumStrategy()
        self.service_ids = []
        self.services_touched = False
        self.submitted = False
        self.bundle_id = None

    def select_strategy(self, price_type: PriceType | str):
        """Switch strategy; fields of the other strategies are cleared."""
        price_type = PriceType(price_type)
        if price_type != self.strategy.tag:
            self.strategy = strategy_for(price_type)

    def set_fixed_price(self, fixed_price_minor: Optional[int]):
        if not isinstance(self.strategy, FixedStrategy):
            raise ValueError("Fixed price can only be set on a fixed-price bundle")
        self.strategy = FixedStrategy(fixed_price_minor=fixed_price_minor)

    def set_discount_percentage(self, discount_percentage):
        if not isinstance(self.strategy, DiscountStrategy):
            raise ValueError("Discount can only be set on a discount bundle")
        self.strategy = DiscountStrategy(discount_percentage=discount_percentage)

    def toggle_service(self, service_id: int):
        """Add or remove a service from the selection."""
        if service_id in self.service_ids:
            self.service_ids = [i for i in self.service_ids if i != service_id]
        else:
            self.service_ids = self.service_ids + [service_id]
        self.services_touched = True

    def set_services(self, service_ids: Iterable[int]):
        self.service_ids = list(dict.fromkeys(service_ids))
        self.services_touched = True

    def selected_services(self, catalog: Iterable[Service]) -> list[Service]:
        selected = set(self.service_ids)
        return [s for s in catalog if s.id in selected]

    def preview_visible(self) -> bool:
        """Strategy price panels only render with enough services selected."""
        return len(set(self.service_ids)) >= MIN_SERVICES

    def preview(self, catalog: Iterable[Service], currency: str = 'eur') -> Optional[PriceQuote]:
        """Live price quote, or None while the preview panels are hidden."""
        if not self.preview_visible():
            return None
        return PriceEngine(currency).quote(self.selected_services(catalog), self.strategy)

    def validate(self) -> ValidationResult:
        result = ValidationResult()
        result.merge(validate_name(self.name))
        result.merge(validate_description(self.description))
        result.merge(validate_strategy(self.strategy))
        result.merge(validate_service_selection(
            self.service_ids,
            touched=self.services_touched or self.submitted,
        ))
        return result

    def can_submit(self) -> bool:
        """Submission needs a valid form and a full selection, touched or not."""
        return self.validate().valid and self.preview_visible()

    def to_draft(self) -> BundleDraft:
        """Build the create/update payload from the raw inputs."""
        self.submitted = True
        description = self.description.strip() if self.description else ""
        return BundleDraft(
            name=self.name.strip(),
            description=description or None,
            strategy=self.strategy,
            service_ids=list(self.service_ids),
        )
