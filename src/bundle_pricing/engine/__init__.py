"""Engine subpackage - pure bundle pricing, validation, and query logic."""
from .models import (
    Service,
    PriceType,
    SumStrategy,
    FixedStrategy,
    DiscountStrategy,
    PricingStrategy,
    Bundle,
    BundleDraft,
    BundleFilterSpec,
    PriceQuote,
)
from .price_engine import PriceEngine
from .bundle_query import BundleQueryEngine

__all__ = [
    'Service', 'PriceType', 'SumStrategy', 'FixedStrategy', 'DiscountStrategy',
    'PricingStrategy', 'Bundle', 'BundleDraft', 'BundleFilterSpec', 'PriceQuote',
    'PriceEngine', 'BundleQueryEngine',
]
