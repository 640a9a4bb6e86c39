"""
Price Engine - derives a bundle's final price from its services and strategy.

All amounts are integer minor units. Strategies:
- sum:      final = sum of service prices
- fixed:    final = fixed_price_minor, whatever the sum
- discount: final = round_half_up(sum * (100 - pct) / 100)
"""
from decimal import Decimal
from typing import Iterable

from .currency import (
    format_minor,
    normalize_currency_code,
    round_half_up,
    to_decimal,
    to_minor,
)
from .models import (
    DiscountStrategy,
    FixedStrategy,
    PriceQuote,
    PricingStrategy,
    Service,
    SumStrategy,
)

# Deltas at or below this many minor units are rounding noise
NO_DIFFERENCE_THRESHOLD = 1


def compute_sum_minor(services: Iterable[Service]) -> int:
    """Convert each service price to minor units at its currency exponent, then sum."""
    return sum(to_minor(service.price, service.currency) for service in services)


def compute_final_price_minor(sum_minor: int, strategy: PricingStrategy) -> int:
    """
    Apply a pricing strategy to a service sum.

    Bounds are not re-validated here (see validation.validate_strategy).
    A strategy with no payload yet previews with a best-effort default:
    fixed -> 0, discount -> 0 %.
    """
    if isinstance(strategy, FixedStrategy):
        if strategy.fixed_price_minor is None:
            return 0
        return int(strategy.fixed_price_minor)

    elif isinstance(strategy, DiscountStrategy):
        pct = to_decimal(strategy.discount_percentage)
        if pct is None:
            return sum_minor
        return round_half_up(Decimal(sum_minor) * (Decimal(100) - pct) / Decimal(100))

    elif isinstance(strategy, SumStrategy):
        return sum_minor

    raise TypeError(f"Unsupported pricing strategy: {strategy!r}")


def compute_delta(final_minor: int, sum_minor: int) -> int:
    """Signed difference; negative means savings, positive means an increase."""
    return final_minor - sum_minor


def has_material_difference(delta_minor: int) -> bool:
    """False when |delta| is within rounding noise."""
    return abs(delta_minor) > NO_DIFFERENCE_THRESHOLD


class PriceEngine:
    """
    Derives bundle price quotes in a business currency.

    Resolution order:
    1. Convert each selected service price to minor units (half-up)
    2. Sum the converted prices
    3. Apply the strategy to the sum
    4. Compute the delta against the sum
    """

    def __init__(self, currency: str = 'eur'):
        self.currency = normalize_currency_code(currency)

    def quote(self, services: Iterable[Service], strategy: PricingStrategy) -> PriceQuote:
        """Compute the full quote with a resolution trace."""
        services = list(services)
        sum_minor = compute_sum_minor(services)
        final_minor = compute_final_price_minor(sum_minor, strategy)
        delta_minor = compute_delta(final_minor, sum_minor)

        quote = PriceQuote(
            currency=self.currency,
            price_type=strategy.tag,
            sum_minor=sum_minor,
            final_minor=final_minor,
            delta_minor=delta_minor,
            has_difference=has_material_difference(delta_minor),
        )

        for service in services:
            quote.add_trace(
                "Service",
                service.name,
                format_minor(to_minor(service.price, service.currency), service.currency),
            )
        quote.add_trace("Sum", f"{len(services)} services", format_minor(sum_minor, self.currency))

        if isinstance(strategy, FixedStrategy):
            quote.add_trace("Strategy", "Fixed price override", format_minor(final_minor, self.currency))
        elif isinstance(strategy, DiscountStrategy):
            pct = strategy.discount_percentage if strategy.discount_percentage is not None else 0
            quote.add_trace("Strategy", f"{pct}% discount", format_minor(final_minor, self.currency))
        else:
            quote.add_trace("Strategy", "Sum of services")

        if quote.has_difference:
            label = "Savings" if delta_minor < 0 else "Increase"
            quote.add_trace("Delta", label, format_minor(abs(delta_minor), self.currency))
        else:
            quote.add_trace("Delta", "No difference")

        return quote
