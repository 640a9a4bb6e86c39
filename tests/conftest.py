import pytest

from bundle_pricing.engine.models import Bundle, Service, SumStrategy


@pytest.fixture
def catalog():
    """Small EUR service catalog."""
    return [
        Service(id=1, name="Service A", price="10.00", currency="eur", duration=30),
        Service(id=2, name="Service B", price="15.50", currency="eur", duration=45),
        Service(id=3, name="Service C", price="7.25", currency="eur", duration=15),
        Service(id=4, name="Service D", price="40.00", currency="eur", duration=90),
    ]


@pytest.fixture
def make_bundle(catalog):
    """Factory for persisted-looking bundles."""
    def _make(bundle_id, price_minor, strategy=None, services=2, name=None,
              description=None, created_at="2025-01-01T00:00:00Z", updated_at=None):
        return Bundle(
            id=bundle_id,
            name=name or f"Bundle {bundle_id}",
            description=description,
            strategy=strategy or SumStrategy(),
            calculated_price_minor=price_minor,
            services=catalog[:services],
            created_at=created_at,
            updated_at=updated_at or created_at,
        )
    return _make
