"""
Bundle service tests: create/update/delete with authoritative pricing.
"""
import itertools

import pytest

from bundle_pricing.engine.models import BundleDraft, BundleFilterSpec, DiscountStrategy, FixedStrategy, SumStrategy
from bundle_pricing.engine.validation import IssueCode
from bundle_pricing.services.bundle_service import BundleNotFoundError, BundleService, BundleValidationError


@pytest.fixture
def service(catalog):
    ticks = (f"2025-01-01T00:00:{i:02d}.000Z" for i in itertools.count())
    return BundleService(catalog=catalog, currency="eur", clock=lambda: next(ticks))


def test_create_computes_price(service):
    bundle = service.create_bundle(BundleDraft(
        name="Duo", strategy=DiscountStrategy(discount_percentage=20), service_ids=[1, 2]))

    assert bundle.id == 1
    assert bundle.calculated_price_minor == 2040
    assert bundle.service_ids == [1, 2]
    assert bundle.total_duration == 75
    assert bundle.created_at == bundle.updated_at == "2025-01-01T00:00:00.000Z"


def test_create_assigns_sequential_ids(service):
    first = service.create_bundle(BundleDraft(name="One", strategy=SumStrategy(), service_ids=[1, 2]))
    second = service.create_bundle(BundleDraft(name="Two", strategy=SumStrategy(), service_ids=[2, 3]))
    assert (first.id, second.id) == (1, 2)
    assert len(service.list_bundles()) == 2


def test_create_rejects_single_service(service):
    with pytest.raises(BundleValidationError) as exc:
        service.create_bundle(BundleDraft(name="Solo", strategy=SumStrategy(), service_ids=[1]))
    assert IssueCode.BELOW_MINIMUM in exc.value.result.codes()
    assert service.list_bundles() == []


def test_create_rejects_unknown_services(service):
    with pytest.raises(BundleValidationError) as exc:
        service.create_bundle(BundleDraft(name="Ghost", strategy=SumStrategy(), service_ids=[1, 99]))
    assert IssueCode.UNKNOWN_SERVICE in exc.value.result.codes()


def test_create_rejects_missing_fixed_price(service):
    with pytest.raises(BundleValidationError) as exc:
        service.create_bundle(BundleDraft(name="Fixed", strategy=FixedStrategy(), service_ids=[1, 2]))
    assert exc.value.result.errors_for("fixedPriceAmountMinor")


def test_update_recomputes_and_keeps_created_at(service):
    created = service.create_bundle(BundleDraft(name="Duo", strategy=SumStrategy(), service_ids=[1, 2]))
    updated = service.update_bundle(created.id, BundleDraft(
        name="Duo Plus", description=" Now fixed ", strategy=FixedStrategy(fixed_price_minor=2000),
        service_ids=[1, 2, 3]))

    assert updated.calculated_price_minor == 2000
    assert updated.description == "Now fixed"
    assert updated.created_at == created.created_at
    assert updated.updated_at > created.updated_at
    assert service.get_bundle(created.id).name == "Duo Plus"


def test_update_missing_bundle(service):
    with pytest.raises(BundleNotFoundError):
        service.update_bundle(42, BundleDraft(name="Duo", strategy=SumStrategy(), service_ids=[1, 2]))


def test_delete(service):
    created = service.create_bundle(BundleDraft(name="Duo", strategy=SumStrategy(), service_ids=[1, 2]))
    assert service.delete_bundle(created.id)
    assert service.get_bundle(created.id) is None
    with pytest.raises(BundleNotFoundError):
        service.delete_bundle(created.id)


def test_list_with_filter_spec(service):
    service.create_bundle(BundleDraft(name="Cheap", strategy=SumStrategy(), service_ids=[1, 3]))
    service.create_bundle(BundleDraft(name="Big", strategy=SumStrategy(), service_ids=[2, 4]))

    result = service.list_bundles(BundleFilterSpec(price_min="20"))
    assert [b.name for b in result] == ["Big"]


def test_stats(service):
    service.create_bundle(BundleDraft(name="Duo", strategy=SumStrategy(), service_ids=[1, 2]))
    service.create_bundle(BundleDraft(name="Fix", strategy=FixedStrategy(fixed_price_minor=1), service_ids=[1, 2]))

    stats = service.get_stats()
    assert stats["total"] == 2
    assert stats["by_price_type"] == {"sum": 1, "fixed": 1, "discount": 0}
    assert stats["catalog_services"] == 4
