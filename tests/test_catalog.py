"""
Catalog loader tests.
"""
import pytest

from bundle_pricing.data.catalog import load_services
from bundle_pricing.engine.price_engine import compute_sum_minor


def test_load_services(tmp_path):
    path = tmp_path / "services.csv"
    path.write_text(
        " id , Name ,price,duration\n"
        "1, Haircut ,25.00,30\n"
        "2,Beard Trim,15.50,\n"
        ",Orphan,1.00,5\n",
        encoding="utf-8",
    )

    services = load_services(path, currency="usd")

    assert [s.id for s in services] == [1, 2]
    assert services[0].name == "Haircut"
    assert services[0].currency == "usd"
    assert services[1].duration == 0
    assert compute_sum_minor(services) == 4050


def test_row_currency_overrides_default(tmp_path):
    path = tmp_path / "services.csv"
    path.write_text("id,name,price,currency\n1,Cut,10,GBP\n", encoding="utf-8")
    assert load_services(path, currency="eur")[0].currency == "gbp"


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_services(tmp_path / "nope.csv")


def test_missing_columns(tmp_path):
    path = tmp_path / "services.csv"
    path.write_text("id,name\n1,Cut\n", encoding="utf-8")
    with pytest.raises(ValueError):
        load_services(path)


def test_packaged_sample_catalog_loads():
    services = load_services()
    assert len(services) >= 2
