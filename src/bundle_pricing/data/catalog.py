"""
Catalog Loader - reads the service catalog into Service records.

Expected columns: id, name, price (major units), duration (minutes),
and optionally currency. Headers and string cells are stripped.
"""
from pathlib import Path
from typing import Optional

import pandas as pd

from ..config.settings import get_settings
from ..engine.models import Service


REQUIRED_COLUMNS = ('id', 'name', 'price')


def load_services(path: Optional[Path] = None, currency: Optional[str] = None) -> list[Service]:
    """
    Load services from a catalog CSV.

    Args:
        path: CSV path, defaults to settings.services_csv
        currency: Currency for rows without a currency column/value

    Returns:
        List of Service records in file order
    """
    settings = get_settings()
    path = Path(path or settings.services_csv)
    currency = currency or settings.currency

    if not path.exists():
        raise FileNotFoundError(f"Service catalog not found at {path}.")

    df = pd.read_csv(path, dtype=str).fillna('')

    # Normalize headers and cells
    df.columns = [c.strip().lower() for c in df.columns]
    for col in df.columns:
        df[col] = df[col].astype(str).str.strip()

    missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
    if missing:
        raise ValueError(f"Service catalog {path.name} is missing columns: {', '.join(missing)}")

    df = df[(df['id'] != '') & (df['name'] != '')]

    services = []
    for _, row in df.iterrows():
        duration = pd.to_numeric(row.get('duration', ''), errors='coerce')
        services.append(Service(
            id=int(row['id']),
            name=row['name'],
            price=row['price'] or '0',
            currency=(row.get('currency') or currency).lower(),
            duration=0 if pd.isna(duration) else int(duration),
        ))
    return services
