"""
Shared service instances for the API process.
"""
import logging

from ..config.settings import get_settings
from ..data.catalog import load_services
from ..services.bundle_service import BundleService

logger = logging.getLogger(__name__)

settings = get_settings()


def _load_catalog() -> list:
    try:
        services = load_services(settings.services_csv, settings.currency)
    except FileNotFoundError as e:
        logger.warning("Starting with an empty service catalog: %s", e)
        return []
    logger.info("Loaded %d services from %s", len(services), settings.services_csv)
    return services


bundle_service = BundleService(catalog=_load_catalog(), currency=settings.currency)


def get_bundle_service() -> BundleService:
    """FastAPI dependency returning the process-wide bundle service."""
    return bundle_service
