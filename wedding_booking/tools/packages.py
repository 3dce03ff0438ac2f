"""
Mock wedding package catalog.

In production, packages are owned by the planners' catalog management
service and fetched over the API. The booking core only reads them.
"""

import logging
from typing import Optional

from wedding_booking.schemas.package_schema import Package

logger = logging.getLogger(__name__)

_DEFAULT_CATALOG: dict[int, Package] = {
    1: Package(
        id=1,
        name="Intimate Civil Ceremony",
        default_slots=5,
        preparation_days=0,
        price=35000.0,
    ),
    3: Package(
        id=3,
        name="Grand Ballroom Celebration",
        default_slots=1,
        preparation_days=3,
        price=250000.0,
    ),
    7: Package(
        id=7,
        name="Garden Romance Package",
        default_slots=3,
        preparation_days=2,
        price=120000.0,
    ),
}

PACKAGE_CATALOG: dict[int, Package] = dict(_DEFAULT_CATALOG)


def get_package(package_id: int) -> Optional[Package]:
    """Look up a package by id. Returns None if not found."""
    return PACKAGE_CATALOG.get(package_id)


def get_all_packages() -> list[Package]:
    return [PACKAGE_CATALOG[pid] for pid in sorted(PACKAGE_CATALOG)]


def get_preparation_days(package_id: int) -> Optional[int]:
    package = get_package(package_id)
    return package.preparation_days if package else None


def register_package(package: Package) -> Package:
    """Add or replace a package in the catalog."""
    PACKAGE_CATALOG[package.id] = package
    logger.info("Package registered: %s (%s)", package.id, package.name or "unnamed")
    return package


def reset() -> None:
    """Restore the built-in catalog. Used by test fixtures for isolation."""
    PACKAGE_CATALOG.clear()
    PACKAGE_CATALOG.update(_DEFAULT_CATALOG)
