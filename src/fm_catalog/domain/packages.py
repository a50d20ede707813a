"""Package resolution.

The basic tier is always complete. Standard and premium fall back to the
basic tier field by field, so a seller who never filled them in can still
be ordered from at those tiers.
"""

from src.fm_catalog.domain.models import PackageSnapshot, Service
from src.fm_common.enums import PackageType


def resolve_package(service: Service, package_type: str) -> PackageSnapshot:
    """Raises ValueError for an unknown tier name."""
    try:
        kind = PackageType(package_type)
    except ValueError:
        raise ValueError(f"Unknown package type: {package_type!r}") from None

    basic = service.basic
    if basic.price is None or basic.delivery_days is None:
        raise ValueError(f"Service {service.id} has an incomplete basic package")

    chosen = service.tier(kind.value)
    return PackageSnapshot(
        type=kind.value,
        price=chosen.price if chosen.price is not None else basic.price,
        delivery_days=(
            chosen.delivery_days if chosen.delivery_days is not None else basic.delivery_days
        ),
        description=chosen.description if chosen.description is not None else basic.description,
    )
