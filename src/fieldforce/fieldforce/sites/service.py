from __future__ import annotations

import dataclasses
import logging
from typing import Optional

from ..common.geo import Coordinates
from ..common.validators import optional_text, require_non_empty
from ..core.enums import Action, Role
from ..core.exceptions import NotFoundError, ValidationError
from ..core.permissions import require
from .model import Position, Product, Site
from .repository import PositionRepository, ProductRepository, SiteRepository

logger = logging.getLogger(__name__)

_SITE_FIELDS = frozenset(
    {
        "name",
        "address",
        "contact_name",
        "contact_phone",
        "contact_email",
        "requires_photo",
        "latitude",
        "longitude",
        "geofence_radius_m",
    }
)
_PRODUCT_FIELDS = frozenset({"name", "sku", "unit", "description"})


def _number(value, field_name: str, cast=float):
    if value is None or value == "":
        return None
    try:
        return cast(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a number")


def _validated_site(site: Site) -> Site:
    name = require_non_empty(site.name, "Site name")
    lat = _number(site.latitude, "Latitude")
    lng = _number(site.longitude, "Longitude")
    if (lat is None) != (lng is None):
        raise ValidationError("Latitude and longitude must be provided together")
    if lat is not None:
        # Range check only.
        Coordinates(latitude=lat, longitude=lng)
    radius = _number(site.geofence_radius_m, "Geofence radius", int)
    if radius is not None:
        if lat is None:
            raise ValidationError("A geofence radius needs site coordinates")
        if radius <= 0:
            raise ValidationError("Geofence radius must be greater than 0")
    return dataclasses.replace(
        site,
        name=name,
        address=optional_text(site.address),
        contact_name=optional_text(site.contact_name),
        contact_phone=optional_text(site.contact_phone),
        contact_email=optional_text(site.contact_email),
        requires_photo=bool(site.requires_photo),
        latitude=lat,
        longitude=lng,
        geofence_radius_m=radius,
    )


class SiteService:
    """Use case: manage client sites (manager/admin)."""

    def __init__(self, sites: SiteRepository):
        self._sites = sites

    def get_site(self, site_id: int) -> Site:
        site = self._sites.get_by_id(int(site_id))
        if not site:
            raise NotFoundError("Site not found")
        return site

    def list_sites(self, *, active_only: bool = True) -> list[Site]:
        return list(self._sites.list_all(active_only=active_only))

    def create_site(self, *, current_role: Role, fields: dict) -> Site:
        require(current_role, Action.MANAGE_SITES)
        unknown = set(fields) - _SITE_FIELDS
        if unknown:
            raise ValidationError(f"Unknown site fields: {', '.join(sorted(unknown))}")
        values = dict(fields)
        site = _validated_site(Site(site_id=0, name=values.pop("name", ""), **values))
        site_id = self._sites.create(site)
        logger.info("Site %s created: %s", site_id, site.name)
        return dataclasses.replace(site, site_id=site_id)

    def update_site(self, *, current_role: Role, site_id: int, changes: dict) -> Site:
        require(current_role, Action.MANAGE_SITES)
        unknown = set(changes) - _SITE_FIELDS
        if unknown:
            raise ValidationError(f"Unknown site fields: {', '.join(sorted(unknown))}")
        site = _validated_site(dataclasses.replace(self.get_site(site_id), **changes))
        self._sites.update(site)
        logger.info("Site %s updated (%s)", site.site_id, ", ".join(sorted(changes)))
        return site

    def deactivate_site(self, *, current_role: Role, site_id: int) -> None:
        require(current_role, Action.MANAGE_SITES)
        site = self.get_site(site_id)
        self._sites.set_active(site.site_id, is_active=False)
        logger.info("Site %s deactivated", site.site_id)


class ProductService:
    def __init__(self, products: ProductRepository):
        self._products = products

    def list_products(self, *, active_only: bool = True) -> list[Product]:
        return list(self._products.list_all(active_only=active_only))

    def get_product(self, product_id: int) -> Product:
        product = self._products.get_by_id(int(product_id))
        if not product:
            raise NotFoundError("Product not found")
        return product

    def create_product(
        self,
        *,
        current_role: Role,
        name: str,
        sku: Optional[str] = None,
        unit: Optional[str] = None,
        description: Optional[str] = None,
    ) -> Product:
        require(current_role, Action.MANAGE_SITES)
        product = Product(
            product_id=0,
            name=require_non_empty(name, "Product name"),
            sku=optional_text(sku),
            unit=optional_text(unit),
            description=optional_text(description),
        )
        product_id = self._products.create(product)
        return dataclasses.replace(product, product_id=product_id)

    def update_product(self, *, current_role: Role, product_id: int, changes: dict) -> Product:
        require(current_role, Action.MANAGE_SITES)
        unknown = set(changes) - _PRODUCT_FIELDS
        if unknown:
            raise ValidationError(f"Unknown product fields: {', '.join(sorted(unknown))}")
        product = dataclasses.replace(self.get_product(product_id), **changes)
        product = dataclasses.replace(
            product,
            name=require_non_empty(product.name, "Product name"),
            sku=optional_text(product.sku),
            unit=optional_text(product.unit),
            description=optional_text(product.description),
        )
        self._products.update(product)
        return product

    def deactivate_product(self, *, current_role: Role, product_id: int) -> None:
        require(current_role, Action.MANAGE_SITES)
        product = self.get_product(product_id)
        self._products.set_active(product.product_id, is_active=False)
        logger.info("Product %s deactivated", product.product_id)


class PositionService:
    def __init__(self, positions: PositionRepository):
        self._positions = positions

    def list_positions(self) -> list[Position]:
        return list(self._positions.list_all())

    def create_position(self, *, current_role: Role, title: str, description: Optional[str] = None) -> Position:
        require(current_role, Action.MANAGE_EMPLOYEES)
        title = require_non_empty(title, "Position title")
        position_id = self._positions.create(title=title, description=optional_text(description))
        return Position(position_id=position_id, title=title, description=optional_text(description))
