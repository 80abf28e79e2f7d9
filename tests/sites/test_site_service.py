from __future__ import annotations

import pytest

from src.fieldforce.fieldforce.core.enums import Role
from src.fieldforce.fieldforce.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from src.fieldforce.fieldforce.sites.service import ProductService, SiteService
from tests.fakes import FakeProductRepo, FakeSiteRepo


def test_create_site_with_geofence():
    service = SiteService(FakeSiteRepo())
    site = service.create_site(
        current_role=Role.MANAGER,
        fields={"name": " Acme ", "latitude": "10.77", "longitude": "106.70", "geofence_radius_m": "150"},
    )
    assert site.site_id == 1
    assert site.name == "Acme"
    assert site.has_geofence
    assert site.geofence_radius_m == 150
    assert service.get_site(1) == site


@pytest.mark.parametrize(
    "fields",
    [
        {"name": ""},
        {"name": "A", "latitude": 10},
        {"name": "A", "geofence_radius_m": 100},
        {"name": "A", "latitude": 10, "longitude": 10, "geofence_radius_m": 0},
        {"name": "A", "latitude": 91, "longitude": 10},
        {"name": "A", "owner": "me"},
    ],
)
def test_invalid_sites_rejected(fields):
    with pytest.raises(ValidationError):
        SiteService(FakeSiteRepo()).create_site(current_role=Role.ADMIN, fields=fields)


def test_update_and_deactivate_site():
    service = SiteService(FakeSiteRepo())
    site = service.create_site(current_role=Role.MANAGER, fields={"name": "Acme"})
    updated = service.update_site(current_role=Role.MANAGER, site_id=site.site_id, changes={"requires_photo": True})
    assert updated.requires_photo
    service.deactivate_site(current_role=Role.MANAGER, site_id=site.site_id)
    assert service.list_sites() == []
    assert len(service.list_sites(active_only=False)) == 1
    with pytest.raises(AuthorizationError):
        service.deactivate_site(current_role=Role.EMPLOYEE, site_id=site.site_id)
    with pytest.raises(NotFoundError):
        service.get_site(42)


def test_products():
    service = ProductService(FakeProductRepo())
    product = service.create_product(current_role=Role.MANAGER, name="Widget", sku=" W-1 ")
    assert product.sku == "W-1"
    renamed = service.update_product(current_role=Role.MANAGER, product_id=product.product_id, changes={"name": "Gadget"})
    assert renamed.name == "Gadget"
    with pytest.raises(ValidationError):
        service.update_product(current_role=Role.MANAGER, product_id=product.product_id, changes={"price": 3})
