from __future__ import annotations

from flask import Flask, request

from ..common.web import as_bool, current_role, json_body, login_required, ok
from ..container import Container


def register(app: Flask, container: Container) -> None:
    sites = container.site_service
    products = container.product_service
    positions = container.position_service

    @app.route("/api/sites", methods=["GET"], endpoint="api_sites")
    @login_required
    def list_sites():
        active_only = not as_bool(request.args.get("include_inactive", "0"))
        return ok(sites.list_sites(active_only=active_only))

    @app.route("/api/sites/<int:site_id>", methods=["GET"], endpoint="api_site")
    @login_required
    def get_site(site_id: int):
        return ok(sites.get_site(site_id))

    @app.route("/api/sites", methods=["POST"], endpoint="api_site_create")
    @login_required
    def create_site():
        site = sites.create_site(current_role=current_role(), fields=json_body())
        return ok(site, status=201)

    @app.route("/api/sites/<int:site_id>", methods=["PATCH"], endpoint="api_site_update")
    @login_required
    def update_site(site_id: int):
        return ok(sites.update_site(current_role=current_role(), site_id=site_id, changes=json_body()))

    @app.route("/api/sites/<int:site_id>", methods=["DELETE"], endpoint="api_site_deactivate")
    @login_required
    def deactivate_site(site_id: int):
        sites.deactivate_site(current_role=current_role(), site_id=site_id)
        return ok(message="Site deactivated")

    @app.route("/api/products", methods=["GET"], endpoint="api_products")
    @login_required
    def list_products():
        active_only = not as_bool(request.args.get("include_inactive", "0"))
        return ok(products.list_products(active_only=active_only))

    @app.route("/api/products", methods=["POST"], endpoint="api_product_create")
    @login_required
    def create_product():
        data = json_body()
        product = products.create_product(
            current_role=current_role(),
            name=data.get("name", ""),
            sku=data.get("sku"),
            unit=data.get("unit"),
            description=data.get("description"),
        )
        return ok(product, status=201)

    @app.route("/api/products/<int:product_id>", methods=["PATCH"], endpoint="api_product_update")
    @login_required
    def update_product(product_id: int):
        return ok(products.update_product(current_role=current_role(), product_id=product_id, changes=json_body()))

    @app.route("/api/products/<int:product_id>", methods=["DELETE"], endpoint="api_product_deactivate")
    @login_required
    def deactivate_product(product_id: int):
        products.deactivate_product(current_role=current_role(), product_id=product_id)
        return ok(message="Product deactivated")

    @app.route("/api/positions", methods=["GET"], endpoint="api_positions")
    @login_required
    def list_positions():
        return ok(positions.list_positions())

    @app.route("/api/positions", methods=["POST"], endpoint="api_position_create")
    @login_required
    def create_position():
        data = json_body()
        position = positions.create_position(
            current_role=current_role(), title=data.get("title", ""), description=data.get("description")
        )
        return ok(position, status=201)
