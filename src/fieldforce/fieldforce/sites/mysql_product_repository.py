from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause, integrity_as_conflict
from .model import Product
from .repository import ProductRepository

_COLUMNS = "product_id, name, sku, unit, description, is_active"


def _to_product(r: dict) -> Product:
    return Product(
        product_id=int(r["product_id"]),
        name=r["name"],
        sku=r.get("sku"),
        unit=r.get("unit"),
        description=r.get("description"),
        is_active=bool(r.get("is_active", True)),
    )


class MySQLProductRepository(ProductRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, product_id: int) -> Optional[Product]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM products WHERE product_id=%s", (int(product_id),))
            r = fetchone(cur)
            return _to_product(r) if r else None

    def get_many(self, product_ids: Sequence[int]) -> Sequence[Product]:
        ids = [int(p) for p in product_ids]
        if not ids:
            return []
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM products WHERE product_id IN ({in_clause(ids)})", tuple(ids))
            return [_to_product(r) for r in fetchall(cur)]

    def list_all(self, *, active_only: bool = True) -> Sequence[Product]:
        where = "WHERE is_active=1" if active_only else ""
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM products {where} ORDER BY name")
            return [_to_product(r) for r in fetchall(cur)]

    def create(self, product: Product) -> int:
        with integrity_as_conflict("A product with this SKU already exists"):
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    "INSERT INTO products(name, sku, unit, description, is_active) VALUES(%s,%s,%s,%s,1)",
                    (product.name, product.sku, product.unit, product.description),
                )
                return int(cur.lastrowid)

    def update(self, product: Product) -> bool:
        with integrity_as_conflict("A product with this SKU already exists"):
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    "UPDATE products SET name=%s, sku=%s, unit=%s, description=%s WHERE product_id=%s",
                    (product.name, product.sku, product.unit, product.description, int(product.product_id)),
                )
                return cur.rowcount > 0

    def set_active(self, product_id: int, *, is_active: bool) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE products SET is_active=%s WHERE product_id=%s", (1 if is_active else 0, int(product_id)))
            return cur.rowcount > 0
