from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Position, Product, Site


class SiteRepository(Protocol):
    def get_by_id(self, site_id: int) -> Optional[Site]:
        raise NotImplementedError

    def list_all(self, *, active_only: bool = True) -> Sequence[Site]:
        raise NotImplementedError

    def create(self, site: Site) -> int:
        """Insert ``site`` (its ``site_id`` is ignored) and return the new id."""
        raise NotImplementedError

    def update(self, site: Site) -> bool:
        raise NotImplementedError

    def set_active(self, site_id: int, *, is_active: bool) -> bool:
        raise NotImplementedError


class ProductRepository(Protocol):
    def get_by_id(self, product_id: int) -> Optional[Product]:
        raise NotImplementedError

    def get_many(self, product_ids: Sequence[int]) -> Sequence[Product]:
        raise NotImplementedError

    def list_all(self, *, active_only: bool = True) -> Sequence[Product]:
        raise NotImplementedError

    def create(self, product: Product) -> int:
        raise NotImplementedError

    def update(self, product: Product) -> bool:
        raise NotImplementedError

    def set_active(self, product_id: int, *, is_active: bool) -> bool:
        raise NotImplementedError


class PositionRepository(Protocol):
    def get_by_id(self, position_id: int) -> Optional[Position]:
        raise NotImplementedError

    def list_all(self) -> Sequence[Position]:
        raise NotImplementedError

    def create(self, *, title: str, description: Optional[str]) -> int:
        raise NotImplementedError
