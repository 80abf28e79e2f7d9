from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, integrity_as_conflict
from .model import Site
from .repository import SiteRepository

_COLUMNS = (
    "site_id, name, address, contact_name, contact_phone, contact_email, "
    "requires_photo, latitude, longitude, geofence_radius_m, is_active"
)


def _to_site(r: dict) -> Site:
    return Site(
        site_id=int(r["site_id"]),
        name=r["name"],
        address=r.get("address"),
        contact_name=r.get("contact_name"),
        contact_phone=r.get("contact_phone"),
        contact_email=r.get("contact_email"),
        requires_photo=bool(r.get("requires_photo")),
        latitude=float(r["latitude"]) if r.get("latitude") is not None else None,
        longitude=float(r["longitude"]) if r.get("longitude") is not None else None,
        geofence_radius_m=int(r["geofence_radius_m"]) if r.get("geofence_radius_m") is not None else None,
        is_active=bool(r.get("is_active", True)),
    )


def _values(site: Site) -> tuple:
    return (
        site.name,
        site.address,
        site.contact_name,
        site.contact_phone,
        site.contact_email,
        int(site.requires_photo),
        site.latitude,
        site.longitude,
        site.geofence_radius_m,
    )


class MySQLSiteRepository(SiteRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, site_id: int) -> Optional[Site]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM sites WHERE site_id=%s", (int(site_id),))
            r = fetchone(cur)
            return _to_site(r) if r else None

    def list_all(self, *, active_only: bool = True) -> Sequence[Site]:
        where = "WHERE is_active=1" if active_only else ""
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM sites {where} ORDER BY name")
            return [_to_site(r) for r in fetchall(cur)]

    def create(self, site: Site) -> int:
        with integrity_as_conflict("A site with this name already exists"):
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO sites(name, address, contact_name, contact_phone, contact_email,
                                      requires_photo, latitude, longitude, geofence_radius_m, is_active)
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,1)
                    """,
                    _values(site),
                )
                return int(cur.lastrowid)

    def update(self, site: Site) -> bool:
        with integrity_as_conflict("A site with this name already exists"):
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    UPDATE sites
                    SET name=%s, address=%s, contact_name=%s, contact_phone=%s, contact_email=%s,
                        requires_photo=%s, latitude=%s, longitude=%s, geofence_radius_m=%s
                    WHERE site_id=%s
                    """,
                    _values(site) + (int(site.site_id),),
                )
                return cur.rowcount > 0

    def set_active(self, site_id: int, *, is_active: bool) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE sites SET is_active=%s WHERE site_id=%s", (1 if is_active else 0, int(site_id)))
            return cur.rowcount > 0
