from __future__ import annotations

from typing import Optional, Sequence

from ..common.geo import Geolocation
from ..core.exceptions import RegistryUnavailable
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, optional_float
from .model import OfficeNetwork
from .repository import OfficeNetworkRepository

_COLUMNS = "office_id, office_name, ip_address, latitude, longitude, created_at"


def _to_office(r: dict) -> OfficeNetwork:
    lat = optional_float(r.get("latitude"))
    lon = optional_float(r.get("longitude"))
    anchor = Geolocation(longitude=lon, latitude=lat) if lat is not None and lon is not None else None
    return OfficeNetwork(
        office_id=int(r["office_id"]),
        office_name=r["office_name"],
        ip_address=r["ip_address"],
        anchor=anchor,
        created_at=r.get("created_at"),
    )


class MySQLOfficeNetworkRepository(OfficeNetworkRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _cursor(self):
        return db_cursor(self._conn_factory, unavailable=RegistryUnavailable)

    def list_all(self) -> Sequence[OfficeNetwork]:
        with self._cursor() as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM office_networks ORDER BY office_name ASC")
            return [_to_office(r) for r in fetchall(cur)]

    def create(self, *, office_name: str, ip_address: str, anchor: Optional[Geolocation] = None) -> int:
        with self._cursor() as (_, cur):
            cur.execute(
                """
                INSERT INTO office_networks(office_name, ip_address, latitude, longitude)
                VALUES(%s,%s,%s,%s)
                """,
                (
                    office_name,
                    ip_address,
                    anchor.latitude if anchor else None,
                    anchor.longitude if anchor else None,
                ),
            )
            return int(cur.lastrowid)

    def delete_by_id(self, office_id: int) -> bool:
        with self._cursor() as (_, cur):
            cur.execute("DELETE FROM office_networks WHERE office_id=%s", (int(office_id),))
            return cur.rowcount > 0
