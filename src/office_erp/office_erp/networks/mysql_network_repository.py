from __future__ import annotations

from typing import Optional, Sequence

import mysql.connector

from ..core.exceptions import ValidationError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, is_duplicate_key
from .model import OfficeNetwork
from .repository import OfficeNetworkRepository

_COLUMNS = "network_id, office_name, ip_address, enabled, created_at"


def _to_network(r: dict) -> OfficeNetwork:
    return OfficeNetwork(
        network_id=int(r["network_id"]),
        office_name=r["office_name"],
        ip_address=r["ip_address"],
        enabled=bool(r["enabled"]),
        created_at=r.get("created_at"),
    )


class MySQLOfficeNetworkRepository(OfficeNetworkRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_all(self) -> Sequence[OfficeNetwork]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM office_networks ORDER BY office_name ASC")
            return [_to_network(r) for r in fetchall(cur)]

    def list_enabled(self) -> Sequence[OfficeNetwork]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM office_networks WHERE enabled=1")
            return [_to_network(r) for r in fetchall(cur)]

    def get_by_id(self, network_id: int) -> Optional[OfficeNetwork]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM office_networks WHERE network_id=%s", (int(network_id),))
            r = fetchone(cur)
            return _to_network(r) if r else None

    def create(self, *, office_name: str, ip_address: str, enabled: bool) -> int:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    "INSERT INTO office_networks(office_name, ip_address, enabled) VALUES(%s,%s,%s)",
                    (office_name, ip_address, int(bool(enabled))),
                )
                return int(cur.lastrowid)
        except mysql.connector.IntegrityError as e:
            if is_duplicate_key(e):
                raise ValidationError("Tên văn phòng đã tồn tại")
            raise

    def update(self, *, network_id: int, office_name: str, ip_address: str, enabled: bool) -> bool:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    UPDATE office_networks
                    SET office_name=%s, ip_address=%s, enabled=%s
                    WHERE network_id=%s
                    """,
                    (office_name, ip_address, int(bool(enabled)), int(network_id)),
                )
                # rowcount is 0 for a no-op update too, so check existence separately.
                if cur.rowcount > 0:
                    return True
                cur.execute("SELECT 1 AS found FROM office_networks WHERE network_id=%s", (int(network_id),))
                return fetchone(cur) is not None
        except mysql.connector.IntegrityError as e:
            if is_duplicate_key(e):
                raise ValidationError("Tên văn phòng đã tồn tại")
            raise

    def delete(self, network_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM office_networks WHERE network_id=%s", (int(network_id),))
            return cur.rowcount > 0
