from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import OfficeNetwork


class OfficeNetworkRepository(Protocol):
    def list_all(self) -> Sequence[OfficeNetwork]:
        raise NotImplementedError

    def list_enabled(self) -> Sequence[OfficeNetwork]:
        raise NotImplementedError

    def get_by_id(self, network_id: int) -> Optional[OfficeNetwork]:
        raise NotImplementedError

    def create(self, *, office_name: str, ip_address: str, enabled: bool) -> int:
        raise NotImplementedError

    def update(self, *, network_id: int, office_name: str, ip_address: str, enabled: bool) -> bool:
        raise NotImplementedError

    def delete(self, network_id: int) -> bool:
        raise NotImplementedError
