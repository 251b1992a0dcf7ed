from __future__ import annotations

import logging
from typing import Optional, Sequence

from ..common.validators import require_non_empty
from ..core.exceptions import NotFoundError, OutsideAllowedNetwork
from .model import OfficeNetwork, validate_ip_spec
from .repository import OfficeNetworkRepository

logger = logging.getLogger(__name__)


class OfficeNetworkRegistry:
    """Allow-list of office networks; read on every check-in/check-out."""

    def __init__(self, networks: OfficeNetworkRepository):
        self._networks = networks

    def list_all(self) -> Sequence[OfficeNetwork]:
        return self._networks.list_all()

    def get(self, network_id: int) -> OfficeNetwork:
        network = self._networks.get_by_id(int(network_id))
        if not network:
            raise NotFoundError("Không tìm thấy địa chỉ IP văn phòng")
        return network

    def create(self, *, office_name: str, ip_address: str, enabled: bool = True) -> OfficeNetwork:
        name = require_non_empty(office_name, "Tên văn phòng")
        spec = validate_ip_spec(ip_address)
        network_id = self._networks.create(office_name=name, ip_address=spec, enabled=bool(enabled))
        logger.info("Office network %s added (%s, enabled=%s)", name, spec, enabled)
        return self.get(network_id)

    def update(
        self,
        network_id: int,
        *,
        office_name: Optional[str] = None,
        ip_address: Optional[str] = None,
        enabled: Optional[bool] = None,
    ) -> OfficeNetwork:
        current = self.get(network_id)
        name = require_non_empty(office_name, "Tên văn phòng") if office_name is not None else current.office_name
        spec = validate_ip_spec(ip_address) if ip_address is not None else current.ip_address
        flag = bool(enabled) if enabled is not None else current.enabled

        if not self._networks.update(network_id=current.network_id, office_name=name, ip_address=spec, enabled=flag):
            raise NotFoundError("Không tìm thấy địa chỉ IP văn phòng")
        return self.get(current.network_id)

    def delete(self, network_id: int) -> None:
        if not self._networks.delete(int(network_id)):
            raise NotFoundError("Không tìm thấy địa chỉ IP văn phòng")
        logger.info("Office network %s removed", network_id)

    def is_allowed(self, ip: str) -> bool:
        return any(n.contains(ip) for n in self._networks.list_enabled() if n.enabled)

    def require_allowed(self, ip: str) -> None:
        if not self.is_allowed(ip):
            logger.info("Attendance attempt rejected from %s (outside office networks)", ip)
            raise OutsideAllowedNetwork()
