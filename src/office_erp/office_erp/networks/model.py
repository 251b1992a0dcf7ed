from __future__ import annotations

import ipaddress
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Union

from ..core.exceptions import ValidationError

IPAddress = Union[ipaddress.IPv4Address, ipaddress.IPv6Address]


@dataclass(frozen=True)
class OfficeNetwork:
    """Một địa chỉ/dải IP văn phòng được phép chấm công."""

    network_id: int
    office_name: str
    ip_address: str
    enabled: bool = True
    created_at: Optional[datetime] = None

    def contains(self, ip: str) -> bool:
        return address_matches(self.ip_address, ip)


def parse_ip(value: str) -> Optional[IPAddress]:
    try:
        return ipaddress.ip_address((value or "").strip())
    except ValueError:
        return None


def validate_ip_spec(spec: str) -> str:
    """Accepts ``a.b.c.d``, ``a.b.c.0/24`` or ``a.b.c.10-a.b.c.20``."""

    spec = (spec or "").strip()
    if not spec:
        raise ValidationError("Địa chỉ IP không được để trống")

    if "/" in spec:
        try:
            ipaddress.ip_network(spec, strict=False)
        except ValueError:
            raise ValidationError("Dải IP (CIDR) không hợp lệ")
        return spec

    if "-" in spec:
        low_s, _, high_s = spec.partition("-")
        low, high = parse_ip(low_s), parse_ip(high_s)
        if low is None or high is None or low.version != high.version or low > high:
            raise ValidationError("Khoảng IP không hợp lệ")
        return f"{low}-{high}"

    if parse_ip(spec) is None:
        raise ValidationError("Địa chỉ IP không hợp lệ")
    return spec


def address_matches(spec: str, ip: str) -> bool:
    addr = parse_ip(ip)
    if addr is None:
        return False
    # IPv4 clients reaching a dual-stack socket show up as ::ffff:a.b.c.d
    if isinstance(addr, ipaddress.IPv6Address) and addr.ipv4_mapped is not None:
        addr = addr.ipv4_mapped

    spec = (spec or "").strip()
    if "/" in spec:
        try:
            network = ipaddress.ip_network(spec, strict=False)
        except ValueError:
            return False
        return addr.version == network.version and addr in network

    if "-" in spec:
        low_s, _, high_s = spec.partition("-")
        low, high = parse_ip(low_s), parse_ip(high_s)
        if low is None or high is None or low.version != addr.version or high.version != addr.version:
            return False
        return low <= addr <= high

    single = parse_ip(spec)
    return single is not None and single == addr
