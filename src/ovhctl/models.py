"""Data classes mapping the OVHcloud API payloads.

Every listable entity exposes the same table-row capability
(`short_columns`, `short_row`, `wide_columns`, `wide_row`) so a single
formatter can render any of them, plus `to_dict` for JSON/YAML output.
"""

from __future__ import annotations

import ipaddress
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from .errors import DeserializationError

NONE_LABEL = "<none>"


def _require(data: Any, key: str) -> Any:
    if not isinstance(data, dict):
        raise DeserializationError(f"expected an object, got {type(data).__name__}")
    if key not in data:
        raise DeserializationError(f"missing field '{key}'")
    return data[key]


def _optional_str(value: Any) -> str:
    return NONE_LABEL if value is None else str(value)


# =============================================================================
# Authentication
# =============================================================================


@dataclass(frozen=True)
class Credential:
    """Resolved credential bundle used to sign requests."""

    endpoint: str
    application_key: str
    application_secret: str
    consumer_key: str


@dataclass(frozen=True)
class AccessRule:
    method: str
    path: str

    def to_api(self) -> Dict[str, str]:
        return {"method": self.method, "path": self.path}


@dataclass(frozen=True)
class CredentialRequest:
    access_rules: Tuple[AccessRule, ...]
    redirection: str

    def to_api(self) -> Dict[str, Any]:
        return {
            "accessRules": [rule.to_api() for rule in self.access_rules],
            "redirection": self.redirection,
        }


@dataclass(frozen=True)
class CredentialValidation:
    validation_url: str
    consumer_key: str
    state: str

    @classmethod
    def from_api(cls, data: Any) -> "CredentialValidation":
        return cls(
            validation_url=str(_require(data, "validationUrl")),
            consumer_key=str(_require(data, "consumerKey")),
            state=str(_require(data, "state")),
        )


# =============================================================================
# Public cloud
# =============================================================================


@dataclass(frozen=True)
class Tenant:
    """A public cloud project."""

    project_id: str
    description: str
    plan_code: str
    unleash: bool
    status: str
    access: str

    short_columns = ("Tenant", "Status", "Description", "Plan code", "Unleash", "Access")
    wide_columns = short_columns

    @classmethod
    def from_api(cls, data: Any) -> "Tenant":
        return cls(
            project_id=str(_require(data, "project_id")),
            description=str(data.get("description") or ""),
            plan_code=str(data.get("planCode") or ""),
            unleash=bool(data.get("unleash", False)),
            status=str(_require(data, "status")),
            access=str(data.get("access") or ""),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "project_id": self.project_id,
            "description": self.description,
            "planCode": self.plan_code,
            "unleash": self.unleash,
            "status": self.status,
            "access": self.access,
        }

    def short_row(self) -> List[str]:
        return [
            self.project_id,
            self.status,
            self.description,
            self.plan_code,
            str(self.unleash).lower(),
            self.access,
        ]

    def wide_row(self) -> List[str]:
        return self.short_row()


@dataclass(frozen=True)
class IpAddress:
    """A network address attached to an instance."""

    ip: str
    kind: str
    version: int
    network_id: str
    gateway_ip: Optional[str] = None

    @classmethod
    def from_api(cls, data: Any) -> "IpAddress":
        raw_ip = _require(data, "ip")
        try:
            ip = str(ipaddress.ip_address(str(raw_ip)))
        except ValueError as e:
            raise DeserializationError(f"invalid ip address '{raw_ip}'") from e
        try:
            version = int(_require(data, "version"))
        except (TypeError, ValueError) as e:
            raise DeserializationError(f"invalid ip version for '{ip}'") from e
        return cls(
            ip=ip,
            kind=str(_require(data, "type")),
            version=version,
            network_id=str(data.get("networkId") or ""),
            gateway_ip=data.get("gatewayIp"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ip": self.ip,
            "type": self.kind,
            "version": self.version,
            "networkId": self.network_id,
            "gatewayIp": self.gateway_ip,
        }


@dataclass(frozen=True)
class Instance:
    """A public cloud instance."""

    id: str
    name: str
    ip_addresses: Tuple[IpAddress, ...]
    flavor_id: str
    image_id: str
    region: str
    status: str
    plan_code: str

    short_columns = ("Identifier", "Name", "Region", "Status", "Plan code")
    wide_columns = ("Identifier", "Name", "Region", "Status", "Flavor", "Image", "Plan code")

    @classmethod
    def from_api(cls, data: Any) -> "Instance":
        addresses = data.get("ipAddresses") if isinstance(data, dict) else None
        if addresses is None:
            addresses = []
        if not isinstance(addresses, list):
            raise DeserializationError("field 'ipAddresses' is not a list")
        return cls(
            id=str(_require(data, "id")),
            name=str(_require(data, "name")),
            ip_addresses=tuple(IpAddress.from_api(a) for a in addresses),
            flavor_id=str(data.get("flavorId") or ""),
            image_id=str(data.get("imageId") or ""),
            region=str(data.get("region") or ""),
            status=str(data.get("status") or ""),
            plan_code=str(data.get("planCode") or ""),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "ipAddresses": [a.to_dict() for a in self.ip_addresses],
            "flavorId": self.flavor_id,
            "imageId": self.image_id,
            "region": self.region,
            "status": self.status,
            "planCode": self.plan_code,
        }

    def short_row(self) -> List[str]:
        plan_code = self.plan_code
        if plan_code.endswith(".consumption"):
            plan_code = plan_code[: -len(".consumption")]
        return [self.id, self.name, self.region, self.status, plan_code]

    def wide_row(self) -> List[str]:
        return [
            self.id,
            self.name,
            self.region,
            self.status,
            self.flavor_id,
            self.image_id,
            self.plan_code,
        ]


@dataclass(frozen=True)
class LoadBalancer:
    """A public cloud load balancer (IP load balancing)."""

    region: str
    status: str
    ipv4: str
    applied: int
    latest: int
    id: Optional[str] = None
    name: Optional[str] = None
    description: Optional[str] = None
    ipv6: Optional[str] = None

    short_columns = ("Identifier", "Name", "Description", "Region", "Status", "IPv4")
    wide_columns = short_columns + ("IPv6", "Applied", "Latest")

    @classmethod
    def from_api(cls, data: Any) -> "LoadBalancer":
        address = _require(data, "address")
        configuration = data.get("configuration") or {}
        if not isinstance(address, dict) or not isinstance(configuration, dict):
            raise DeserializationError("malformed load balancer address or configuration")
        try:
            applied = int(configuration.get("applied") or 0)
            latest = int(configuration.get("latest") or 0)
        except (TypeError, ValueError) as e:
            raise DeserializationError(f"malformed load balancer configuration, {e}") from e
        return cls(
            id=data.get("id"),
            name=data.get("name"),
            description=data.get("description"),
            region=str(_require(data, "region")),
            status=str(data.get("status") or ""),
            ipv4=str(address.get("ipv4") or ""),
            ipv6=address.get("ipv6"),
            applied=applied,
            latest=latest,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "region": self.region,
            "status": self.status,
            "address": {"ipv4": self.ipv4, "ipv6": self.ipv6},
            "configuration": {"applied": self.applied, "latest": self.latest},
        }

    def short_row(self) -> List[str]:
        return [
            _optional_str(self.id),
            _optional_str(self.name),
            _optional_str(self.description),
            self.region,
            self.status,
            self.ipv4,
        ]

    def wide_row(self) -> List[str]:
        return self.short_row() + [
            _optional_str(self.ipv6),
            str(self.applied),
            str(self.latest),
        ]


# =============================================================================
# Dedicated
# =============================================================================


@dataclass(frozen=True)
class Server:
    """A dedicated (bare-metal) server."""

    server_id: int
    name: str
    ip: str
    state: str
    reverse: str
    monitoring: bool
    os: str
    datacenter: str
    rack: str
    link_speed: int

    short_columns = ("Identifier", "Name", "Ip", "State", "Reverse")
    wide_columns = short_columns + ("Monitoring", "OS", "Data center", "Rack", "Link speed")

    @classmethod
    def from_api(cls, data: Any) -> "Server":
        try:
            server_id = int(_require(data, "serverId"))
            link_speed = int(data.get("linkSpeed") or 0)
        except (TypeError, ValueError) as e:
            raise DeserializationError(f"malformed server payload, {e}") from e
        return cls(
            server_id=server_id,
            name=str(_require(data, "name")),
            ip=str(data.get("ip") or ""),
            state=str(data.get("state") or ""),
            reverse=str(data.get("reverse") or ""),
            monitoring=bool(data.get("monitoring", False)),
            os=str(data.get("os") or ""),
            datacenter=str(data.get("datacenter") or ""),
            rack=str(data.get("rack") or ""),
            link_speed=link_speed,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "serverId": self.server_id,
            "name": self.name,
            "ip": self.ip,
            "state": self.state,
            "reverse": self.reverse,
            "monitoring": self.monitoring,
            "os": self.os,
            "datacenter": self.datacenter,
            "rack": self.rack,
            "linkSpeed": self.link_speed,
        }

    def short_row(self) -> List[str]:
        return [str(self.server_id), self.name, self.ip, self.state, self.reverse]

    def wide_row(self) -> List[str]:
        return self.short_row() + [
            str(self.monitoring).lower(),
            self.os,
            self.datacenter,
            self.rack,
            str(self.link_speed),
        ]


# =============================================================================
# Domain
# =============================================================================


@dataclass(frozen=True)
class Zone:
    """A DNS zone managed through the provider."""

    name: str
    dnssec_supported: bool
    has_dns_anycast: bool
    name_servers: Tuple[str, ...]

    short_columns = ("Name", "DNS Sec", "DNS AnyCast", "Servers")
    wide_columns = short_columns

    @classmethod
    def from_api(cls, data: Any) -> "Zone":
        name_servers = data.get("nameServers") if isinstance(data, dict) else None
        if not isinstance(name_servers, list):
            name_servers = []
        return cls(
            name=str(_require(data, "name")),
            dnssec_supported=bool(data.get("dnssecSupported", False)),
            has_dns_anycast=bool(data.get("hasDnsAnycast", False)),
            name_servers=tuple(str(s) for s in name_servers),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "dnssecSupported": self.dnssec_supported,
            "hasDnsAnycast": self.has_dns_anycast,
            "nameServers": list(self.name_servers),
        }

    def short_row(self) -> List[str]:
        return [
            self.name,
            str(self.dnssec_supported).lower(),
            str(self.has_dns_anycast).lower(),
            ", ".join(self.name_servers),
        ]

    def wide_row(self) -> List[str]:
        return self.short_row()


@dataclass(frozen=True)
class Record:
    """A DNS record.

    Two records are equal when type, sub domain, zone and target match; the
    server assigned `id` and the unmanaged `ttl` are ignored. A record with
    `id=None` is a desired record that does not exist yet.
    """

    field_type: str
    sub_domain: str
    zone: str
    target: str
    id: Optional[int] = field(default=None, compare=False)
    ttl: Optional[int] = field(default=None, compare=False)

    short_columns = ("Identifier", "Zone", "Type", "Sub domain", "TTL", "Target")
    wide_columns = short_columns

    @classmethod
    def from_api(cls, data: Any, zone: str = "") -> "Record":
        try:
            record_id = data.get("id") if isinstance(data, dict) else None
            ttl = data.get("ttl") if isinstance(data, dict) else None
            return cls(
                id=None if record_id is None else int(record_id),
                field_type=str(_require(data, "fieldType")),
                sub_domain=str(data.get("subDomain") or ""),
                ttl=None if ttl is None else int(ttl),
                zone=str(data.get("zone") or zone),
                target=str(_require(data, "target")),
            )
        except (TypeError, ValueError) as e:
            raise DeserializationError(f"malformed record payload, {e}") from e

    def to_api(self) -> Dict[str, Any]:
        """Creation payload; the zone travels in the URL."""
        payload: Dict[str, Any] = {
            "fieldType": self.field_type,
            "subDomain": self.sub_domain,
            "target": self.target,
        }
        if self.ttl is not None:
            payload["ttl"] = self.ttl
        return payload

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "fieldType": self.field_type,
            "subDomain": self.sub_domain,
            "ttl": self.ttl,
            "zone": self.zone,
            "target": self.target,
        }

    def short_row(self) -> List[str]:
        return [
            _optional_str(self.id),
            self.zone,
            self.field_type,
            self.sub_domain,
            _optional_str(self.ttl),
            self.target,
        ]

    def wide_row(self) -> List[str]:
        return self.short_row()
