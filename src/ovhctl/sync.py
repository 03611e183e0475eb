"""DNS reconciliation between public cloud instances and a zone's records.

The diff is computed by `reconcile`, a pure function, and executed by
`apply_changes`. Changes are always expressed as delete + create, never as
an in-place update.
"""

from __future__ import annotations

import ipaddress
import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence, Union

from .client import OvhClient
from .collectors import (
    create_record,
    delete_record,
    list_instances,
    list_records,
    list_tenants,
    refresh_zone,
)
from .errors import OvhctlError
from .models import Instance, IpAddress, Record

logger = logging.getLogger(__name__)

Network = Union[ipaddress.IPv4Network, ipaddress.IPv6Network]

FIELD_TYPES = {4: "A", 6: "AAAA"}


# =============================================================================
# Data Classes
# =============================================================================


@dataclass
class ChangeSet:
    """Records to delete and records to create, in application order."""

    to_delete: List[Record] = field(default_factory=list)
    to_create: List[Record] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not self.to_delete and not self.to_create

    def __len__(self) -> int:
        return len(self.to_delete) + len(self.to_create)


# =============================================================================
# Utility Functions
# =============================================================================


def parse_networks(values: Iterable[str]) -> List[Network]:
    """Parse CIDR strings; host bits are allowed (10.0.0.1/8 means 10.0.0.0/8)."""
    return [ipaddress.ip_network(value.strip(), strict=False) for value in values]


def first_matching_network(networks: Sequence[Network], ip: str) -> Optional[Network]:
    """Return the first network containing `ip`, or None."""
    address = ipaddress.ip_address(ip)
    for network in networks:
        if address.version == network.version and address in network:
            return network
    return None


def find_record_by_target(records: Iterable[Record], target: str) -> Optional[Record]:
    """Return the first record pointing at `target`, whatever its type."""
    for record in records:
        if record.target == target:
            return record
    return None


def sub_domain_for(instance_name: str, zone: str) -> str:
    suffix = f".{zone}"
    if instance_name.endswith(suffix):
        return instance_name[: -len(suffix)]
    return instance_name


def desired_record(instance: Instance, address: IpAddress, zone: str) -> Record:
    """Record that should exist for a public v4 or v6 address."""
    return Record(
        field_type=FIELD_TYPES[address.version],
        sub_domain=sub_domain_for(instance.name, zone),
        zone=zone,
        target=address.ip,
    )


# =============================================================================
# Reconciliation
# =============================================================================


def reconcile(
    instances: Sequence[Instance],
    existing_records: Sequence[Record],
    zone: str,
    excluded: Sequence[Network] = (),
    log: Optional[logging.Logger] = None,
) -> ChangeSet:
    """Compute the records to delete and to create so the zone matches the instances.

    Only public addresses outside every excluded network get a record. A
    record targeting a private or excluded address is stale and deleted.
    Addresses whose version is neither 4 nor 6 are ignored.
    """
    log = log or logger
    changes = ChangeSet()

    for instance in instances:
        for address in instance.ip_addresses:
            if address.version not in FIELD_TYPES:
                log.debug(
                    f"Ignoring address {address.ip} of '{instance.name}' "
                    f"(unsupported version {address.version})"
                )
                continue

            existing = find_record_by_target(existing_records, address.ip)

            if address.kind != "public":
                if existing is not None:
                    log.debug(f"Address {address.ip} of '{instance.name}' is {address.kind}")
                    changes.to_delete.append(existing)
                continue

            network = first_matching_network(excluded, address.ip)
            if network is not None:
                log.debug(f"Address {address.ip} of '{instance.name}' excluded by {network}")
                if existing is not None:
                    changes.to_delete.append(existing)
                continue

            desired = desired_record(instance, address, zone)
            if existing is None:
                changes.to_create.append(desired)
            elif existing != desired:
                changes.to_delete.append(existing)
                changes.to_create.append(desired)

    log.info(
        f"Computed diff for zone '{zone}': "
        f"{len(changes.to_delete)} to delete, {len(changes.to_create)} to create"
    )
    return changes


# =============================================================================
# Application
# =============================================================================


def apply_changes(
    client: OvhClient,
    changes: ChangeSet,
    zone: str,
    log: Optional[logging.Logger] = None,
) -> List[Record]:
    """Delete then create records one at a time, refresh the zone and return its records.

    Stops at the first failure; changes already applied are kept.
    """
    log = log or logger

    for record in changes.to_delete:
        if record.id is None:
            log.debug(f"Skipping deletion of never created record {record.sub_domain} -> {record.target}")
            continue
        try:
            delete_record(client, zone, record.id)
        except OvhctlError as e:
            raise e.with_context(f"could not delete record '{record.id}'") from e
        log.info(f"Deleted record {record.id}: {record.sub_domain} {record.field_type} {record.target}")

    for record in changes.to_create:
        try:
            created = create_record(client, zone, record)
        except OvhctlError as e:
            raise e.with_context(
                f"could not create record {record.sub_domain} {record.field_type} {record.target}"
            ) from e
        log.info(f"Created record {created.id}: {record.sub_domain} {record.field_type} {record.target}")

    log.info(f"Refreshing zone '{zone}'")
    refresh_zone(client, zone)
    return list_records(client, zone)


def collect_instances(client: OvhClient, log: Optional[logging.Logger] = None) -> List[Instance]:
    """Instances of every tenant visible with the current credential."""
    log = log or logger
    instances: List[Instance] = []
    tenants = list_tenants(client)
    for tenant in tenants:
        tenant_instances = list_instances(client, tenant.project_id)
        log.debug(f"Tenant '{tenant.project_id}': {len(tenant_instances)} instance(s)")
        instances.extend(tenant_instances)
    log.info(f"Retrieved {len(instances)} instance(s) across {len(tenants)} tenant(s)")
    return instances


@dataclass
class SyncResult:
    changes: ChangeSet
    records: List[Record]
    applied: bool


def sync_zone(
    client: OvhClient,
    zone: str,
    excluded: Sequence[Network] = (),
    *,
    dry_run: bool = False,
    log: Optional[logging.Logger] = None,
) -> SyncResult:
    """Synchronise the records of `zone` with public cloud instances.

    Dedicated servers are not taken into account. In dry-run mode nothing is
    written and `records` holds the current records of the zone.
    """
    log = log or logger

    instances = collect_instances(client, log)
    log.info(f"Retrieving records of zone '{zone}'")
    records = list_records(client, zone)

    changes = reconcile(instances, records, zone, excluded, log)
    if dry_run:
        return SyncResult(changes=changes, records=records, applied=False)

    return SyncResult(
        changes=changes,
        records=apply_changes(client, changes, zone, log),
        applied=True,
    )
