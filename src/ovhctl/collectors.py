"""Read and write accessors over the API resources used by ovhctl.

Most listings follow the same shape: GET a path returning identifiers, then
GET each identifier's object. There is no bulk read, so objects are fetched
one by one in the order the identifiers were returned.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, List, TypeVar

from .client import OvhClient
from .errors import DeserializationError, OvhctlError
from .models import (
    AccessRule,
    CredentialRequest,
    CredentialValidation,
    Instance,
    LoadBalancer,
    Record,
    Server,
    Tenant,
    Zone,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_REDIRECTION = "https://www.ovh.com/"


def fetch_all(
    client: OvhClient,
    list_path: str,
    item_path: str,
    parse: Callable[[Any], T],
    describe: str,
    scope: str = "",
) -> List[T]:
    """List identifiers at `list_path`, then fetch `item_path.format(id=...)` for each.

    `describe` names one item in error messages and `scope` (e.g. "in zone
    'example.com'") is appended to them. Fails on the first error; no partial
    result is returned.
    """
    suffix = f" {scope}" if scope else ""
    try:
        ids = client.get(list_path)
    except OvhctlError as e:
        raise e.with_context(f"could not retrieve {describe}s{suffix}") from e

    if not isinstance(ids, list):
        raise DeserializationError(
            f"could not retrieve {describe}s{suffix}, expected a list of identifiers, "
            f"got {type(ids).__name__}"
        )

    logger.debug(f"Fetching {len(ids)} {describe}(s) from {list_path}")
    items: List[T] = []
    for item_id in ids:
        try:
            items.append(parse(client.get(item_path.format(id=item_id))))
        except OvhctlError as e:
            raise e.with_context(f"could not retrieve {describe} '{item_id}'{suffix}") from e
    return items


# =============================================================================
# Public cloud
# =============================================================================


def list_tenants(client: OvhClient) -> List[Tenant]:
    return fetch_all(client, "cloud/project", "cloud/project/{id}", Tenant.from_api, "tenant")


def list_instances(client: OvhClient, tenant: str) -> List[Instance]:
    # The instance listing already returns full objects.
    try:
        data = client.get(f"cloud/project/{tenant}/instance")
        if not isinstance(data, list):
            raise DeserializationError(f"expected a list of instances, got {type(data).__name__}")
        return [Instance.from_api(item) for item in data]
    except OvhctlError as e:
        raise e.with_context(f"could not retrieve instances for tenant '{tenant}'") from e


def list_loadbalancers(client: OvhClient, tenant: str) -> List[LoadBalancer]:
    return fetch_all(
        client,
        f"cloud/project/{tenant}/loadbalancer",
        f"cloud/project/{tenant}/loadbalancer/{{id}}",
        LoadBalancer.from_api,
        "loadbalancer",
        scope=f"on tenant '{tenant}'",
    )


def create_loadbalancer(client: OvhClient, tenant: str, region: str) -> LoadBalancer:
    try:
        return LoadBalancer.from_api(
            client.post(f"cloud/project/{tenant}/loadbalancer", {"region": region})
        )
    except OvhctlError as e:
        raise e.with_context("could not create loadbalancer") from e


def delete_loadbalancer(client: OvhClient, tenant: str, loadbalancer_id: str) -> None:
    try:
        client.delete(f"cloud/project/{tenant}/loadbalancer/{loadbalancer_id}")
    except OvhctlError as e:
        raise e.with_context(f"could not delete loadbalancer '{loadbalancer_id}'") from e


# =============================================================================
# Dedicated
# =============================================================================


def list_servers(client: OvhClient) -> List[Server]:
    return fetch_all(
        client, "dedicated/server", "dedicated/server/{id}", Server.from_api, "server"
    )


# =============================================================================
# Domain
# =============================================================================


def list_zones(client: OvhClient) -> List[Zone]:
    return fetch_all(client, "domain/zone", "domain/zone/{id}", Zone.from_api, "zone")


def list_records(client: OvhClient, zone: str) -> List[Record]:
    return fetch_all(
        client,
        f"domain/zone/{zone}/record",
        f"domain/zone/{zone}/record/{{id}}",
        lambda data: Record.from_api(data, zone=zone),
        "record",
        scope=f"in zone '{zone}'",
    )


def create_record(client: OvhClient, zone: str, record: Record) -> Record:
    created = client.post(f"domain/zone/{zone}/record", record.to_api())
    return Record.from_api(created, zone=zone)


def delete_record(client: OvhClient, zone: str, record_id: int) -> None:
    client.delete(f"domain/zone/{zone}/record/{record_id}")


def refresh_zone(client: OvhClient, zone: str) -> None:
    try:
        client.post(f"domain/zone/{zone}/refresh")
    except OvhctlError as e:
        raise e.with_context(f"could not refresh zone '{zone}'") from e


# =============================================================================
# Authentication
# =============================================================================


def request_credential(
    client: OvhClient, redirection: str = DEFAULT_REDIRECTION
) -> CredentialValidation:
    """Ask for a consumer key granting full access; the operator validates it by URL."""
    request = CredentialRequest(
        access_rules=tuple(
            AccessRule(method=method, path="/*") for method in ("GET", "POST", "PUT", "DELETE")
        ),
        redirection=redirection,
    )
    try:
        return CredentialValidation.from_api(
            client.post_unauthenticated("auth/credential", request.to_api())
        )
    except OvhctlError as e:
        raise e.with_context("could not request a consumer key") from e
