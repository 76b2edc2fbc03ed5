"""Per-resource list fetchers projecting JSON payloads into NamedItems.

Each backend resource type is described once by a :class:`ResourceSpec`:
its list path, whether the active site/VPC scope narrows the query,
and the projection that turns one JSON object into a
:class:`~bmm_shell.core.models.NamedItem`.  :func:`register_default_fetchers`
wires one fetch callback per spec into a resolver.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any

from bmm_shell.core.models import JsonItem, NamedItem, Scope
from bmm_shell.core.resolver import Resolver
from bmm_shell.exceptions import UpstreamError
from bmm_shell.infra.api_client import ApiClient

API_PREFIX = "/v2/org/{org}/carbide"

Projection = Callable[[dict[str, Any]], JsonItem]


# ---------------------------------------------------------------------------
# Field helpers
# ---------------------------------------------------------------------------

def text(payload: dict[str, Any], key: str) -> str:
    """Return ``payload[key]`` when it is a string, else ``""``."""
    value = payload.get(key)
    return value if isinstance(value, str) else ""


def first_text(payload: dict[str, Any], *keys: str) -> str:
    """Return the first non-blank string among *keys*, stripped."""
    for key in keys:
        value = text(payload, key).strip()
        if value:
            return value
    return ""


def project_named(*extra_keys: str, with_status: bool = True) -> Projection:
    """Build the common ``name``/``id``/``status`` projection."""

    def project(payload: dict[str, Any]) -> JsonItem:
        return NamedItem(
            name=text(payload, "name"),
            id=text(payload, "id"),
            status=text(payload, "status") if with_status else "",
            extra={key: text(payload, key) for key in extra_keys},
            raw=payload,
        )

    return project


# ---------------------------------------------------------------------------
# Special projections
# ---------------------------------------------------------------------------

_MACHINE_LABEL_KEYS = ("ServerName", "serverName", "hostname", "hostName")


def machine_display_name(payload: dict[str, Any]) -> str:
    """Server-name label, then serial number, then ID."""
    labels = payload.get("labels")
    if isinstance(labels, dict):
        name = first_text(labels, *_MACHINE_LABEL_KEYS)
        if name:
            return name
    return first_text(payload, "serialNumber") or text(payload, "id") or "<unknown>"


def project_machine(payload: dict[str, Any]) -> JsonItem:
    return NamedItem(
        name=machine_display_name(payload),
        id=text(payload, "id"),
        status=text(payload, "status"),
        extra={"siteId": text(payload, "siteId")},
        raw=payload,
    )


def project_sku(payload: dict[str, Any]) -> JsonItem:
    device_type = text(payload, "deviceType")
    return NamedItem(
        name=device_type if device_type.strip() else text(payload, "id"),
        id=text(payload, "id"),
        extra={"siteId": text(payload, "siteId"), "deviceType": device_type},
        raw=payload,
    )


def project_tenant_account(payload: dict[str, Any]) -> JsonItem:
    return NamedItem(
        name=first_text(payload, "tenantOrg") or text(payload, "id"),
        id=text(payload, "id"),
        status=text(payload, "status"),
        extra={"infrastructureProviderId": text(payload, "infrastructureProviderId")},
        raw=payload,
    )


def project_expected_machine(payload: dict[str, Any]) -> JsonItem:
    return NamedItem(
        name=first_text(payload, "bmcMacAddress", "chassisSerialNumber")
        or text(payload, "id"),
        id=text(payload, "id"),
        extra={
            "siteId": text(payload, "siteId"),
            "bmcMacAddress": text(payload, "bmcMacAddress"),
            "chassisSerialNumber": text(payload, "chassisSerialNumber"),
        },
        raw=payload,
    )


def project_audit(payload: dict[str, Any]) -> JsonItem:
    """Name audit entries ``"METHOD endpoint"``; status is the HTTP code."""
    method = text(payload, "method") or "AUDIT"
    endpoint = text(payload, "endpoint")
    status_code = payload.get("statusCode")
    status = (
        str(int(status_code))
        if isinstance(status_code, (int, float)) and not isinstance(status_code, bool)
        else ""
    )
    return NamedItem(
        name=f"{method} {endpoint}".strip() or text(payload, "id"),
        id=text(payload, "id"),
        status=status,
        extra={"method": method, "endpoint": endpoint},
        raw=payload,
    )


# ---------------------------------------------------------------------------
# Resource table
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class ResourceSpec:
    """How one resource type is listed and projected."""

    type: str
    label: str
    project: Projection
    site_scoped: bool = False
    vpc_scoped: bool = False
    endpoint: str = ""
    """URL segment when it differs from ``type``."""

    @property
    def path(self) -> str:
        return f"{API_PREFIX}/{self.endpoint or self.type}"

    @property
    def detail_path(self) -> str:
        return f"{self.path}/{{id}}"

    def scope_params(self, scope: Scope) -> dict[str, str]:
        params: dict[str, str] = {}
        if self.site_scoped and scope.site_id:
            params["siteId"] = scope.site_id
        if self.vpc_scoped and scope.vpc_id:
            params["vpcId"] = scope.vpc_id
        return params


RESOURCES: tuple[ResourceSpec, ...] = (
    ResourceSpec("site", "Site", project_named()),
    ResourceSpec("vpc", "VPC", project_named("siteId"), site_scoped=True),
    ResourceSpec(
        "subnet", "Subnet", project_named("vpcId"), site_scoped=True, vpc_scoped=True
    ),
    ResourceSpec(
        "instance",
        "Instance",
        project_named("vpcId", "siteId", "machineId"),
        site_scoped=True,
        vpc_scoped=True,
    ),
    ResourceSpec("machine", "Machine", project_machine, site_scoped=True),
    ResourceSpec(
        "operating-system", "Operating System", project_named(), site_scoped=True
    ),
    ResourceSpec("ssh-key-group", "SSH Key Group", project_named(), site_scoped=True),
    ResourceSpec("ssh-key", "SSH Key", project_named("fingerprint", with_status=False)),
    ResourceSpec("allocation", "Allocation", project_named("siteId"), site_scoped=True),
    ResourceSpec("ip-block", "IP Block", project_named("siteId"), site_scoped=True),
    ResourceSpec(
        "network-security-group",
        "Network Security Group",
        project_named(),
        site_scoped=True,
    ),
    ResourceSpec("sku", "SKU", project_sku, site_scoped=True),
    ResourceSpec(
        "rack",
        "Rack",
        project_named("manufacturer", "model", with_status=False),
        site_scoped=True,
    ),
    ResourceSpec(
        "vpc-prefix",
        "VPC Prefix",
        project_named("vpcId"),
        site_scoped=True,
        vpc_scoped=True,
    ),
    ResourceSpec("tenant-account", "Tenant Account", project_tenant_account),
    ResourceSpec(
        "expected-machine", "Expected Machine", project_expected_machine, site_scoped=True
    ),
    ResourceSpec(
        "infiniband-partition",
        "InfiniBand Partition",
        project_named("siteId"),
        site_scoped=True,
    ),
    ResourceSpec(
        "nvlink-logical-partition",
        "NVLink Logical Partition",
        project_named("siteId"),
        site_scoped=True,
    ),
    ResourceSpec(
        "dpu-extension-service",
        "DPU Extension Service",
        project_named("siteId", "serviceType", with_status=False),
        site_scoped=True,
    ),
    ResourceSpec("audit", "Audit Entry", project_audit),
)

RESOURCES_BY_TYPE: dict[str, ResourceSpec] = {spec.type: spec for spec in RESOURCES}

INSTANCE_TYPE = ResourceSpec(
    "instance-type", "Instance Type", project_named("siteId"), endpoint="instance/type"
)
"""Listed per site and tenant, so it has no scope-driven fetcher."""


def fetch_instance_types(
    client: ApiClient, site_id: str, tenant_id: str
) -> list[NamedItem[Any]]:
    payloads = client.fetch_all(
        INSTANCE_TYPE.path, {"siteId": site_id, "tenantId": tenant_id}
    )
    return [INSTANCE_TYPE.project(payload) for payload in payloads]


def fetch_tenant_id(client: ApiClient) -> str:
    """Return the ID of the tenant behind the current org.

    Raises
    ------
    UpstreamError
        When the request fails or the body carries no ID.
    """
    payload = client.get_json(f"{API_PREFIX}/tenant/current")
    tenant_id = text(payload, "id") if isinstance(payload, dict) else ""
    if not tenant_id:
        raise UpstreamError("current tenant has no ID")
    return tenant_id


# ---------------------------------------------------------------------------
# Wiring
# ---------------------------------------------------------------------------

def make_fetcher(
    client: ApiClient,
    spec: ResourceSpec,
    scope: Callable[[], Scope],
) -> Callable[[], list[NamedItem[Any]]]:
    """Return a fetch callback listing *spec* under the scope current at call time."""

    def fetch() -> list[NamedItem[Any]]:
        payloads = client.fetch_all(spec.path, spec.scope_params(scope()))
        return [spec.project(payload) for payload in payloads]

    return fetch


def make_machine_fetcher(
    client: ApiClient,
    spec: ResourceSpec,
    scope: Callable[[], Scope],
) -> Callable[[], list[NamedItem[Any]]]:
    """Like :func:`make_fetcher`, narrowed to a scoped VPC when one is set.

    The machine endpoint only filters by site, so a VPC scope keeps the
    machines that back an instance in that VPC.
    """
    list_machines = make_fetcher(client, spec, scope)
    instances = RESOURCES_BY_TYPE["instance"]

    def fetch() -> list[NamedItem[Any]]:
        current = scope()
        machines = list_machines()
        if not current.vpc_id:
            return machines
        attached = {
            text(payload, "machineId").strip()
            for payload in client.fetch_all(instances.path, instances.scope_params(current))
        }
        attached.discard("")
        return [machine for machine in machines if machine.id.strip() in attached]

    return fetch


_FETCHER_FACTORIES = {"machine": make_machine_fetcher}


def register_default_fetchers(
    resolver: Resolver,
    client: ApiClient,
    scope: Callable[[], Scope],
    specs: Iterable[ResourceSpec] = RESOURCES,
) -> None:
    for spec in specs:
        factory = _FETCHER_FACTORIES.get(spec.type, make_fetcher)
        resolver.register_fetcher(spec.type, factory(client, spec, scope))
