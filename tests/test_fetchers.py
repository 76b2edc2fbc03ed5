"""Tests for bmm_shell.infra.fetchers and bmm_shell.infra.auth.

Coverage:
  - JSON projections: common, machine, SKU, tenant account, expected machine, audit
  - ResourceSpec paths and scope query parameters
  - make_fetcher / make_machine_fetcher / register_default_fetchers wiring
  - JWT org extraction
"""

from __future__ import annotations

import base64
import json
from unittest.mock import MagicMock

import pytest

from bmm_shell.core.cache import ResourceCache
from bmm_shell.core.models import Scope
from bmm_shell.core.resolver import Resolver
from bmm_shell.infra.auth import decode_jwt_payload, extract_orgs_from_jwt
from bmm_shell.infra.fetchers import (
    INSTANCE_TYPE,
    RESOURCES,
    RESOURCES_BY_TYPE,
    machine_display_name,
    make_fetcher,
    make_machine_fetcher,
    project_audit,
    project_expected_machine,
    project_named,
    project_sku,
    project_tenant_account,
    register_default_fetchers,
)

# ---------------------------------------------------------------------------
# Projections
# ---------------------------------------------------------------------------


class TestProjections:
    def test_named_projection(self) -> None:
        payload = {"name": "prod", "id": "v-1", "status": "Ready", "siteId": "s-1"}
        projected = project_named("siteId")(payload)
        assert (projected.name, projected.id, projected.status) == ("prod", "v-1", "Ready")
        assert projected.extra == {"siteId": "s-1"}
        assert projected.raw is payload

    def test_non_string_fields_become_blank(self) -> None:
        projected = project_named("siteId")({"name": None, "id": 7, "siteId": {"x": 1}})
        assert (projected.name, projected.id, projected.extra["siteId"]) == ("", "", "")

    def test_status_can_be_skipped(self) -> None:
        assert project_named(with_status=False)({"id": "k", "status": "x"}).status == ""

    @pytest.mark.parametrize(
        ("payload", "expected"),
        [
            ({"labels": {"ServerName": "node-7"}, "serialNumber": "SN1", "id": "m"}, "node-7"),
            ({"labels": {"hostname": " host-2 "}, "id": "m"}, "host-2"),
            ({"labels": {"ServerName": "  "}, "serialNumber": "SN1", "id": "m"}, "SN1"),
            ({"labels": "bogus", "id": "m-1"}, "m-1"),
            ({}, "<unknown>"),
        ],
    )
    def test_machine_display_name(self, payload: dict, expected: str) -> None:
        assert machine_display_name(payload) == expected

    def test_sku_falls_back_to_id(self) -> None:
        assert project_sku({"id": "sku-1", "deviceType": " "}).name == "sku-1"
        assert project_sku({"id": "sku-1", "deviceType": "gpu"}).name == "gpu"

    def test_tenant_account(self) -> None:
        projected = project_tenant_account(
            {"id": "t-1", "tenantOrg": "acme", "infrastructureProviderId": "p-1"}
        )
        assert projected.name == "acme"
        assert projected.extra == {"infrastructureProviderId": "p-1"}

    def test_expected_machine_name_order(self) -> None:
        assert project_expected_machine(
            {"id": "e", "bmcMacAddress": "aa:bb", "chassisSerialNumber": "CS"}
        ).name == "aa:bb"
        assert project_expected_machine({"id": "e", "chassisSerialNumber": "CS"}).name == "CS"
        assert project_expected_machine({"id": "e"}).name == "e"

    def test_audit(self) -> None:
        projected = project_audit(
            {"id": "a-1", "method": "DELETE", "endpoint": "/vpc/1", "statusCode": 204}
        )
        assert projected.name == "DELETE /vpc/1"
        assert projected.status == "204"

    def test_audit_without_details(self) -> None:
        projected = project_audit({"id": "a-2", "statusCode": True})
        assert projected.name == "AUDIT"
        assert projected.status == ""


# ---------------------------------------------------------------------------
# Resource table
# ---------------------------------------------------------------------------


class TestResourceSpec:
    def test_paths(self) -> None:
        spec = RESOURCES_BY_TYPE["ip-block"]
        assert spec.path == "/v2/org/{org}/carbide/ip-block"
        assert spec.detail_path == "/v2/org/{org}/carbide/ip-block/{id}"

    def test_endpoint_overrides_path(self) -> None:
        assert INSTANCE_TYPE.type == "instance-type"
        assert INSTANCE_TYPE.path == "/v2/org/{org}/carbide/instance/type"
        assert INSTANCE_TYPE.detail_path == "/v2/org/{org}/carbide/instance/type/{id}"

    @pytest.mark.parametrize(
        ("resource_type", "expected"),
        [
            ("site", {}),
            ("vpc", {"siteId": "s-1"}),
            ("subnet", {"siteId": "s-1", "vpcId": "v-1"}),
            ("tenant-account", {}),
        ],
    )
    def test_scope_params(self, resource_type: str, expected: dict) -> None:
        scope = Scope(site_id="s-1", vpc_id="v-1")
        assert RESOURCES_BY_TYPE[resource_type].scope_params(scope) == expected

    def test_types_unique(self) -> None:
        assert len(RESOURCES_BY_TYPE) == len(RESOURCES) == 20


class TestWiring:
    def test_fetcher_reads_scope_per_call(self) -> None:
        client = MagicMock()
        client.fetch_all.return_value = [{"id": "v-1", "name": "prod"}]
        scope = {"value": Scope()}
        fetch = make_fetcher(client, RESOURCES_BY_TYPE["vpc"], lambda: scope["value"])

        assert [i.name for i in fetch()] == ["prod"]
        client.fetch_all.assert_called_with("/v2/org/{org}/carbide/vpc", {})

        scope["value"] = Scope(site_id="s-2")
        fetch()
        client.fetch_all.assert_called_with("/v2/org/{org}/carbide/vpc", {"siteId": "s-2"})


    def test_machine_fetcher_narrows_to_scoped_vpc(self) -> None:
        client = MagicMock()
        machines = [{"id": "m-1", "serialNumber": "sn-1"}, {"id": "m-2", "serialNumber": "sn-2"}]
        instances = [{"id": "i-1", "machineId": " m-1 "}, {"id": "i-2", "machineId": ""}]
        client.fetch_all.side_effect = lambda path, params: (
            instances if path.endswith("/instance") else machines
        )
        scope = {"value": Scope(site_id="s-1", vpc_id="v-1")}
        fetch = make_machine_fetcher(client, RESOURCES_BY_TYPE["machine"], lambda: scope["value"])

        assert [m.id for m in fetch()] == ["m-1"]
        client.fetch_all.assert_any_call(
            "/v2/org/{org}/carbide/instance", {"siteId": "s-1", "vpcId": "v-1"}
        )

        scope["value"] = Scope(site_id="s-1")
        assert [m.id for m in fetch()] == ["m-1", "m-2"]

    def test_register_default_fetchers(self) -> None:
        resolver = Resolver(ResourceCache(), MagicMock())
        register_default_fetchers(resolver, MagicMock(), Scope)
        assert resolver.resource_types == sorted(RESOURCES_BY_TYPE)


# ---------------------------------------------------------------------------
# JWT
# ---------------------------------------------------------------------------


def _jwt(claims: object) -> str:
    body = base64.urlsafe_b64encode(json.dumps(claims).encode()).rstrip(b"=").decode()
    return f"header.{body}.signature"


class TestJwt:
    def test_extracts_org_claims_in_order(self) -> None:
        token = _jwt(
            {
                "access": [
                    {"type": "group/ngc", "name": "acme"},
                    {"type": "group/ngc-admin", "name": "globex"},
                    {"type": "user", "name": "ignored"},
                    {"type": "group/ngc", "name": "acme"},
                    {"type": "group/ngc", "name": ""},
                    "junk",
                ]
            }
        )
        assert extract_orgs_from_jwt(token) == ["acme", "globex"]

    @pytest.mark.parametrize("token", ["", "not-a-jwt", "a.!!!.c", _jwt([1, 2])])
    def test_malformed_tokens(self, token: str) -> None:
        assert decode_jwt_payload(token) == {}
        assert extract_orgs_from_jwt(token) == []

    def test_missing_access_claim(self) -> None:
        assert extract_orgs_from_jwt(_jwt({"sub": "me"})) == []
