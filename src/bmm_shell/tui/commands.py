"""Command registry and handlers for the interactive shell.

Every command is a :class:`Command` whose handler receives the
:class:`~bmm_shell.tui.session.Session` and the whitespace/quote-split
arguments that followed the command name.  Handlers raise
:class:`~bmm_shell.exceptions.BmmShellError` subclasses on failure; the
REPL prints them and keeps going.

Output conventions
------------------
* Lists render as Rich tables on stdout, with the item count on stderr.
* ``get`` and info commands print the backend's JSON, pretty-printed.
* Every backend action logs its scripted equivalent on stderr first.
* Mutations invalidate the cache entry of the type they changed.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any

import httpx
from rich.markup import escape
from rich.table import Table

from bmm_shell.core.models import NamedItem
from bmm_shell.exceptions import BmmShellError, ResolutionError, UpstreamError
from bmm_shell.infra.auth import extract_orgs_from_jwt
from bmm_shell.infra.fetchers import (
    API_PREFIX,
    INSTANCE_TYPE,
    RESOURCES_BY_TYPE,
    ResourceSpec,
    fetch_instance_types,
)
from bmm_shell.tui import prompts
from bmm_shell.tui.session import Session

logger = logging.getLogger(__name__)

Handler = Callable[[Session, list[str]], None]
Column = tuple[str, Callable[[Session, NamedItem[Any]], str]]


@dataclass(frozen=True, slots=True)
class Command:
    """One REPL command: a (possibly multi-word) name and its handler."""

    name: str
    description: str
    run: Handler


# ---------------------------------------------------------------------------
# Output helpers
# ---------------------------------------------------------------------------

def print_table(
    session: Session, columns: Sequence[Column], items: Sequence[NamedItem[Any]]
) -> None:
    """Render *items* as a table; the count goes to stderr."""
    session.err_console.print(f"{len(items)} items", highlight=False)
    table = Table(show_header=True, header_style="bold magenta", border_style="dim")
    for header, _ in columns:
        table.add_column(header)
    for item in items:
        table.add_row(*(escape(value(session, item)) for _, value in columns))
    session.console.print(table)


def print_detail(session: Session, response: httpx.Response) -> None:
    """Pretty-print a JSON body, or echo the raw text when it is not JSON."""
    try:
        payload = response.json()
    except ValueError:
        session.console.print(response.text, markup=False, highlight=False)
        return
    session.console.print_json(data=payload)


def _response_json(response: httpx.Response) -> dict[str, Any]:
    try:
        payload = response.json()
    except ValueError:
        return {}
    return payload if isinstance(payload, dict) else {}


def _ok(session: Session, message: str) -> None:
    session.console.print(f"[green]OK[/green] {escape(message)}")


def warm(session: Session, *resource_types: str) -> None:
    """Pre-fetch parent types so IDs in tables resolve to names.

    A failure only means the table shows IDs, so it is logged and the
    command carries on.
    """
    for resource_type in resource_types:
        try:
            session.resolver.fetch(resource_type)
        except UpstreamError as exc:
            logger.debug("warming %s failed: %s", resource_type, exc)


# ---------------------------------------------------------------------------
# Columns
# ---------------------------------------------------------------------------

def _name(_: Session, item: NamedItem[Any]) -> str:
    return item.name


def _status(_: Session, item: NamedItem[Any]) -> str:
    return item.status


def _id(_: Session, item: NamedItem[Any]) -> str:
    return item.id


def _extra(key: str) -> Callable[[Session, NamedItem[Any]], str]:
    def value(_: Session, item: NamedItem[Any]) -> str:
        return item.extra.get(key, "")

    return value


def _ref(resource_type: str, key: str) -> Callable[[Session, NamedItem[Any]], str]:
    """Show a parent reference by name when it is cached."""

    def value(session: Session, item: NamedItem[Any]) -> str:
        ref = item.extra.get(key, "")
        return session.resolver.resolve_id(resource_type, ref) if ref else ""

    return value


NAME_STATUS_ID: tuple[Column, ...] = (("NAME", _name), ("STATUS", _status), ("ID", _id))
SITE_REF: Column = ("SITE", _ref("site", "siteId"))
VPC_REF: Column = ("VPC", _ref("vpc", "vpcId"))

LIST_LAYOUTS: dict[str, tuple[tuple[Column, ...], tuple[str, ...]]] = {
    "site": (NAME_STATUS_ID, ()),
    "vpc": ((("NAME", _name), ("STATUS", _status), SITE_REF, ("ID", _id)), ("site",)),
    "subnet": ((("NAME", _name), ("STATUS", _status), VPC_REF, ("ID", _id)), ("vpc",)),
    "instance": (
        (("NAME", _name), ("STATUS", _status), VPC_REF, SITE_REF, ("ID", _id)),
        ("vpc", "site"),
    ),
    "operating-system": (NAME_STATUS_ID, ()),
    "ssh-key-group": (NAME_STATUS_ID, ()),
    "ssh-key": ((("NAME", _name), ("FINGERPRINT", _extra("fingerprint")), ("ID", _id)), ()),
    "allocation": (
        (("NAME", _name), ("STATUS", _status), SITE_REF, ("ID", _id)),
        ("site",),
    ),
    "ip-block": ((("NAME", _name), ("STATUS", _status), SITE_REF, ("ID", _id)), ("site",)),
    "network-security-group": (NAME_STATUS_ID, ()),
    "sku": ((("DEVICE TYPE", _extra("deviceType")), SITE_REF, ("ID", _id)), ("site",)),
    "rack": (
        (
            ("NAME", _name),
            ("MANUFACTURER", _extra("manufacturer")),
            ("MODEL", _extra("model")),
            ("ID", _id),
        ),
        (),
    ),
    "vpc-prefix": ((("NAME", _name), ("STATUS", _status), VPC_REF, ("ID", _id)), ("vpc",)),
    "tenant-account": (
        (
            ("TENANT ORG", _name),
            ("STATUS", _status),
            ("INFRA PROVIDER ID", _extra("infrastructureProviderId")),
            ("ID", _id),
        ),
        (),
    ),
    "expected-machine": (
        (
            SITE_REF,
            ("BMC MAC", _extra("bmcMacAddress")),
            ("CHASSIS SN", _extra("chassisSerialNumber")),
            ("ID", _id),
        ),
        ("site",),
    ),
    "infiniband-partition": (NAME_STATUS_ID, ()),
    "nvlink-logical-partition": (NAME_STATUS_ID, ()),
    "dpu-extension-service": (
        (("NAME", _name), ("TYPE", _extra("serviceType")), SITE_REF, ("ID", _id)),
        ("site",),
    ),
    "audit": (
        (
            ("METHOD", _extra("method")),
            ("ENDPOINT", _extra("endpoint")),
            ("STATUS CODE", _status),
            ("ID", _id),
        ),
        (),
    ),
}


# ---------------------------------------------------------------------------
# Argument helpers
# ---------------------------------------------------------------------------

def option_values(args: Sequence[str]) -> tuple[dict[str, str], list[str]]:
    """Split ``--key value`` / ``--key=value`` options from positionals."""
    options: dict[str, str] = {}
    positional: list[str] = []
    index = 0
    while index < len(args):
        arg = args[index]
        if arg.startswith("--"):
            key, sep, value = arg[2:].partition("=")
            if not sep and index + 1 < len(args) and not args[index + 1].startswith("--"):
                index += 1
                value = args[index]
            options[key] = value
        else:
            positional.append(arg)
        index += 1
    return options, positional


def _resolve_site(session: Session, options: dict[str, str]) -> NamedItem[Any]:
    site_id = options.get("site-id") or session.scope.site_id
    if site_id:
        return session.resolver.resolve_with_args("site", "Site", [site_id])
    return session.resolver.resolve("site", "Site")


# ---------------------------------------------------------------------------
# Generic handlers
# ---------------------------------------------------------------------------

def list_handler(spec: ResourceSpec) -> Handler:
    columns, parents = LIST_LAYOUTS[spec.type]

    def run(session: Session, args: list[str]) -> None:
        session.log_cmd(spec.type, "list")
        warm(session, *parents)
        items = session.resolver.fetch(spec.type)
        print_table(session, columns, items)

    return run


def get_handler(spec: ResourceSpec) -> Handler:
    def run(session: Session, args: list[str]) -> None:
        item = session.resolver.resolve_with_args(spec.type, spec.label, args)
        session.log_cmd(spec.type, "get", item.id)
        response = session.client.request(
            "GET", spec.detail_path, path_params={"id": item.id}
        )
        print_detail(session, response)

    return run


def confirm_delete(session: Session, spec: ResourceSpec, item: NamedItem[Any]) -> None:
    """Ask, then delete *item* and drop the cached list of its type."""
    if not prompts.prompt_confirm(
        f"Delete {spec.label} {item.display_name} ({item.id})?"
    ):
        return
    session.log_cmd(spec.type, "delete", item.id)
    session.client.request("DELETE", spec.detail_path, path_params={"id": item.id})
    session.cache.invalidate(spec.type)
    _ok(session, f"{spec.label} deleted: {item.display_name}")


def delete_handler(spec: ResourceSpec) -> Handler:
    def run(session: Session, args: list[str]) -> None:
        item = session.resolver.resolve_with_args(
            spec.type, f"{spec.label} to delete", args
        )
        confirm_delete(session, spec, item)

    return run


def info_handler(resource: str, action: str, path: str) -> Handler:
    def run(session: Session, args: list[str]) -> None:
        session.log_cmd(resource, action)
        print_detail(session, session.client.request("GET", path))

    return run


# ---------------------------------------------------------------------------
# Specific handlers
# ---------------------------------------------------------------------------

def machine_vpc_names(session: Session) -> dict[str, str]:
    """Map machine ID to the comma-joined names of VPCs its instances use."""
    try:
        instances = session.resolver.fetch("instance")
    except UpstreamError as exc:
        logger.debug("instance lookup for machine VPCs failed: %s", exc)
        return {}
    by_machine: dict[str, list[str]] = {}
    for instance in instances:
        machine_id = instance.extra.get("machineId", "").strip()
        vpc_id = instance.extra.get("vpcId", "").strip()
        if not machine_id or not vpc_id:
            continue
        name = session.resolver.resolve_id("vpc", vpc_id).strip() or vpc_id
        names = by_machine.setdefault(machine_id, [])
        if name not in names:
            names.append(name)
    return {machine_id: ",".join(names) for machine_id, names in by_machine.items()}


def cmd_machine_list(session: Session, args: list[str]) -> None:
    """List machines, asking for a site when the backend requires one.

    Under a VPC scope only machines backing an instance in that VPC are
    listed.
    """
    session.log_cmd("machine", "list")
    if session.scope.vpc_id:
        session.console.print(
            "[dim]Note:[/dim] Showing machines attached to instances in scoped VPC."
        )
    try:
        items = session.resolver.fetch("machine")
    except UpstreamError as exc:
        if session.scope.site_id or exc.status_code != 400:
            raise
        session.console.print(
            "[dim]Note:[/dim] Machine listing requires a site filter. Select a site."
        )
        site = session.resolver.resolve("site", "Site")
        session.set_site_scope(site, keep_vpc=True)
        items = session.resolver.fetch("machine")
        session.console.print(
            f"[dim]Note:[/dim] Applied site scope {escape(site.display_name)} "
            f"({escape(site.id)}) for machine listing."
        )
    if session.scope.vpc_id and not items:
        session.console.print(
            "[dim]Note:[/dim] No machines are currently attached to instances in this VPC."
        )

    warm(session, "vpc", "site")
    vpc_names = machine_vpc_names(session)
    columns: tuple[Column, ...] = (
        ("NAME", _name),
        ("STATUS", _status),
        SITE_REF,
        ("VPC", lambda _, item: vpc_names.get(item.id) or "-"),
        ("ID", _id),
    )
    print_table(session, columns, items)


def cmd_machine_capability_list(session: Session, args: list[str]) -> None:
    session.log_cmd("machine-capability", "list")
    site_id = session.scope.site_id.strip()
    response = session.client.request(
        "GET",
        f"{API_PREFIX}/machine-capability",
        params={"siteId": site_id} if site_id else None,
    )
    print_detail(session, response)


# --- instance types ----------------------------------------------------------

def _site_instance_types(
    session: Session, args: list[str]
) -> tuple[NamedItem[Any], list[NamedItem[Any]], list[str]]:
    """Resolve the site, list its instance types and return the positionals."""
    options, positional = option_values(args)
    site = _resolve_site(session, options)
    items = fetch_instance_types(session.client, site.id, session.tenant_id())
    return site, items, positional


def cmd_instance_type_list(session: Session, args: list[str]) -> None:
    site, items, _ = _site_instance_types(session, args)
    session.log_cmd(INSTANCE_TYPE.type, "list", "--site-id", site.id)
    columns: tuple[Column, ...] = (
        ("NAME", _name),
        ("STATUS", _status),
        ("SITE", lambda _, __: site.display_name),
        ("ID", _id),
    )
    print_table(session, columns, items)


def cmd_instance_type_get(session: Session, args: list[str]) -> None:
    _, items, positional = _site_instance_types(session, args)
    item = session.resolver.resolve_in_items(
        INSTANCE_TYPE.type, INSTANCE_TYPE.label, items, positional
    )
    session.log_cmd(INSTANCE_TYPE.type, "get", item.id)
    response = session.client.request(
        "GET", INSTANCE_TYPE.detail_path, path_params={"id": item.id}
    )
    print_detail(session, response)


def cmd_instance_type_delete(session: Session, args: list[str]) -> None:
    _, items, positional = _site_instance_types(session, args)
    item = session.resolver.resolve_in_items(
        INSTANCE_TYPE.type, f"{INSTANCE_TYPE.label} to delete", items, positional
    )
    confirm_delete(session, INSTANCE_TYPE, item)


# --- allocation constraints --------------------------------------------------

CONSTRAINT_PATH = f"{API_PREFIX}/allocation/{{allocation_id}}/constraint"


def cmd_allocation_constraint_list(session: Session, args: list[str]) -> None:
    allocation = session.resolver.resolve_with_args("allocation", "Allocation", args)
    session.log_cmd("allocation-constraint", "list", "--allocation-id", allocation.id)
    response = session.client.request(
        "GET", CONSTRAINT_PATH, path_params={"allocation_id": allocation.id}
    )
    print_detail(session, response)


def _constraint_items(payload: Any) -> list[NamedItem[Any]]:
    if not isinstance(payload, list):
        return []
    items: list[NamedItem[Any]] = []
    for constraint in payload:
        constraint_id = constraint.get("id") if isinstance(constraint, dict) else None
        if isinstance(constraint_id, str) and constraint_id.strip():
            items.append(
                NamedItem(name=constraint_id.strip(), id=constraint_id.strip(), raw=constraint)
            )
    return items


def cmd_allocation_constraint_get(session: Session, args: list[str]) -> None:
    """``allocation-constraint get [allocation] [constraint-id]``.

    Without a constraint ID the allocation's constraints are offered in
    the selector.
    """
    allocation = session.resolver.resolve_with_args("allocation", "Allocation", args[:1])
    path_params = {"allocation_id": allocation.id}
    constraint_id = args[1].strip() if len(args) > 1 else ""
    if not constraint_id:
        items = _constraint_items(
            session.client.get_json(CONSTRAINT_PATH, path_params=path_params)
        )
        if not items:
            raise ResolutionError(
                f"no allocation constraints found for allocation {allocation.id}"
            )
        constraint_id = session.resolver.select_from_items(
            "Allocation Constraint", items
        ).id

    session.log_cmd(
        "allocation-constraint", "get", constraint_id, "--allocation-id", allocation.id
    )
    response = session.client.request(
        "GET",
        CONSTRAINT_PATH + "/{id}",
        path_params={**path_params, "id": constraint_id},
    )
    print_detail(session, response)


def cmd_vpc_create(session: Session, args: list[str]) -> None:
    options, _ = option_values(args)
    site = _resolve_site(session, options)
    name = options.get("name") or prompts.prompt_text("VPC name", required=True)
    description = (
        options["description"]
        if "description" in options
        else prompts.prompt_text("Description (optional)")
    )

    body: dict[str, Any] = {"name": name, "siteId": site.id}
    if description.strip():
        body["description"] = description
    session.log_cmd("vpc", "create", "--name", name, "--site-id", site.id)
    response = session.client.request("POST", f"{API_PREFIX}/vpc", body=body)
    session.cache.invalidate("vpc")
    created = _response_json(response)
    _ok(session, f"VPC created: {created.get('name', name)} ({created.get('id', '')})")


def cmd_ip_block_create(session: Session, args: list[str]) -> None:
    options, _ = option_values(args)
    site = _resolve_site(session, options)
    name = options.get("name") or prompts.prompt_text("IP block name", required=True)
    prefix = options.get("prefix") or prompts.prompt_text(
        "Prefix (e.g. 10.0.0.0)", required=True
    )
    prefix_length_text = options.get("prefix-length") or prompts.prompt_text(
        "Prefix length (e.g. 16)", required=True
    )
    try:
        prefix_length = int(prefix_length_text)
    except ValueError:
        prefix_length = 0
    if not 1 <= prefix_length <= 32:
        raise BmmShellError("prefix length must be between 1 and 32")

    session.log_cmd(
        "ip-block",
        "create",
        "--name",
        name,
        "--site-id",
        site.id,
        "--prefix",
        prefix,
        "--prefix-length",
        str(prefix_length),
    )
    body = {
        "name": name,
        "siteId": site.id,
        "ipVersion": "IPv4",
        "usageType": "DatacenterOnly",
        "prefix": prefix,
        "prefixLength": prefix_length,
    }
    response = session.client.request("POST", f"{API_PREFIX}/ip-block", body=body)
    session.cache.invalidate("ip-block")
    created = _response_json(response)
    _ok(session, f"IP block created: {created.get('name', name)} ({created.get('id', '')})")


def cmd_login(session: Session, args: list[str]) -> None:
    session.console.print("Logging in...")
    session.login()
    _ok(session, "Logged in successfully.")


# --- org ---------------------------------------------------------------------

def cmd_org_show(session: Session, args: list[str]) -> None:
    session.console.print(f"Current org: [cyan]{escape(session.org)}[/cyan]")


def cmd_org_list(session: Session, args: list[str]) -> None:
    console = session.console
    console.print(f"Current org: [cyan]{escape(session.org)}[/cyan]")
    if not session.token:
        console.print("[yellow]Note:[/yellow] No token available. Run [bold]login[/bold] first.")
        return
    orgs = extract_orgs_from_jwt(session.token)
    if not orgs:
        console.print(
            "Could not extract orgs from token. "
            "Switch manually: [bold]org set <org-name>[/bold]"
        )
        return
    console.print()
    for org in orgs:
        marker = "[cyan]>[/cyan] " if org == session.org else "  "
        console.print(f"{marker}{escape(org)}")
    console.print("\nSwitch with: [bold]org set <org-name>[/bold]")


def cmd_org_set(session: Session, args: list[str]) -> None:
    new_org = " ".join(args).strip()
    if not new_org:
        raise ResolutionError("org name required", hint="Usage: org set <org-name>")
    session.set_org(new_org)
    session.console.print(f"Org set to: [cyan]{escape(session.org)}[/cyan]")


# --- scope -------------------------------------------------------------------

def cmd_scope_show(session: Session, args: list[str]) -> None:
    scope = session.scope
    if not scope:
        session.console.print("No scope set. All list commands return unfiltered results.")
        return
    if scope.site_id:
        session.console.print(
            f"  site: [cyan]{escape(scope.site_name or scope.site_id)}[/cyan] ({scope.site_id})"
        )
    if scope.vpc_id:
        session.console.print(
            f"  vpc:  [cyan]{escape(scope.vpc_name or scope.vpc_id)}[/cyan] ({scope.vpc_id})"
        )


def cmd_scope_clear(session: Session, args: list[str]) -> None:
    session.clear_scope()
    session.console.print("Scope cleared.")


def cmd_scope_site(session: Session, args: list[str]) -> None:
    session.cache.invalidate("site")
    site = session.resolver.resolve_with_args("site", "Site", args)
    session.set_site_scope(site)
    session.console.print(f"Scope set: site = [cyan]{escape(site.display_name)}[/cyan]")


def cmd_scope_vpc(session: Session, args: list[str]) -> None:
    """Scope to a VPC, deriving the site from it when none is scoped."""
    session.cache.invalidate("vpc")
    vpc = session.resolver.resolve_with_args("vpc", "VPC", args)
    vpc_site = vpc.extra.get("siteId", "")
    scope = session.scope

    if scope.site_id and vpc_site and vpc_site != scope.site_id:
        raise ResolutionError(
            f"VPC {vpc.display_name} belongs to a different site than "
            f"{scope.site_name or scope.site_id}",
            hint="Run 'scope clear' or 'scope site' first.",
        )

    if not scope.site_id and vpc_site:
        warm(session, "site")
        site_name = session.resolver.resolve_id("site", vpc_site)
        session.set_vpc_scope(vpc, site_id=vpc_site, site_name=site_name)
        session.console.print(
            f"Scope set: site = [cyan]{escape(site_name)}[/cyan] (from VPC)"
        )
    else:
        session.set_vpc_scope(vpc)
    session.console.print(f"Scope set: vpc = [cyan]{escape(vpc.display_name)}[/cyan]")


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

_DELETABLE = ("vpc", "subnet", "instance", "operating-system", "allocation", "ip-block")
_CREATORS: dict[str, Handler] = {"vpc": cmd_vpc_create, "ip-block": cmd_ip_block_create}

_INFO_COMMANDS: tuple[tuple[str, str, str, str], ...] = (
    ("metadata", "get", f"{API_PREFIX}/metadata", "Get API metadata"),
    ("user", "current", f"{API_PREFIX}/user/current", "Get current user"),
    ("tenant", "current", f"{API_PREFIX}/tenant/current", "Get current tenant"),
    ("tenant", "stats", f"{API_PREFIX}/tenant/current/stats", "Get tenant stats"),
    (
        "infrastructure-provider",
        "current",
        f"{API_PREFIX}/infrastructure-provider/current",
        "Get current infrastructure provider",
    ),
    (
        "infrastructure-provider",
        "stats",
        f"{API_PREFIX}/infrastructure-provider/current/stats",
        "Get infrastructure provider stats",
    ),
)


def _plural(label: str) -> str:
    if label.endswith("y") and label[-2:-1].lower() not in "aeiou":
        return label[:-1] + "ies"
    return label + "s"


def _article(label: str) -> str:
    return "an" if label[:1].lower() in "aeiou" else "a"


def _build_registry() -> list[Command]:
    commands: list[Command] = []
    for spec in RESOURCES_BY_TYPE.values():
        plural = _plural(spec.label)
        list_run = cmd_machine_list if spec.type == "machine" else list_handler(spec)
        commands.append(Command(f"{spec.type} list", f"List {plural}", list_run))
        commands.append(
            Command(f"{spec.type} get", f"Get {spec.label} details", get_handler(spec))
        )
        if spec.type in _CREATORS:
            commands.append(
                Command(
                    f"{spec.type} create",
                    f"Create {_article(spec.label)} {spec.label}",
                    _CREATORS[spec.type],
                )
            )
        if spec.type in _DELETABLE:
            commands.append(
                Command(
                    f"{spec.type} delete",
                    f"Delete {_article(spec.label)} {spec.label}",
                    delete_handler(spec),
                )
            )

    commands += [
        Command("instance-type list", "List Instance Types for a site", cmd_instance_type_list),
        Command("instance-type get", "Get Instance Type details", cmd_instance_type_get),
        Command("instance-type delete", "Delete an Instance Type", cmd_instance_type_delete),
        Command(
            "allocation-constraint list",
            "List constraints of an Allocation",
            cmd_allocation_constraint_list,
        ),
        Command(
            "allocation-constraint get",
            "Get Allocation Constraint details",
            cmd_allocation_constraint_get,
        ),
        Command(
            "machine-capability list", "List Machine Capabilities", cmd_machine_capability_list
        ),
    ]

    for resource, action, path, description in _INFO_COMMANDS:
        commands.append(
            Command(f"{resource} {action}", description, info_handler(resource, action, path))
        )

    commands += [
        Command("org", "Show current org", cmd_org_show),
        Command("org list", "List available orgs (from token claims)", cmd_org_list),
        Command("org set", "Switch to a different org", cmd_org_set),
        Command("scope", "Show current scope filters", cmd_scope_show),
        Command("scope site", "Set site scope (filters lists)", cmd_scope_site),
        Command("scope vpc", "Set VPC scope (filters lists)", cmd_scope_vpc),
        Command("scope clear", "Clear all scope filters", cmd_scope_clear),
        Command("login", "Login / refresh auth token", cmd_login),
        Command("help", "Show available commands", cmd_help),
    ]
    return commands


def cmd_help(session: Session, args: list[str]) -> None:
    table = Table(show_header=True, header_style="bold magenta", border_style="dim")
    table.add_column("COMMAND")
    table.add_column("DESCRIPTION")
    for command in COMMANDS:
        table.add_row(command.name, command.description)
    table.add_row("exit", "Exit interactive mode")
    session.console.print(table)


COMMANDS: list[Command] = _build_registry()
COMMANDS_BY_NAME: dict[str, Command] = {command.name: command for command in COMMANDS}

ARG_RESOURCE_MAP: dict[str, str] = {
    command.name: command.name.split()[0]
    for command in COMMANDS
    if command.name.split()[-1] in ("get", "delete")
    and command.name.split()[0] in RESOURCES_BY_TYPE
} | {"allocation-constraint list": "allocation", "allocation-constraint get": "allocation"}
"""Commands whose first argument names a resource, mapped to its type."""
