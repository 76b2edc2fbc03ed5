"""Interactive session state: the composition root of the shell.

A :class:`Session` owns the resource cache, the resolver (with one fetch
callback per backend resource type), the active :class:`Scope`, the
command history and the auth token.  It is created once per
interactive run and every command handler receives it.

Scope changes always go through :meth:`Session.set_site_scope`,
:meth:`Session.set_vpc_scope` or :meth:`Session.clear_scope`, which
invalidate the scope-sensitive cache entries so an unscoped list can
never be served inside a scoped view.
"""

from __future__ import annotations

import logging
import shlex
from collections.abc import Callable
from typing import Any

from rich.console import Console
from rich.markup import escape

from bmm_shell.core.cache import DEFAULT_TTL_SECONDS, ResourceCache
from bmm_shell.core.models import NamedItem, Scope
from bmm_shell.core.protocols import ResolutionMethod, Selector
from bmm_shell.core.resolver import Resolver
from bmm_shell.exceptions import ConfigError
from bmm_shell.infra.api_client import ApiClient
from bmm_shell.infra.fetchers import fetch_tenant_id, register_default_fetchers
from bmm_shell.tui.editor import History
from bmm_shell.tui.render import cyan
from bmm_shell.tui.select import select

logger = logging.getLogger(__name__)

LoginFunc = Callable[[], str]

PROGRAM_NAME = "bmm-shell"
TENANT_CACHE_KEY = "_tenant"

SITE_FLAG_RESOURCES: frozenset[str] = frozenset(
    {
        "vpc",
        "allocation",
        "ip-block",
        "operating-system",
        "ssh-key-group",
        "network-security-group",
        "sku",
        "rack",
        "expected-machine",
        "dpu-extension-service",
        "infiniband-partition",
        "nvlink-logical-partition",
        "machine-capability",
    }
)
"""``<resource> list`` commands that accept ``--site-id``."""

SITE_AND_VPC_FLAG_RESOURCES: frozenset[str] = frozenset(
    {"subnet", "vpc-prefix", "instance", "machine"}
)
"""``<resource> list`` commands that accept ``--site-id`` and ``--vpc-id``."""


class Session:
    """Shared state for one interactive run.

    Parameters
    ----------
    client:
        REST collaborator; its ``org`` and ``token`` follow the session's.
    org:
        Organisation all API paths are scoped to.
    config_path:
        Config file the session was started from, echoed in command logs.
    token:
        Bearer token; may be empty until ``login`` runs.
    login_fn:
        Optional callback returning a fresh token.
    selector:
        Interactive menu used by the resolver.
    console / err_console:
        Rich consoles for results (stdout) and notices (stderr).
    """

    def __init__(
        self,
        client: ApiClient,
        org: str,
        *,
        config_path: str = "",
        token: str = "",
        login_fn: LoginFunc | None = None,
        cache_ttl: float = DEFAULT_TTL_SECONDS,
        selector: Selector = select,
        console: Console | None = None,
        err_console: Console | None = None,
    ) -> None:
        self.client = client
        self.org = org
        self.config_path = config_path
        self.token = token
        self.login_fn = login_fn
        self.scope = Scope()
        self.history = History()
        self.console = console if console is not None else Console()
        self.err_console = (
            err_console if err_console is not None else Console(stderr=True)
        )
        self.cache = ResourceCache(cache_ttl)
        self.resolver = Resolver(
            self.cache, selector, reporter=self.report_resolution
        )
        register_default_fetchers(self.resolver, client, lambda: self.scope)

    # ------------------------------------------------------------------
    # Prompt / reporting
    # ------------------------------------------------------------------

    def prompt_string(self) -> str:
        """``bmm:<org>[/<site>][/<vpc>]> `` with the path in cyan."""
        parts = [self.org]
        if self.scope.site_name:
            parts.append(self.scope.site_name)
        if self.scope.vpc_name:
            parts.append(self.scope.vpc_name)
        return cyan("bmm:" + "/".join(parts)) + "> "

    def report_resolution(
        self, label: str, item: NamedItem[Any], method: ResolutionMethod
    ) -> None:
        # The select widget already echoes interactive picks.
        if method is ResolutionMethod.SELECTED:
            return
        self.err_console.print(
            f"{escape(label)}: [cyan]{escape(item.display_name)}[/cyan] "
            f"[dim]({method.value})[/dim]"
        )

    # ------------------------------------------------------------------
    # Auth / org
    # ------------------------------------------------------------------

    def refresh_client(self, token: str) -> None:
        self.token = token
        self.client.token = token

    def login(self) -> None:
        """Run the login callback and install the returned token.

        Raises
        ------
        ConfigError
            When no login method is configured.
        """
        if self.login_fn is None:
            raise ConfigError(
                "login not available (no auth method configured)",
                hint="Pass --token or set BMM_TOKEN instead.",
            )
        self.refresh_client(self.login_fn())

    def tenant_id(self) -> str:
        """The current org's tenant ID, fetched once and cached."""
        cached = self.cache.lookup_by_name(TENANT_CACHE_KEY, self.org)
        if cached is not None:
            return cached.id
        tenant_id = fetch_tenant_id(self.client)
        self.cache.set(TENANT_CACHE_KEY, [NamedItem(name=self.org, id=tenant_id)])
        return tenant_id

    def set_org(self, org: str) -> None:
        self.org = org
        self.client.org = org
        self.cache.invalidate_all()
        logger.debug("org set to %s", org)

    # ------------------------------------------------------------------
    # Scope
    # ------------------------------------------------------------------

    def set_site_scope(self, site: NamedItem[Any], *, keep_vpc: bool = False) -> None:
        """Scope to *site*; any VPC scope is dropped unless *keep_vpc*."""
        self.scope = Scope(
            site_id=site.id,
            site_name=site.name,
            vpc_id=self.scope.vpc_id if keep_vpc else "",
            vpc_name=self.scope.vpc_name if keep_vpc else "",
        )
        self.cache.invalidate_filtered()
        logger.debug("scope: site=%s", site.id)

    def set_vpc_scope(
        self, vpc: NamedItem[Any], *, site_id: str = "", site_name: str = ""
    ) -> None:
        """Scope to *vpc*, keeping the current site unless one is given."""
        self.scope = Scope(
            site_id=site_id or self.scope.site_id,
            site_name=site_name or self.scope.site_name,
            vpc_id=vpc.id,
            vpc_name=vpc.name,
        )
        self.cache.invalidate_filtered()
        logger.debug("scope: site=%s vpc=%s", self.scope.site_id, vpc.id)

    def clear_scope(self) -> None:
        self.scope = Scope()
        self.cache.invalidate_filtered()
        logger.debug("scope cleared")

    # ------------------------------------------------------------------
    # Command logging
    # ------------------------------------------------------------------

    def log_cmd(self, *parts: str) -> None:
        """Print the scripted equivalent of the current action."""
        self.err_console.print(
            f"[dim]INFO:[/dim] {escape(cli_equivalent(self, *parts))}",
            highlight=False,
        )


def scope_flags(scope: Scope, parts: tuple[str, ...] | list[str]) -> list[str]:
    """Return *parts* plus the ``--site-id``/``--vpc-id`` flags that apply.

    Only ``<resource> list`` actions take scope flags, and a flag already
    present in *parts* is never added twice.
    """
    result = list(parts)
    if len(parts) < 2 or parts[1].strip() != "list":
        return result
    resource = parts[0].strip()
    wants_site = resource in SITE_FLAG_RESOURCES or resource in SITE_AND_VPC_FLAG_RESOURCES
    wants_vpc = resource in SITE_AND_VPC_FLAG_RESOURCES
    if wants_site and scope.site_id.strip() and "--site-id" not in result:
        result += ["--site-id", scope.site_id.strip()]
    if wants_vpc and scope.vpc_id.strip() and "--vpc-id" not in result:
        result += ["--vpc-id", scope.vpc_id.strip()]
    return result


def cli_equivalent(session: Session, *parts: str) -> str:
    """Render ``parts`` as the one-shot ``bmm-shell`` command line."""
    words = [PROGRAM_NAME]
    if session.config_path.strip():
        words += ["--config", session.config_path]
    words += scope_flags(session.scope, parts)
    return shlex.join(words)
