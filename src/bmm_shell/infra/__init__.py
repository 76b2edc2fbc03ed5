"""Infrastructure layer: the REST backend.

This layer wraps all interaction with the bare-metal manager API.
Every raw ``httpx`` exception must be caught here and re-raised as a
:class:`~bmm_shell.exceptions.BmmShellError` subclass.

Rules
-----
* No imports from ``tui`` or ``cli``.
* No user-facing output (no ``print()``, no Rich rendering).
"""

from bmm_shell.infra.api_client import ApiClient
from bmm_shell.infra.auth import extract_orgs_from_jwt
from bmm_shell.infra.fetchers import (
    INSTANCE_TYPE,
    RESOURCES,
    RESOURCES_BY_TYPE,
    ResourceSpec,
    fetch_instance_types,
    fetch_tenant_id,
    register_default_fetchers,
)

__all__: list[str] = [
    "ApiClient",
    "INSTANCE_TYPE",
    "RESOURCES",
    "RESOURCES_BY_TYPE",
    "ResourceSpec",
    "extract_orgs_from_jwt",
    "fetch_instance_types",
    "fetch_tenant_id",
    "register_default_fetchers",
]
