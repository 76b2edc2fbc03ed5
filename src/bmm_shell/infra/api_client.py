"""httpx-backed REST client for the bare-metal manager API.

This module is the **only** place in the codebase that imports
``httpx``.  Transport failures and error statuses are caught here and
re-raised as :class:`~bmm_shell.exceptions.UpstreamError`; nothing raw
escapes the infrastructure boundary.

Paths are templates: ``{org}`` is filled from :attr:`ApiClient.org` at
request time (so ``org set`` takes effect immediately) and any other
``{name}`` placeholder from ``path_params``.
"""

from __future__ import annotations

import json
import logging
from typing import Any
from urllib.parse import quote

import httpx

from bmm_shell.exceptions import UpstreamError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS: float = 30.0
PAGE_SIZE: int = 100
MAX_PAGES: int = 1000


class ApiClient:
    """Synchronous JSON client bound to one base URL and org.

    Usage::

        client = ApiClient("https://bmm.example.com", org="my-org", token=tok)
        sites = client.fetch_all("/v2/org/{org}/carbide/site")
    """

    def __init__(
        self,
        base_url: str,
        org: str,
        *,
        token: str = "",
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.org = org
        self.token = token
        self._client = httpx.Client(
            base_url=self.base_url,
            timeout=timeout,
            transport=transport,
            headers={"Accept": "application/json"},
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> ApiClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Requests
    # ------------------------------------------------------------------

    def expand_path(self, path: str, path_params: dict[str, str] | None = None) -> str:
        """Substitute ``{org}`` and *path_params* into *path* (URL-quoted)."""
        values = {"org": self.org, **(path_params or {})}
        for key, value in values.items():
            path = path.replace("{" + key + "}", quote(value, safe=""))
        return path

    def request(
        self,
        method: str,
        path: str,
        *,
        path_params: dict[str, str] | None = None,
        params: dict[str, Any] | None = None,
        body: Any = None,
    ) -> httpx.Response:
        """Send one request and return the successful response.

        Raises
        ------
        UpstreamError
            On transport failure or any 4xx/5xx status.  ``status_code``
            is set for status errors.
        """
        url = self.expand_path(path, path_params)
        headers = {"Authorization": f"Bearer {self.token}"} if self.token else {}
        logger.debug("%s %s params=%s", method, url, params)

        try:
            response = self._client.request(
                method, url, params=params, json=body, headers=headers
            )
        except httpx.HTTPError as exc:
            raise UpstreamError(
                f"{method} {url} failed: {exc}",
                hint="Check the API base URL and your network connection.",
            ) from exc

        logger.debug("%s %s -> %d", method, url, response.status_code)
        if response.is_error:
            raise UpstreamError(
                f"{method} {url} returned HTTP {response.status_code}: "
                f"{_error_detail(response)}",
                hint=_hint_for_status(response.status_code),
                status_code=response.status_code,
            )
        return response

    def get_json(
        self, path: str, *, path_params: dict[str, str] | None = None
    ) -> Any:
        """GET *path* and decode the JSON body.

        Raises
        ------
        UpstreamError
            When the body is not valid JSON.
        """
        response = self.request("GET", path, path_params=path_params)
        try:
            return response.json()
        except ValueError as exc:
            raise UpstreamError(f"GET {path}: response is not JSON") from exc

    def fetch_all(
        self, path: str, params: dict[str, str] | None = None
    ) -> list[dict[str, Any]]:
        """Collect every page of a list endpoint.

        Pages of ``PAGE_SIZE`` are requested until a short page arrives,
        the ``X-Pagination`` header's ``total`` is reached, or the body is
        not a JSON array.
        """
        query: dict[str, Any] = {"pageSize": PAGE_SIZE, **(params or {})}
        collected: list[dict[str, Any]] = []

        for page in range(1, MAX_PAGES + 1):
            query["pageNumber"] = page
            response = self.request("GET", path, params=query)
            try:
                items = response.json()
            except ValueError:
                logger.debug("non-JSON page %d from %s, stopping", page, path)
                break
            if not isinstance(items, list):
                break
            collected.extend(item for item in items if isinstance(item, dict))

            total = _pagination_total(response)
            if total and len(collected) >= total:
                break
            if len(items) < PAGE_SIZE:
                break
        return collected


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _pagination_total(response: httpx.Response) -> int:
    header = response.headers.get("X-Pagination")
    if not header:
        return 0
    try:
        total = json.loads(header).get("total", 0)
    except (ValueError, AttributeError):
        return 0
    return total if isinstance(total, int) else 0


def _error_detail(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        return response.text.strip() or response.reason_phrase
    if isinstance(payload, dict):
        for key in ("message", "error", "detail"):
            if payload.get(key):
                return str(payload[key])
    return response.reason_phrase


def _hint_for_status(status_code: int) -> str | None:
    if status_code == 401:
        return "Your token may have expired. Run 'login' to refresh it."
    if status_code == 403:
        return "Check that your token grants access to this org."
    return None
