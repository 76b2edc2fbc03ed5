"""Token inspection helpers.

Tokens are decoded without signature verification: the claims are used
only to suggest org names, never to make access decisions.
"""

from __future__ import annotations

import base64
import binascii
import json

ORG_CLAIM_TYPE_PREFIX = "group/ngc"


def decode_jwt_payload(token: str) -> dict[str, object]:
    """Return the JSON payload of a compact JWT, or ``{}`` if malformed."""
    parts = token.split(".")
    if len(parts) != 3:
        return {}
    payload = parts[1]
    payload += "=" * (-len(payload) % 4)
    try:
        decoded = base64.urlsafe_b64decode(payload)
        claims = json.loads(decoded)
    except (binascii.Error, ValueError):
        return {}
    return claims if isinstance(claims, dict) else {}


def extract_orgs_from_jwt(token: str) -> list[str]:
    """List org names granted by the token's ``access`` claims, in order.

    Only claims whose ``type`` starts with ``group/ngc`` and that carry a
    non-empty ``name`` count; duplicates are dropped.
    """
    access = decode_jwt_payload(token).get("access")
    if not isinstance(access, list):
        return []
    orgs: list[str] = []
    for claim in access:
        if not isinstance(claim, dict):
            continue
        claim_type = claim.get("type")
        name = claim.get("name")
        if (
            isinstance(claim_type, str)
            and claim_type.startswith(ORG_CLAIM_TYPE_PREFIX)
            and isinstance(name, str)
            and name
            and name not in orgs
        ):
            orgs.append(name)
    return orgs
