from __future__ import annotations

import uuid

CLIENT_ID_HEADER = "x-client-id"


def resolve_client_id(header_value: str | None) -> tuple[str, bool]:
    """Return ``(client_id, generated)``.

    A caller-supplied identifier is used as-is when non-empty; no format checks.
    Otherwise a fresh UUID4 string is issued for the caller to reuse.
    """

    if header_value:
        return header_value, False
    return str(uuid.uuid4()), True
