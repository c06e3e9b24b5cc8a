"""
Request context using contextvars.

Holds the correlation data attached to every log line of a request:
request id, trace id, the authenticated principal, its agency and the
authentication plane (tenant, demo or admin) it came through.
"""

import contextvars
from typing import Any

CONTEXT_KEYS = ("request_id", "trace_id", "user_id", "tenant_id", "plane")

_context_vars: dict[str, contextvars.ContextVar[str | None]] = {
    key: contextvars.ContextVar(key, default=None) for key in CONTEXT_KEYS
}


def set_request_context(
    request_id: str | None = None,
    trace_id: str | None = None,
    user_id: str | None = None,
    tenant_id: str | None = None,
    plane: str | None = None,
) -> None:
    """Set the given context values; ``None`` leaves a value untouched."""
    values = {
        "request_id": request_id,
        "trace_id": trace_id,
        "user_id": user_id,
        "tenant_id": tenant_id,
        "plane": plane,
    }
    for key, value in values.items():
        if value:
            _context_vars[key].set(value)


def get_request_context() -> dict[str, Any]:
    return {key: var.get() for key, var in _context_vars.items()}


def clear_request_context() -> None:
    for var in _context_vars.values():
        var.set(None)
