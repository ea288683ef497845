"""Request context management using contextvars.

Each request gets a unique ID plus the resolved client IP, available anywhere
in the call stack (and in every log line) without passing them explicitly.
"""

from contextvars import ContextVar
from typing import Any
from uuid import uuid4


request_id_var: ContextVar[str] = ContextVar("request_id", default="")
client_ip_var: ContextVar[str | None] = ContextVar("client_ip", default=None)
trace_id_var: ContextVar[str | None] = ContextVar("trace_id", default=None)
admin_var: ContextVar[bool] = ContextVar("admin", default=False)


def generate_request_id() -> str:
    """Generate a new unique request ID."""
    return str(uuid4())


def get_request_id() -> str:
    """Get the current request ID."""
    return request_id_var.get()


def set_request_id(request_id: str | None = None) -> str:
    """Set the request ID for the current context.

    Args:
        request_id: Optional request ID. If not provided, generates a new one.

    Returns:
        The request ID that was set.
    """
    rid = request_id or generate_request_id()
    request_id_var.set(rid)
    return rid


def get_client_ip_context() -> str | None:
    """Get the client IP recorded for the current request."""
    return client_ip_var.get()


def set_client_ip(client_ip: str | None) -> None:
    client_ip_var.set(client_ip)


def get_trace_id() -> str | None:
    """Get the current trace ID."""
    return trace_id_var.get()


def set_trace_id(trace_id: str | None) -> None:
    trace_id_var.set(trace_id)


def mark_admin(is_admin: bool = True) -> None:
    """Flag the current request as made with a valid admin session."""
    admin_var.set(is_admin)


def get_context() -> dict[str, Any]:
    """Get all context variables as a dictionary.

    Returns:
        Dictionary with request_id, client_ip, trace_id and admin (only set keys).
    """
    context: dict[str, Any] = {}

    request_id = get_request_id()
    if request_id:
        context["request_id"] = request_id

    client_ip = get_client_ip_context()
    if client_ip:
        context["client_ip"] = client_ip

    trace_id = get_trace_id()
    if trace_id:
        context["trace_id"] = trace_id

    if admin_var.get():
        context["admin"] = True

    return context


def clear_context() -> None:
    """Clear all context variables.

    Called at the end of each request to prevent context leakage between
    requests.
    """
    request_id_var.set("")
    client_ip_var.set(None)
    trace_id_var.set(None)
    admin_var.set(False)
