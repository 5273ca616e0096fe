"""Request ID management for request correlation.

The current request ID lives in a ContextVar so it follows the request into
threadpool-run endpoints and log records.
"""

import uuid
from contextvars import ContextVar
from typing import Optional

request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)

NO_REQUEST_ID = "no-request-id"


def generate_request_id() -> str:
    """Return a new random (UUID v4) request ID."""
    return str(uuid.uuid4())


def get_request_id() -> str:
    """Return the current request ID, or "no-request-id" outside a request."""
    return request_id_var.get() or NO_REQUEST_ID


def set_request_id(request_id: str) -> None:
    request_id_var.set(request_id)
