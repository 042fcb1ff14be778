"""Per-request and per-import context values used by log records."""
from __future__ import annotations

from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator

request_id_ctx_var: ContextVar[str | None] = ContextVar("request_id", default=None)
import_id_ctx_var: ContextVar[str | None] = ContextVar("import_id", default=None)


def get_request_id() -> str | None:
    """Return the current request id if available."""
    return request_id_ctx_var.get()


def get_import_id() -> str | None:
    """Return the id of the plan currently being written, if any."""
    return import_id_ctx_var.get()


@contextmanager
def import_scope(import_id: str | None) -> Iterator[None]:
    """Tag log records emitted inside the block with ``import_id``."""
    token = import_id_ctx_var.set(import_id)
    try:
        yield
    finally:
        import_id_ctx_var.reset(token)
