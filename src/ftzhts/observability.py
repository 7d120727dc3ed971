"""Request correlation for HTS API logs.

Every HTTP request runs inside :func:`run_scope`, which binds a run id
(the caller's ``X-Run-ID`` header when present, otherwise a fresh UUID).
:func:`log_event` stamps that id on each record it emits, so all lines
produced while serving one request can be grepped together.
"""

from __future__ import annotations

import logging
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator, Optional

logger = logging.getLogger(__name__)

RUN_ID_HEADER = "X-Run-ID"

_run_id: ContextVar[Optional[str]] = ContextVar("hts_run_id", default=None)


def current_run_id() -> Optional[str]:
    return _run_id.get()


@contextmanager
def run_scope(run_id: Optional[str] = None) -> Iterator[str]:
    """Bind ``run_id`` (or a new one) for the duration of the block."""

    value = run_id or uuid.uuid4().hex
    token = _run_id.set(value)
    try:
        yield value
    finally:
        _run_id.reset(token)


def redact_authorization(header: Optional[str]) -> str:
    """Mask an ``Authorization`` header down to the first four token characters."""

    if not header:
        return "<missing>"
    scheme, _, credential = header.partition(" ")
    secret = credential.strip() if credential else scheme
    if len(secret) <= 4:
        return "***"
    return f"{secret[:4]}***"


def log_event(event: str, *, level: int = logging.INFO, **fields: object) -> None:
    """Emit ``event`` with the active run id and ``fields`` as ``key=value`` pairs."""

    payload = {"run_id": current_run_id(), **fields}
    rendered = " ".join(f"{key}={value}" for key, value in payload.items())
    logger.log(level, "%s %s", event, rendered, extra={"payload": payload})
