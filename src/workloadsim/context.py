"""
Per-tick request context.

The four correlation fields are held in a ContextVar, so every thread and
asyncio task sees only the context it activated itself. ``request_scope``
restores the previous value on exit, including when the body raises.
"""

from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import asdict, dataclass

REQUEST_CONTEXT_KEYS = ("tenant_id", "user_id", "job_id", "customer_id")


@dataclass(frozen=True)
class RequestContext:
    """Correlation identifiers for one execution; illustrative, never enforced."""

    tenant_id: str
    user_id: str
    job_id: str
    customer_id: str

    @classmethod
    def from_mapping(cls, values: Mapping[str, object]) -> "RequestContext":
        missing = [k for k in REQUEST_CONTEXT_KEYS if not values.get(k)]
        if missing:
            raise ValueError(f"Request context is missing: {', '.join(missing)}")
        return cls(**{k: str(values[k]) for k in REQUEST_CONTEXT_KEYS})

    def as_dict(self) -> dict[str, str]:
        return asdict(self)


_current_request: ContextVar[RequestContext | None] = ContextVar(
    "workloadsim_request_context", default=None
)


def current_request_context() -> RequestContext | None:
    """The context active in this thread/task, or None outside a tick."""
    return _current_request.get()


@contextmanager
def request_scope(context: RequestContext) -> Iterator[RequestContext]:
    """Activate ``context`` for the duration of the block."""
    token = _current_request.set(context)
    try:
        yield context
    finally:
        _current_request.reset(token)
