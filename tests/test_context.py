"""Tests for per-tick request context scoping."""

import threading

import pytest

from workloadsim.context import RequestContext, current_request_context, request_scope


def test_no_context_outside_a_scope() -> None:
    assert current_request_context() is None


def test_scope_activates_and_clears(request_ctx: RequestContext) -> None:
    with request_scope(request_ctx) as active:
        assert active is request_ctx
        assert current_request_context() == request_ctx
    assert current_request_context() is None


def test_scope_clears_when_body_raises(request_ctx: RequestContext) -> None:
    with pytest.raises(RuntimeError):
        with request_scope(request_ctx):
            raise RuntimeError("boom")
    assert current_request_context() is None


def test_nested_scope_restores_outer(request_ctx: RequestContext) -> None:
    inner = RequestContext("t-2", "u-2", "j-2", "c-2")
    with request_scope(request_ctx):
        with request_scope(inner):
            assert current_request_context() == inner
        assert current_request_context() == request_ctx


def test_as_dict_has_the_four_correlation_keys(request_ctx: RequestContext) -> None:
    assert request_ctx.as_dict() == {
        "tenant_id": "tenant-1",
        "user_id": "user-1",
        "job_id": "job-1",
        "customer_id": "customer-1",
    }


def test_from_mapping_requires_every_key() -> None:
    with pytest.raises(ValueError, match="customer_id"):
        RequestContext.from_mapping({"tenant_id": "t", "user_id": "u", "job_id": "j"})


def test_threads_never_see_each_others_context() -> None:
    barrier = threading.Barrier(2)
    seen: dict[str, RequestContext | None] = {}

    def tick(name: str) -> None:
        ctx = RequestContext(name, name, name, name)
        with request_scope(ctx):
            barrier.wait(timeout=5)
            seen[name] = current_request_context()
            barrier.wait(timeout=5)

    threads = [threading.Thread(target=tick, args=(n,)) for n in ("a", "b")]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert seen["a"].tenant_id == "a"
    assert seen["b"].tenant_id == "b"
