"""Tests for the explicit per-tick span handle."""

from opentelemetry.trace import StatusCode

from workloadsim.statistics import InvalidRange
from workloadsim.telemetry import NO_ACTIVE_SPAN, SpanHandle


def test_no_active_span_is_inert() -> None:
    assert not NO_ACTIVE_SPAN.active
    assert NO_ACTIVE_SPAN.exemplar_tags() == {}
    assert NO_ACTIVE_SPAN.trace_id is None
    NO_ACTIVE_SPAN.set_attribute("custom.attribute", 1)
    NO_ACTIVE_SPAN.record_failure(InvalidRange(750, 500))


def test_current_without_a_span_is_inactive() -> None:
    assert not SpanHandle.current().active


def test_handle_exposes_identifiers_as_exemplar_tags(tracer) -> None:
    with tracer.start_as_current_span("tick") as span:
        handle = SpanHandle(span)
        ctx = span.get_span_context()

        assert handle.active
        assert handle.exemplar_tags() == {
            "span_id": format(ctx.span_id, "016x"),
            "trace_id": format(ctx.trace_id, "032x"),
        }
        assert SpanHandle.current().span_id == handle.span_id


def test_attribute_and_failure_reach_the_span(tracer, span_exporter) -> None:
    with tracer.start_as_current_span("ok") as span:
        SpanHandle(span).set_attribute("custom.attribute", 101)
    with tracer.start_as_current_span("failed") as span:
        SpanHandle(span).record_failure(InvalidRange(750, 500))

    ok, failed = span_exporter.get_finished_spans()
    assert ok.attributes["custom.attribute"] == 101
    assert failed.status.status_code is StatusCode.ERROR
    assert [e.name for e in failed.events] == ["exception"]
    assert failed.events[0].attributes["exception.type"] == "InvalidRange"
