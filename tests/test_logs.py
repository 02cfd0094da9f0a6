from __future__ import annotations

import logging

import pytest

from storefront.identifiers import RandomIdentifierGenerator, SequentialIdentifierGenerator
from storefront.logs import MemoryLogSink, NullLogSink, StandardLogSink


def test_memory_sink_filters_by_level() -> None:
    sink = MemoryLogSink()
    sink.info("hello")
    sink.warn("careful", "user-1")
    sink.error("broken")
    sink.debug("details")

    assert sink.messages() == ["hello", "careful", "broken", "details"]
    assert sink.messages("warn") == ["careful"]
    assert sink.entries("warn")[0].user_id == "user-1"
    with pytest.raises(ValueError):
        sink.entries("fatal")


def test_memory_sink_returns_copies() -> None:
    sink = MemoryLogSink()
    sink.info("one")
    entries = sink.entries()
    entries.clear()
    assert sink.messages() == ["one"]


def test_null_sink_accepts_everything() -> None:
    sink = NullLogSink()
    for method in (sink.info, sink.warn, sink.error, sink.debug):
        assert method("ignored", "user") is None


def test_standard_sink_maps_levels(caplog: pytest.LogCaptureFixture) -> None:
    sink = StandardLogSink("storefront.tests")
    with caplog.at_level(logging.DEBUG, logger="storefront.tests"):
        sink.info("info message")
        sink.warn("warn message", "user-9")
        sink.error("error message")
        sink.debug("debug message")

    levels = [record.levelno for record in caplog.records]
    assert levels == [logging.INFO, logging.WARNING, logging.ERROR, logging.DEBUG]
    warning = caplog.records[1]
    assert warning.getMessage() == "warn message (user=user-9)"
    assert warning.user_id == "user-9"


def test_standard_sink_child() -> None:
    child = StandardLogSink("storefront").child("orders")
    assert child.logger.name == "storefront.orders"


def test_sequential_identifiers() -> None:
    ids = SequentialIdentifierGenerator("order", start=5)
    assert [ids.next() for _ in range(3)] == ["order-5", "order-6", "order-7"]
    with pytest.raises(ValueError):
        SequentialIdentifierGenerator("  ")


def test_random_identifiers_are_distinct() -> None:
    ids = RandomIdentifierGenerator()
    values = {ids.next() for _ in range(500)}
    assert len(values) == 500
    with pytest.raises(ValueError):
        RandomIdentifierGenerator(nbytes=4)
