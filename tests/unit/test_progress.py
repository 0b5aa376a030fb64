"""Unit tests for progress events, emit_progress and ProgressChannel."""

import asyncio

import pytest

from readflow.application.ports import emit_progress
from readflow.domain.entities import ParseProgressEvent
from readflow.domain.value_objects import ProgressStage
from readflow.interfaces.api.progress_channel import ProgressChannel


def _event(percent: int) -> ParseProgressEvent:
    return ParseProgressEvent(stage=ProgressStage.PARSING, percent=percent, message="page")


class TestParseProgressEvent:
    def test_percent_clamped(self) -> None:
        assert _event(130).percent == 100
        assert _event(-5).percent == 0

    def test_to_dict_omits_unset_pages(self) -> None:
        assert _event(10).to_dict() == {"stage": "parsing", "percent": 10, "message": "page"}

    def test_to_dict_pages(self) -> None:
        event = ParseProgressEvent(
            stage=ProgressStage.OCR, percent=54, message="OCR page 1/10", page_index=1, total_pages=10
        )
        assert event.to_dict()["pageIndex"] == 1
        assert event.to_dict()["totalPages"] == 10


class TestEmitProgress:
    def test_none_sink_ignored(self) -> None:
        emit_progress(None, _event(5))

    def test_observer_error_swallowed(self) -> None:
        def broken(event: ParseProgressEvent) -> None:
            raise RuntimeError("boom")

        emit_progress(broken, _event(5))


class TestProgressChannel:
    """Tests for ProgressChannel."""

    @pytest.mark.asyncio
    async def test_yields_events_until_closed(self) -> None:
        channel = ProgressChannel()
        channel(_event(5))
        channel(_event(20))
        channel.close()
        channel(_event(30))
        received = [e.percent async for e in channel]
        assert received == [5, 20]

    @pytest.mark.asyncio
    async def test_consumer_waits_for_producer(self) -> None:
        channel = ProgressChannel()

        async def produce() -> None:
            for percent in (5, 50, 100):
                await asyncio.sleep(0)
                channel(_event(percent))
            channel.close()

        producer = asyncio.create_task(produce())
        received = [e.percent async for e in channel]
        await producer
        assert received == [5, 50, 100]

    def test_close_is_idempotent(self) -> None:
        channel = ProgressChannel()
        channel.close()
        channel.close()
