"""Progress sink port."""

import logging
from collections.abc import Callable

from readflow.domain.entities import ParseProgressEvent

logger = logging.getLogger(__name__)

ProgressSink = Callable[[ParseProgressEvent], None]


def emit_progress(sink: ProgressSink | None, event: ParseProgressEvent) -> None:
    """Deliver an event to the sink. Observer errors never affect extraction."""
    if sink is None:
        return
    try:
        sink(event)
    except Exception:
        logger.warning("Progress observer raised on %s event", event.stage, exc_info=True)
