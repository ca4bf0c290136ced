"""Process-wide event sink wiring."""
from config.settings import settings
from src.pm_common.database import async_session_factory
from src.pm_ledger.domain.events import EventSinkProtocol
from src.pm_ledger.infrastructure.event_log import (
    DatabaseEventWriter,
    FanOutEventSink,
    InMemoryEventLog,
)

_event_log: InMemoryEventLog | None = None
_event_sink: EventSinkProtocol | None = None


def get_event_log() -> InMemoryEventLog:
    global _event_log  # noqa: PLW0603
    if _event_log is None:
        _event_log = InMemoryEventLog()
    return _event_log


def get_event_sink() -> EventSinkProtocol:
    """In-memory log always; the ledger_events table too when PERSIST_EVENTS is set."""
    global _event_sink  # noqa: PLW0603
    if _event_sink is None:
        if settings.PERSIST_EVENTS:
            _event_sink = FanOutEventSink(
                get_event_log(), DatabaseEventWriter(async_session_factory)
            )
        else:
            _event_sink = get_event_log()
    return _event_sink
