"""Ledger event sinks.

InMemoryEventLog keeps a bounded tail for the API and tests.
DatabaseEventWriter appends to the ledger_events table; each event is its own
short transaction because the ledger state it describes has already
committed in memory.
"""
import json
import logging
from collections import deque

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.pm_ledger.domain.events import EventSinkProtocol, LedgerEvent

logger = logging.getLogger(__name__)

_INSERT_EVENT_SQL = text("""
    INSERT INTO ledger_events (event_id, market_id, event_type, participant, payload, created_at)
    VALUES (:event_id, :market_id, :event_type, :participant, :payload, :created_at)
""")


class InMemoryEventLog:
    def __init__(self, max_events: int = 50_000) -> None:
        self._events: deque[LedgerEvent] = deque(maxlen=max_events)

    async def publish(self, event: LedgerEvent) -> None:
        self._events.append(event)

    def events(self, market_id: str | None = None, limit: int | None = None) -> list[LedgerEvent]:
        items = [e for e in self._events if market_id is None or e.market_id == market_id]
        return items[-limit:] if limit else items


class DatabaseEventWriter:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def publish(self, event: LedgerEvent) -> None:
        async with self._session_factory() as session:
            async with session.begin():
                await write_ledger_event(event, session)


class FanOutEventSink:
    """Publish to several sinks in order; one failing sink does not starve the rest."""

    def __init__(self, *sinks: EventSinkProtocol) -> None:
        self._sinks = sinks

    async def publish(self, event: LedgerEvent) -> None:
        for sink in self._sinks:
            try:
                await sink.publish(event)
            except Exception:
                logger.exception(
                    "Sink %s failed for event %s", type(sink).__name__, event.event_id
                )


async def write_ledger_event(event: LedgerEvent, db: AsyncSession) -> None:
    """Insert one row into ledger_events within the caller's transaction."""
    await db.execute(
        _INSERT_EVENT_SQL,
        {
            "event_id": event.event_id,
            "market_id": event.market_id,
            "event_type": event.event_type.value,
            "participant": event.participant,
            "payload": json.dumps(event.payload),
            "created_at": event.created_at,
        },
    )
