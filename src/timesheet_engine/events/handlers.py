"""Event handlers that write the audit trail."""

from __future__ import annotations

import logging

from timesheet_engine.database import SessionFactory
from timesheet_engine.events.emitter import EventEmitter
from timesheet_engine.events.types import DomainEvent
from timesheet_engine.models import SystemLog

logger = logging.getLogger(__name__)


class LoggingHandler:
    """Writes every event to the application log as JSON."""

    def __init__(self, level: int = logging.INFO):
        self.level = level

    def __call__(self, event: DomainEvent) -> None:
        logger.log(self.level, "%s %s", event.event_type, event.to_json())


class SystemLogHandler:
    """Persists events to the ``system_log`` table.

    Each event is written in its own short transaction after the business
    transaction that produced it has committed, so a failing audit write
    never undoes a punch or an invoice.
    """

    def __init__(self, session_factory: SessionFactory):
        self.session_factory = session_factory

    async def __call__(self, event: DomainEvent) -> None:
        async with self.session_factory() as session, session.begin():
            session.add(
                SystemLog(
                    action=event.audit_action,
                    details=event.describe(),
                    actor=event.metadata.actor,
                    event_id=str(event.metadata.event_id),
                )
            )


def register_default_handlers(
    emitter: EventEmitter, session_factory: SessionFactory | None = None
) -> None:
    """Attach the log handler and, with a session factory, the audit table writer."""
    emitter.subscribe(LoggingHandler())
    if session_factory is not None:
        emitter.subscribe(SystemLogHandler(session_factory))
