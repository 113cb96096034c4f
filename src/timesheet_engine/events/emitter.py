"""Publishes committed domain events to the audit sinks.

Services call ``emit`` only after the transaction that produced the event has
committed. Delivery is fire-and-forget: every sink sees every event it
subscribed to, and a sink that raises is logged and skipped without affecting
the other sinks or the caller.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from timesheet_engine.events.types import DomainEvent

logger = logging.getLogger(__name__)

# A sink may be a plain callable or a coroutine function
AuditSink = Callable[[DomainEvent], Awaitable[None] | None]


@dataclass(frozen=True)
class Subscription:
    sink: AuditSink
    event_types: frozenset[str]  # empty = every event

    def wants(self, event: DomainEvent) -> bool:
        return not self.event_types or event.event_type in self.event_types


class EventEmitter:
    """Fan-out of domain events to subscribed sinks.

    Usage:
        emitter = EventEmitter()
        emitter.subscribe(SystemLogHandler(session_factory))
        emitter.subscribe(notify_payroll, InvoiceIssued, PeriodClosed)
        await emitter.emit(event)
    """

    def __init__(self) -> None:
        self._subscriptions: list[Subscription] = []

    def subscribe(self, sink: AuditSink, *event_types: type[DomainEvent]) -> None:
        """Deliver events of ``event_types`` (all events when none given) to ``sink``."""
        self._subscriptions.append(
            Subscription(sink, frozenset(t.__name__ for t in event_types))
        )

    async def emit(self, event: DomainEvent) -> list[Exception]:
        """Deliver ``event`` to each interested sink in subscription order.

        Returns the exceptions raised by sinks; none are propagated.
        """
        errors: list[Exception] = []
        for subscription in self._subscriptions:
            if not subscription.wants(event):
                continue
            try:
                result = subscription.sink(event)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                logger.exception(
                    "Handler %s failed for event %s",
                    subscription.sink,
                    event.event_type,
                )
                errors.append(e)
        return errors
