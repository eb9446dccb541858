"""
Unit of Work

One database transaction per command. Domain events gathered from the
aggregates touched inside the block are handed to the message bus only
after the outermost transaction commits; a rollback drops them.
"""

from typing import List
import logging

from django.db import transaction

from shared.domain.base import DomainEvent

logger = logging.getLogger(__name__)


class DjangoUnitOfWork:
    """
    transaction.atomic() plus deferred event publishing

    Usage:
        with DjangoUnitOfWork() as uow:
            reservation = reservations.get(reservation_id, lock=True)
            reservation.transition_to(ReservationStatus.APPROVED, actor_id)
            uow.collect_events(reservation)
            reservations.save(reservation)
        # ReservationStatusChanged reaches subscribers after commit

    ``bus`` defaults to the process-wide message bus.
    """

    def __init__(self, bus=None):
        self._bus = bus
        self._events: List[DomainEvent] = []
        self._atomic = None

    def __enter__(self):
        self._atomic = transaction.atomic()
        self._atomic.__enter__()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        try:
            if exc_type is None:
                self._schedule_publish()
            elif self._events:
                logger.warning("Rolling back, dropping %d events", len(self._events))
                self._events.clear()
        finally:
            self._atomic.__exit__(exc_type, exc_val, exc_tb)

    def collect_events(self, aggregate):
        """Move pending events off ``aggregate`` into this unit of work"""
        events = aggregate.events
        if not events:
            return
        self._events.extend(events)
        aggregate.clear_events()
        logger.debug(
            "Collected %d events from %s %s",
            len(events), aggregate.__class__.__name__, aggregate.id,
        )

    def _schedule_publish(self):
        if not self._events:
            return
        events = list(self._events)
        self._events.clear()
        transaction.on_commit(lambda: self._publish(events))

    def _publish(self, events: List[DomainEvent]):
        bus = self._bus
        if bus is None:
            from shared.application.message_bus import message_bus as bus

        logger.info("Publishing %d domain events after commit", len(events))
        try:
            bus.publish_events(events)
        except Exception as e:
            # Data is committed already; subscribers are best effort
            logger.error("Error publishing events: %s", e, exc_info=True)
