"""Record store for events: the only place event rows are read or written.

Writes commit the event and its ledger entries together. Any SQLAlchemy
failure rolls the session back and surfaces as StoreError; nothing is retried.
"""
import logging
from contextlib import contextmanager
from typing import Iterable, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.errors import StoreError
from app.models.event import Event, EventStatus
from app.models.event_mutation import EventMutation

logger = logging.getLogger(__name__)


class EventStore:
    def __init__(self, db: Session):
        self.db = db

    @contextmanager
    def _guard(self, operation: str):
        try:
            yield
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.error("Event store %s failed: %s", operation, exc)
            raise StoreError() from exc

    def find_by_id(self, event_id: str) -> Optional[Event]:
        with self._guard("find_by_id"):
            return self.db.query(Event).filter(Event.event_id == event_id).first()

    def find(
        self,
        statuses: Optional[Iterable[EventStatus]] = None,
        created_by: Optional[str] = None,
        category: Optional[str] = None,
    ) -> list[Event]:
        """Filtered listing, newest first."""
        with self._guard("find"):
            query = self.db.query(Event)
            if statuses is not None:
                query = query.filter(Event.status.in_(list(statuses)))
            if created_by is not None:
                query = query.filter(Event.created_by == created_by)
            if category is not None:
                query = query.filter(Event.category == category)
            return query.order_by(Event.created_at.desc()).all()

    def save(self, event: Event, *entries: EventMutation) -> Event:
        with self._guard("save"):
            self.db.add(event)
            self.db.add_all(entries)
            self.db.commit()
            self.db.refresh(event)
        return event

    def delete_by_id(self, event_id: str, *entries: EventMutation) -> bool:
        event = self.find_by_id(event_id)
        if event is None:
            return False
        with self._guard("delete"):
            self.db.delete(event)
            self.db.add_all(entries)
            self.db.commit()
        return True

    def history(self, event_id: str) -> list[EventMutation]:
        with self._guard("history"):
            return (
                self.db.query(EventMutation)
                .filter(EventMutation.event_id == event_id)
                .order_by(EventMutation.created_at)
                .all()
            )

    def discard(self) -> None:
        """Drop uncommitted changes made to loaded events."""
        self.db.rollback()
