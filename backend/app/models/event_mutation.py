"""EventMutation ORM model: ledger of every event transition.

event_id carries no foreign key so entries outlive hard deletes.
"""
import uuid
import enum
from datetime import datetime, timezone
from sqlalchemy import Column, String, DateTime, JSON, Enum as SAEnum
from app.database import Base


class ActionType(str, enum.Enum):
    create = "create"
    update = "update"
    delete = "delete"
    approve = "approve"
    reject = "reject"
    approve_delete = "approve_delete"
    reject_delete = "reject_delete"


class EventMutation(Base):
    __tablename__ = "event_mutations"

    mutation_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    event_id = Column(String(36), nullable=False, index=True)
    actor_id = Column(String(36), nullable=False)
    action_type = Column(SAEnum(ActionType), nullable=False)
    from_status = Column(String(20), nullable=True)
    to_status = Column(String(20), nullable=True)  # None when the event was hard-deleted
    before_snapshot = Column(JSON, nullable=True)
    after_snapshot = Column(JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
