"""Event ORM model."""
import uuid
import enum
from sqlalchemy import Column, String, Text, DateTime, Integer, JSON, Enum as SAEnum
from sqlalchemy.sql import func
from app.database import Base


class EventStatus(str, enum.Enum):
    pending = "pending"
    approved = "approved"
    rejected = "rejected"
    pending_edit = "pending_edit"
    pending_delete = "pending_delete"


# Fields an admin may propose; also the shape of pending_changes.
CONTENT_FIELDS = ("title", "date", "location", "description", "image", "tags", "category")


class Event(Base):
    __tablename__ = "events"

    event_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    title = Column(String(255), nullable=False)
    date = Column(String(100), nullable=False)  # free text, e.g. "Sat 12 Oct, 18:00"
    location = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    image = Column(Text, nullable=False)
    tags = Column(JSON, nullable=False, default=list)
    category = Column(String(100), nullable=False, default="All")
    status = Column(SAEnum(EventStatus), nullable=False, default=EventStatus.pending)
    pending_changes = Column(JSON(none_as_null=True), nullable=True)

    created_by = Column(String(36), nullable=False)
    approved_by = Column(String(36), nullable=True)
    rejected_by = Column(String(36), nullable=True)
    delete_requested_by = Column(String(36), nullable=True)
    rejection_reason = Column(String(500), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now())
    approved_at = Column(DateTime(timezone=True), nullable=True)
    rejected_at = Column(DateTime(timezone=True), nullable=True)
    delete_requested_at = Column(DateTime(timezone=True), nullable=True)

    version = Column(Integer, nullable=False, default=1)
