"""Pydantic schemas for Events."""
from __future__ import annotations
from datetime import datetime
from typing import Optional
from pydantic import BaseModel


class PendingChanges(BaseModel):
    """Proposed content of a published event, held while status is pending_edit."""

    title: str
    date: str
    location: str
    description: str
    image: str
    tags: list[str] = []
    category: str = "All"


class EventCreate(BaseModel):
    # Required fields are checked by the service so the caller gets a field-level 400.
    title: Optional[str] = None
    date: Optional[str] = None
    location: Optional[str] = None
    description: Optional[str] = None
    image: Optional[str] = None
    tags: list[str] = []
    category: Optional[str] = "All"


class EventUpdate(BaseModel):
    title: Optional[str] = None
    date: Optional[str] = None
    location: Optional[str] = None
    description: Optional[str] = None
    image: Optional[str] = None
    tags: Optional[list[str]] = None
    category: Optional[str] = None


class RejectRequest(BaseModel):
    reason: Optional[str] = None


class EventOut(BaseModel):
    event_id: str
    title: str
    date: str
    location: str
    description: str
    image: str
    tags: list[str] = []
    category: str
    status: str
    pending_changes: Optional[PendingChanges] = None
    created_by: str
    approved_by: Optional[str] = None
    rejected_by: Optional[str] = None
    delete_requested_by: Optional[str] = None
    rejection_reason: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    approved_at: Optional[datetime] = None
    rejected_at: Optional[datetime] = None
    delete_requested_at: Optional[datetime] = None
    version: int

    model_config = {"from_attributes": True}


class EventActionOut(BaseModel):
    success: bool = True
    message: str
    event: EventOut


class EventDeleteOut(BaseModel):
    success: bool = True
    message: str
    pending: bool


class EventMutationOut(BaseModel):
    mutation_id: str
    event_id: str
    actor_id: str
    action_type: str
    from_status: Optional[str] = None
    to_status: Optional[str] = None
    before_snapshot: Optional[dict] = None
    after_snapshot: Optional[dict] = None
    created_at: datetime

    model_config = {"from_attributes": True}
