"""Event API routes — delegates to event_service for the moderation workflow."""
import logging
from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.auth.deps import get_current_actor
from app.database import get_db
from app.schemas.event import (
    EventActionOut,
    EventCreate,
    EventDeleteOut,
    EventMutationOut,
    EventOut,
    EventUpdate,
    RejectRequest,
)
from app.services import event_service
from app.services.lifecycle import Actor

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/", response_model=list[EventOut])
def list_public_events(category: Optional[str] = Query(None), db: Session = Depends(get_db)):
    """Public listing: approved events only, optionally filtered by category."""
    return event_service.list_public(db, category=category)


@router.get("/admin", response_model=list[EventOut])
def list_admin_events(actor: Actor = Depends(get_current_actor), db: Session = Depends(get_db)):
    """All events for a super-admin, own events for an admin."""
    return event_service.list_for_admin(db, actor)


@router.get("/pending", response_model=list[EventOut])
def list_pending_events(actor: Actor = Depends(get_current_actor), db: Session = Depends(get_db)):
    """Review queue: pending submissions, edits and delete requests (super-admin only)."""
    return event_service.list_pending(db, actor)


@router.get("/{event_id}", response_model=EventOut)
def get_event(event_id: str, actor: Actor = Depends(get_current_actor), db: Session = Depends(get_db)):
    return event_service.get_event(db, event_id, actor)


@router.get("/{event_id}/history", response_model=list[EventMutationOut])
def get_event_history(event_id: str, actor: Actor = Depends(get_current_actor), db: Session = Depends(get_db)):
    """Transition ledger for an event, oldest first (super-admin only)."""
    return event_service.event_history(db, event_id, actor)


@router.post("/", response_model=EventActionOut, status_code=status.HTTP_201_CREATED)
def create_event(payload: EventCreate, actor: Actor = Depends(get_current_actor), db: Session = Depends(get_db)):
    event = event_service.create_event(db, actor, payload.model_dump())
    message = "Event published successfully" if actor.is_super_admin else "Event submitted for approval"
    return EventActionOut(message=message, event=EventOut.model_validate(event))


@router.put("/{event_id}", response_model=EventActionOut)
def update_event(
    event_id: str,
    payload: EventUpdate,
    expected_version: Optional[int] = Query(None, description="Fail with 409 unless the event is at this version"),
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    """Edit an event. Owners of published events get a pending edit instead of a live change."""
    event = event_service.update_event(
        db, event_id, actor, payload.model_dump(exclude_unset=True), expected_version=expected_version,
    )
    if event.status == "pending_edit" and not actor.is_super_admin:
        message = "Changes submitted for approval"
    else:
        message = "Event updated successfully"
    return EventActionOut(message=message, event=EventOut.model_validate(event))


@router.delete("/{event_id}", response_model=EventDeleteOut)
def delete_event(
    event_id: str,
    expected_version: Optional[int] = Query(None, description="Fail with 409 unless the event is at this version"),
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    """Delete an event, or file a delete request when an admin removes a published event."""
    pending = event_service.request_delete(db, event_id, actor, expected_version=expected_version)
    if pending:
        return EventDeleteOut(message="Delete request submitted for approval", pending=True)
    return EventDeleteOut(message="Event deleted", pending=False)


@router.put("/{event_id}/approve", response_model=EventActionOut)
def approve_event(
    event_id: str,
    expected_version: Optional[int] = Query(None, description="Fail with 409 unless the event is at this version"),
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    event = event_service.approve_event(db, event_id, actor, expected_version=expected_version)
    return EventActionOut(message="Event approved successfully", event=EventOut.model_validate(event))


@router.put("/{event_id}/approve-edit", response_model=EventActionOut)
def approve_edit(
    event_id: str,
    expected_version: Optional[int] = Query(None, description="Fail with 409 unless the event is at this version"),
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    """Apply a pending edit to the published event (409 when no edit is under review)."""
    event = event_service.approve_edit(db, event_id, actor, expected_version=expected_version)
    return EventActionOut(message="Changes approved and applied", event=EventOut.model_validate(event))


@router.put("/{event_id}/reject", response_model=EventActionOut)
def reject_event(
    event_id: str,
    payload: Optional[RejectRequest] = None,
    expected_version: Optional[int] = Query(None, description="Fail with 409 unless the event is at this version"),
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    reason = payload.reason if payload else None
    event = event_service.reject_event(db, event_id, actor, reason=reason, expected_version=expected_version)
    return EventActionOut(message="Event rejected", event=EventOut.model_validate(event))


@router.delete("/{event_id}/approve-delete", response_model=EventDeleteOut)
def approve_delete(
    event_id: str,
    expected_version: Optional[int] = Query(None, description="Fail with 409 unless the event is at this version"),
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    event_service.approve_delete(db, event_id, actor, expected_version=expected_version)
    return EventDeleteOut(message="Event deleted successfully", pending=False)


@router.put("/{event_id}/reject-delete", response_model=EventActionOut)
def reject_delete(
    event_id: str,
    expected_version: Optional[int] = Query(None, description="Fail with 409 unless the event is at this version"),
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    event = event_service.reject_delete(db, event_id, actor, expected_version=expected_version)
    return EventActionOut(message="Delete request rejected", event=EventOut.model_validate(event))
