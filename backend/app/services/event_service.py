"""Core event service — runs the moderation workflow against the record store.

Responsibilities:
- Create events with the role-dependent initial status
- Route every other mutation through the lifecycle transition table
- Optimistic locking via the version field (when the caller sends one)
- Mutation ledger (EventMutations) for every successful transition
- Public, per-admin and review-queue listings
"""
import logging
import uuid
from typing import Optional, Any

from sqlalchemy.orm import Session

from app.errors import ConflictError, NotFoundError, StateError
from app.models.event import CONTENT_FIELDS, Event, EventStatus
from app.models.event_mutation import EventMutation, ActionType
from app.services import lifecycle
from app.services.event_store import EventStore
from app.services.lifecycle import Actor, Capability, TransitionContext

logger = logging.getLogger(__name__)

REVIEW_STATUSES = (EventStatus.pending, EventStatus.pending_edit, EventStatus.pending_delete)
ALL_CATEGORIES = "All"


def _event_snapshot(event: Event) -> dict[str, Any]:
    """Serialize an event to a JSON-safe dict for the mutation ledger."""
    snapshot = {name: getattr(event, name) for name in CONTENT_FIELDS}
    snapshot.update({
        "event_id": event.event_id,
        "status": EventStatus(event.status).value if event.status else None,
        "pending_changes": event.pending_changes,
        "version": event.version,
    })
    return snapshot


def _ledger_entry(
    event: Event,
    actor: Actor,
    action: ActionType,
    before: Optional[dict],
    deleted: bool = False,
) -> EventMutation:
    return EventMutation(
        event_id=event.event_id,
        actor_id=actor.id,
        action_type=action,
        from_status=before["status"] if before else None,
        to_status=None if deleted else EventStatus(event.status).value,
        before_snapshot=before,
        after_snapshot=None if deleted else _event_snapshot(event),
    )


def _check_version(event: Event, expected_version: Optional[int]) -> None:
    if expected_version is not None and event.version != expected_version:
        raise ConflictError(
            f"Version mismatch: expected {event.version}, got {expected_version}. Re-fetch and retry."
        )


def _clean_changes(changes: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in changes.items() if k in CONTENT_FIELDS and v is not None}


def _transition(
    db: Session,
    event_id: str,
    actor: Actor,
    action: ActionType,
    changes: Optional[dict[str, Any]] = None,
    reason: Optional[str] = None,
    expected_version: Optional[int] = None,
    edit_only: bool = False,
) -> Optional[Event]:
    """Load, plan, apply and persist one transition. Returns None after a hard delete."""
    store = EventStore(db)
    if lifecycle.capability_for(action) == Capability.moderate:
        lifecycle.authorize(actor, Capability.moderate)

    event = store.find_by_id(event_id)
    if not event:
        raise NotFoundError("Event", event_id)

    transition = lifecycle.plan(event, action, actor)
    if edit_only and event.status != EventStatus.pending_edit:
        raise ConflictError("No pending changes to approve")
    _check_version(event, expected_version)

    before = _event_snapshot(event)

    if transition.hard_delete:
        store.delete_by_id(event_id, _ledger_entry(event, actor, action, before, deleted=True))
        logger.info("Event %s deleted by %s via %s (was %s)", event_id, actor.id, action.value, before["status"])
        return None

    ctx = TransitionContext(actor=actor, now=lifecycle.utcnow(), changes=changes or {}, reason=reason)
    try:
        lifecycle.apply(event, transition, ctx)
        problems = lifecycle.invariant_violations(event)
        if problems:
            logger.error(
                "Event %s %s by %s left it inconsistent: %s", event_id, action.value, actor.id, "; ".join(problems),
            )
            raise StateError()
    except Exception:
        store.discard()
        raise
    event.version += 1

    store.save(event, _ledger_entry(event, actor, action, before))
    logger.info(
        "Event %s %s by %s: %s -> %s (version %d)",
        event_id, action.value, actor.id, before["status"], EventStatus(event.status).value, event.version,
    )
    return event


def create_event(db: Session, actor: Actor, fields: dict[str, Any]) -> Event:
    """Create an event; super-admin submissions are published immediately."""
    lifecycle.authorize(actor, Capability.submit)
    lifecycle.validate_new_event(fields)

    event = Event(
        event_id=str(uuid.uuid4()),
        **{name: fields[name] for name in CONTENT_FIELDS if fields.get(name) is not None},
    )
    lifecycle.stamp_creation(event, actor, lifecycle.utcnow())

    store = EventStore(db)
    store.save(event, _ledger_entry(event, actor, ActionType.create, None))
    logger.info("Created event '%s' (%s) by %s, status %s", event.title, event.event_id, actor.id, event.status.value)
    return event


def update_event(
    db: Session,
    event_id: str,
    actor: Actor,
    changes: dict[str, Any],
    expected_version: Optional[int] = None,
) -> Event:
    """Edit in place, or stage the edit for review when the event is already published."""
    return _transition(
        db, event_id, actor, ActionType.update,
        changes=_clean_changes(changes), expected_version=expected_version,
    )


def request_delete(
    db: Session,
    event_id: str,
    actor: Actor,
    expected_version: Optional[int] = None,
) -> bool:
    """Delete an event, or file a delete request for review. Returns True when pending."""
    event = _transition(db, event_id, actor, ActionType.delete, expected_version=expected_version)
    return event is not None


def approve_event(db: Session, event_id: str, actor: Actor, expected_version: Optional[int] = None) -> Event:
    """Publish a submission or apply a pending edit."""
    return _transition(db, event_id, actor, ActionType.approve, expected_version=expected_version)


def approve_edit(db: Session, event_id: str, actor: Actor, expected_version: Optional[int] = None) -> Event:
    """Apply a pending edit; refuses events that have no proposal under review."""
    return _transition(
        db, event_id, actor, ActionType.approve,
        expected_version=expected_version, edit_only=True,
    )


def reject_event(
    db: Session,
    event_id: str,
    actor: Actor,
    reason: Optional[str] = None,
    expected_version: Optional[int] = None,
) -> Event:
    """Reject a submission, or drop a pending edit and keep the published version."""
    return _transition(db, event_id, actor, ActionType.reject, reason=reason, expected_version=expected_version)


def approve_delete(db: Session, event_id: str, actor: Actor, expected_version: Optional[int] = None) -> None:
    _transition(db, event_id, actor, ActionType.approve_delete, expected_version=expected_version)


def reject_delete(db: Session, event_id: str, actor: Actor, expected_version: Optional[int] = None) -> Event:
    return _transition(db, event_id, actor, ActionType.reject_delete, expected_version=expected_version)


def get_event(db: Session, event_id: str, actor: Actor) -> Event:
    event = EventStore(db).find_by_id(event_id)
    if not event:
        raise NotFoundError("Event", event_id)
    lifecycle.authorize(actor, Capability.view, event)
    return event


def list_public(db: Session, category: Optional[str] = None) -> list[Event]:
    """Approved events only; an empty category or "All" means no filter."""
    if not category or category == ALL_CATEGORIES:
        category = None
    return EventStore(db).find(statuses=[EventStatus.approved], category=category)


def list_for_admin(db: Session, actor: Actor) -> list[Event]:
    """Every event for a super-admin, own submissions otherwise."""
    created_by = None if actor.is_super_admin else actor.id
    return EventStore(db).find(created_by=created_by)


def list_pending(db: Session, actor: Actor) -> list[Event]:
    lifecycle.authorize(actor, Capability.moderate)
    return EventStore(db).find(statuses=REVIEW_STATUSES)


def event_history(db: Session, event_id: str, actor: Actor) -> list[EventMutation]:
    lifecycle.authorize(actor, Capability.moderate)
    store = EventStore(db)
    entries = store.history(event_id)
    if not entries and store.find_by_id(event_id) is None:
        raise NotFoundError("Event", event_id)
    return entries
