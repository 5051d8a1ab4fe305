"""Event approval state machine.

Every event mutation other than creation is looked up in ``TRANSITIONS``,
keyed by ``(action, standing, current status)``:

- action: what the actor asked for (``ActionType``)
- standing: ``moderator`` for super-admins, ``owner`` for the admin who
  created the event (anyone else is refused by ``authorize``)
- status: the event's current ``EventStatus``, or ``ANY``

Each entry names the status to move to (``None`` keeps the current one),
the field effects to run in order, or a hard delete. A missing entry means
the transition is illegal from that status and raises ``ConflictError``.

This module never touches the database; callers load the event, ``plan``
the transition, ``apply`` it, then persist.
"""
import enum
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from pydantic import ValidationError as PydanticValidationError

from app.errors import AuthorizationError, ConflictError, ValidationError
from app.models.admin import Role
from app.models.event import CONTENT_FIELDS, Event, EventStatus
from app.models.event_mutation import ActionType
from app.schemas.event import PendingChanges

REQUIRED_FIELDS = ("title", "date", "location", "description", "image", "category")

DEFAULT_REJECTION_REASON = "No reason provided"
DEFAULT_EDIT_REJECTION_REASON = "Changes rejected"


@dataclass(frozen=True)
class Actor:
    """Authenticated admin performing an operation."""

    id: str
    role: Role

    @property
    def is_super_admin(self) -> bool:
        return self.role == Role.super_admin


# ---------------------------------------------------------------------------
# Authorization policy
# ---------------------------------------------------------------------------
class Capability(str, enum.Enum):
    submit = "submit"                # create events
    modify = "modify"                # edit or delete an event
    view = "view"                    # read a single event
    moderate = "moderate"            # approve/reject, review queue, ledger
    manage_admins = "manage_admins"  # create/list/delete admin accounts


class Standing(str, enum.Enum):
    moderator = "moderator"
    owner = "owner"
    viewer = "viewer"


_SUPER_ADMIN_ONLY = {Capability.moderate, Capability.manage_admins}

_DENIED = {
    Capability.modify: "Not authorized to modify this event",
    Capability.view: "Not authorized to view this event",
    Capability.moderate: "Super admin access required",
    Capability.manage_admins: "Super admin access required",
}


def authorize(actor: Actor, capability: Capability, event: Optional[Event] = None) -> Standing:
    """Single policy check consulted by every operation.

    Returns the actor's standing towards ``event`` or raises AuthorizationError.
    """
    if actor.is_super_admin:
        return Standing.moderator
    if capability in _SUPER_ADMIN_ONLY:
        raise AuthorizationError(_DENIED[capability])
    if event is None or event.created_by == actor.id:
        return Standing.owner
    if capability == Capability.view and event.status == EventStatus.approved:
        return Standing.viewer
    raise AuthorizationError(_DENIED[capability])


# ---------------------------------------------------------------------------
# Field effects
# ---------------------------------------------------------------------------
@dataclass
class TransitionContext:
    actor: Actor
    now: datetime
    changes: dict[str, Any] = field(default_factory=dict)
    reason: Optional[str] = None


def _live_content(event: Event) -> dict[str, Any]:
    return {name: getattr(event, name) for name in CONTENT_FIELDS}


def _apply_changes(event: Event, ctx: TransitionContext) -> None:
    check_required({**_live_content(event), **ctx.changes})
    for name, value in ctx.changes.items():
        setattr(event, name, value)


def _stage_changes(event: Event, ctx: TransitionContext) -> None:
    # A second edit while pending_edit refines the existing proposal.
    base = event.pending_changes or _live_content(event)
    try:
        proposal = PendingChanges(**{**base, **ctx.changes})
    except PydanticValidationError as exc:
        raise ValidationError(f"Invalid proposed changes: {exc.errors()[0]['msg']}") from exc
    check_required(proposal.model_dump())
    event.pending_changes = proposal.model_dump()


def _promote_changes(event: Event, ctx: TransitionContext) -> None:
    if event.pending_changes:
        proposal = PendingChanges(**event.pending_changes)
        for name in CONTENT_FIELDS:
            setattr(event, name, getattr(proposal, name))
    event.pending_changes = None


def _discard_changes(event: Event, ctx: TransitionContext) -> None:
    event.pending_changes = None


def _stamp_approval(event: Event, ctx: TransitionContext) -> None:
    event.approved_by = ctx.actor.id
    event.approved_at = ctx.now
    event.rejected_by = None
    event.rejection_reason = None
    event.rejected_at = None


def _stamp_rejection(event: Event, ctx: TransitionContext) -> None:
    event.rejected_by = ctx.actor.id
    event.rejection_reason = ctx.reason or DEFAULT_REJECTION_REASON
    event.rejected_at = ctx.now
    event.approved_by = None
    event.approved_at = None


def _note_edit_rejection(event: Event, ctx: TransitionContext) -> None:
    event.rejection_reason = ctx.reason or DEFAULT_EDIT_REJECTION_REASON


def _mark_delete_request(event: Event, ctx: TransitionContext) -> None:
    event.delete_requested_by = ctx.actor.id
    event.delete_requested_at = ctx.now


def _clear_delete_request(event: Event, ctx: TransitionContext) -> None:
    event.delete_requested_by = None
    event.delete_requested_at = None


def _touch(event: Event, ctx: TransitionContext) -> None:
    event.updated_at = ctx.now


Effect = Callable[[Event, TransitionContext], None]


# ---------------------------------------------------------------------------
# Transition table
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class Transition:
    to_status: Optional[EventStatus] = None
    effects: tuple[Effect, ...] = ()
    hard_delete: bool = False


ANY = None
HARD_DELETE = Transition(hard_delete=True)

_S = EventStatus
_M = Standing.moderator
_O = Standing.owner

_APPROVE = Transition(_S.approved, (_stamp_approval, _touch))
_REJECT = Transition(_S.rejected, (_stamp_rejection,))
_APPROVE_OVER_DELETE = Transition(_S.approved, (_clear_delete_request, _stamp_approval, _touch))
_REJECT_OVER_DELETE = Transition(_S.rejected, (_clear_delete_request, _stamp_rejection))
_EDIT_IN_PLACE = Transition(None, (_apply_changes, _touch))
_PROPOSE_EDIT = Transition(_S.pending_edit, (_stage_changes, _touch))

TRANSITIONS: dict[tuple[ActionType, Standing, Optional[EventStatus]], Transition] = {
    # Super-admin edits overwrite live fields in every status.
    (ActionType.update, _M, ANY): _EDIT_IN_PLACE,
    (ActionType.update, _O, _S.pending): _EDIT_IN_PLACE,
    (ActionType.update, _O, _S.rejected): _EDIT_IN_PLACE,
    (ActionType.update, _O, _S.approved): _PROPOSE_EDIT,
    (ActionType.update, _O, _S.pending_edit): _PROPOSE_EDIT,

    (ActionType.delete, _M, ANY): HARD_DELETE,
    (ActionType.delete, _O, _S.pending): HARD_DELETE,
    (ActionType.delete, _O, _S.rejected): HARD_DELETE,
    (ActionType.delete, _O, _S.approved): Transition(_S.pending_delete, (_mark_delete_request,)),
    (ActionType.delete, _O, _S.pending_edit): Transition(
        _S.pending_delete, (_discard_changes, _mark_delete_request)
    ),

    (ActionType.approve, _M, _S.pending): _APPROVE,
    (ActionType.approve, _M, _S.approved): _APPROVE,
    (ActionType.approve, _M, _S.rejected): _APPROVE,
    (ActionType.approve, _M, _S.pending_edit): Transition(
        _S.approved, (_promote_changes, _stamp_approval, _touch)
    ),
    (ActionType.approve, _M, _S.pending_delete): _APPROVE_OVER_DELETE,

    (ActionType.reject, _M, _S.pending): _REJECT,
    (ActionType.reject, _M, _S.approved): _REJECT,
    (ActionType.reject, _M, _S.rejected): _REJECT,
    (ActionType.reject, _M, _S.pending_edit): Transition(
        _S.approved, (_discard_changes, _note_edit_rejection, _touch)
    ),
    (ActionType.reject, _M, _S.pending_delete): _REJECT_OVER_DELETE,

    (ActionType.approve_delete, _M, _S.pending_delete): HARD_DELETE,
    (ActionType.reject_delete, _M, _S.pending_delete): Transition(
        _S.approved, (_clear_delete_request,)
    ),
}

_CAPABILITY_FOR = {
    ActionType.update: Capability.modify,
    ActionType.delete: Capability.modify,
    ActionType.approve: Capability.moderate,
    ActionType.reject: Capability.moderate,
    ActionType.approve_delete: Capability.moderate,
    ActionType.reject_delete: Capability.moderate,
}

_CONFLICT_MESSAGES = {
    ActionType.approve_delete: "No pending delete request",
    ActionType.reject_delete: "No pending delete request",
    ActionType.delete: "Delete request already submitted",
}


def capability_for(action: ActionType) -> Capability:
    return _CAPABILITY_FOR[action]


def plan(event: Event, action: ActionType, actor: Actor) -> Transition:
    """Authorize ``actor`` and return the transition for ``action`` on ``event``."""
    standing = authorize(actor, capability_for(action), event)
    status = EventStatus(event.status)
    transition = TRANSITIONS.get((action, standing, status)) or TRANSITIONS.get((action, standing, ANY))
    if transition is None:
        if status == EventStatus.pending_delete and action not in _CONFLICT_MESSAGES:
            raise ConflictError("Event has a pending delete request; resolve it first")
        raise ConflictError(
            _CONFLICT_MESSAGES.get(action, f"Cannot {action.value} an event that is {status.value}")
        )
    return transition


def apply(event: Event, transition: Transition, ctx: TransitionContext) -> None:
    """Run the transition's effects on ``event`` and move it to the new status."""
    for effect in transition.effects:
        effect(event, ctx)
    if transition.to_status is not None:
        event.status = transition.to_status


# ---------------------------------------------------------------------------
# Creation and invariants
# ---------------------------------------------------------------------------
def check_required(fields: dict[str, Any]) -> None:
    """Raise ValidationError for the first required field that is missing or blank."""
    for name in REQUIRED_FIELDS:
        value = fields.get(name)
        if value is None or (isinstance(value, str) and not value.strip()):
            raise ValidationError(f"Field '{name}' is required", field=name)


def validate_new_event(fields: dict[str, Any]) -> None:
    check_required(fields)


def stamp_creation(event: Event, actor: Actor, now: datetime) -> None:
    """Initial state: published straight away for super-admins, pending otherwise."""
    event.created_by = actor.id
    event.created_at = now
    event.updated_at = now
    event.version = 1
    if actor.is_super_admin:
        event.status = EventStatus.approved
        event.approved_by = actor.id
        event.approved_at = now
    else:
        event.status = EventStatus.pending


def invariant_violations(event: Event) -> list[str]:
    """Return a description of every broken invariant (empty when consistent)."""
    problems = []
    try:
        status = EventStatus(event.status)
    except ValueError:
        return [f"unknown status {event.status!r}"]

    if (event.pending_changes is not None) != (status == EventStatus.pending_edit):
        problems.append("pending_changes must be present iff status is pending_edit")
    has_delete_request = event.delete_requested_by is not None or event.delete_requested_at is not None
    if has_delete_request != (status == EventStatus.pending_delete):
        problems.append("delete request fields must be present iff status is pending_delete")
    if event.approved_by is not None and event.rejected_by is not None:
        problems.append("approved_by and rejected_by are both set")
    if status == EventStatus.rejected and event.rejected_by is None:
        problems.append("rejected event has no rejected_by")
    return problems


def utcnow() -> datetime:
    return datetime.now(timezone.utc)
