"""Admin accounts: login, creation, password changes and removal."""
import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from app.auth.security import create_access_token, hash_password, verify_password
from app.config import settings
from app.errors import AuthenticationError, NotFoundError, ValidationError
from app.models.admin import Admin, Role
from app.services import lifecycle
from app.services.lifecycle import Actor, Capability

logger = logging.getLogger(__name__)


def authenticate(db: Session, username: Optional[str], password: Optional[str]) -> tuple[Admin, str]:
    """Check credentials and return the admin with a fresh bearer token."""
    if not username or not password:
        raise ValidationError("Username and password required")

    admin = db.query(Admin).filter(Admin.username == username).first()
    if not admin or not verify_password(password, admin.password_hash):
        raise AuthenticationError("Invalid credentials")

    admin.last_login = datetime.now(timezone.utc)
    db.commit()
    db.refresh(admin)
    logger.info("Login successful: %s (role %s)", admin.username, admin.role.value)
    return admin, create_access_token(admin)


def get_admin(db: Session, admin_id: str) -> Admin:
    admin = db.query(Admin).filter(Admin.admin_id == admin_id).first()
    if not admin:
        raise NotFoundError("Admin", admin_id)
    return admin


def list_admins(db: Session, actor: Actor) -> list[Admin]:
    lifecycle.authorize(actor, Capability.manage_admins)
    return db.query(Admin).order_by(Admin.created_at.desc()).all()


def create_admin(
    db: Session,
    actor: Optional[Actor],
    username: Optional[str],
    email: Optional[str],
    password: Optional[str],
    role: str = "admin",
) -> Admin:
    """Create an admin account. ``actor`` is None only for the startup bootstrap."""
    if actor is not None:
        lifecycle.authorize(actor, Capability.manage_admins)
    for name, value in (("username", username), ("email", email), ("password", password)):
        if not value:
            raise ValidationError("Username, email, and password required", field=name)
    try:
        role_value = Role(role or Role.admin.value)
    except ValueError as exc:
        raise ValidationError(f"Unknown role '{role}'", field="role") from exc

    existing = db.query(Admin).filter(or_(Admin.username == username, Admin.email == email)).first()
    if existing:
        raise ValidationError("Username or email already exists")

    admin = Admin(
        username=username,
        email=email,
        password_hash=hash_password(password),
        role=role_value,
        created_by=actor.id if actor else None,
        created_at=datetime.now(timezone.utc),
    )
    db.add(admin)
    db.commit()
    db.refresh(admin)
    logger.info("Created admin %s (%s) with role %s", admin.username, admin.admin_id, admin.role.value)
    return admin


def change_password(
    db: Session,
    actor: Actor,
    new_password: Optional[str],
    current_password: Optional[str] = None,
    target_admin_id: Optional[str] = None,
) -> Admin:
    """Change the actor's own password, or (super-admins only) reset another admin's."""
    if not new_password:
        raise ValidationError("New password required", field="new_password")

    if target_admin_id and target_admin_id != actor.id:
        lifecycle.authorize(actor, Capability.manage_admins)
        admin = get_admin(db, target_admin_id)
    else:
        if not current_password:
            raise ValidationError("Current password required", field="current_password")
        admin = get_admin(db, actor.id)
        if not verify_password(current_password, admin.password_hash):
            raise AuthenticationError("Current password is incorrect")

    admin.password_hash = hash_password(new_password)
    db.commit()
    logger.info("Password changed for admin %s by %s", admin.admin_id, actor.id)
    return admin


def delete_admin(db: Session, actor: Actor, admin_id: str) -> None:
    lifecycle.authorize(actor, Capability.manage_admins)
    if admin_id == actor.id:
        raise ValidationError("Cannot delete your own account")
    admin = get_admin(db, admin_id)
    db.delete(admin)
    db.commit()
    logger.info("Deleted admin %s by %s", admin_id, actor.id)


def ensure_bootstrap_superadmin(db: Session) -> Optional[Admin]:
    """Create the configured super-admin on first start; no-op when unset or present."""
    username = settings.BOOTSTRAP_SUPERADMIN_USERNAME
    if not username or not settings.BOOTSTRAP_SUPERADMIN_PASSWORD:
        return None
    existing = db.query(Admin).filter(Admin.username == username).first()
    if existing:
        return existing
    return create_admin(
        db,
        actor=None,
        username=username,
        email=settings.BOOTSTRAP_SUPERADMIN_EMAIL or f"{username}@localhost",
        password=settings.BOOTSTRAP_SUPERADMIN_PASSWORD,
        role=Role.super_admin.value,
    )
