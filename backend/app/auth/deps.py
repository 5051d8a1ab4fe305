"""FastAPI dependencies resolving the bearer token to the acting admin."""
import logging
from typing import Optional

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from app.auth.security import decode_access_token
from app.database import get_db
from app.errors import AuthenticationError
from app.models.admin import Admin
from app.services.lifecycle import Actor

logger = logging.getLogger(__name__)


def get_current_admin(
    authorization: Optional[str] = Header(None),
    db: Session = Depends(get_db),
) -> Admin:
    """Resolve ``Authorization: Bearer <token>`` to a live admin record.

    The role comes from the database, not the token, so demotions apply immediately.
    """
    if not authorization:
        raise AuthenticationError("Access token required")
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token:
        raise AuthenticationError("Access token required")

    payload = decode_access_token(token.strip())
    admin = db.query(Admin).filter(Admin.admin_id == payload["sub"]).first()
    if not admin:
        logger.warning("Token presented for deleted admin %s", payload["sub"])
        raise AuthenticationError("User no longer exists")
    return admin


def get_current_actor(admin: Admin = Depends(get_current_admin)) -> Actor:
    return Actor(id=admin.admin_id, role=admin.role)
