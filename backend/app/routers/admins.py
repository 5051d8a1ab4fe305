"""Admin account API routes: login and super-admin account management."""
import logging
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.auth.deps import get_current_actor, get_current_admin
from app.database import get_db
from app.models.admin import Admin
from app.schemas.admin import AdminCreate, AdminOut, LoginRequest, LoginResponse, MessageOut, PasswordChange
from app.services import admin_service
from app.services.lifecycle import Actor

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/login", response_model=LoginResponse)
def login(payload: LoginRequest, db: Session = Depends(get_db)):
    """Exchange username and password for a bearer token."""
    admin, token = admin_service.authenticate(db, payload.username, payload.password)
    return LoginResponse(token=token, user=AdminOut.model_validate(admin))


@router.get("/me", response_model=AdminOut)
def me(admin: Admin = Depends(get_current_admin)):
    return admin


@router.get("/list", response_model=list[AdminOut])
def list_admins(actor: Actor = Depends(get_current_actor), db: Session = Depends(get_db)):
    return admin_service.list_admins(db, actor)


@router.post("/create", response_model=AdminOut, status_code=201)
def create_admin(payload: AdminCreate, actor: Actor = Depends(get_current_actor), db: Session = Depends(get_db)):
    return admin_service.create_admin(
        db, actor, payload.username, payload.email, payload.password, role=payload.role,
    )


@router.put("/change-password", response_model=MessageOut)
def change_password(payload: PasswordChange, actor: Actor = Depends(get_current_actor), db: Session = Depends(get_db)):
    admin_service.change_password(
        db,
        actor,
        new_password=payload.new_password,
        current_password=payload.current_password,
        target_admin_id=payload.target_admin_id,
    )
    return MessageOut(message="Password changed successfully")


@router.delete("/{admin_id}", response_model=MessageOut)
def delete_admin(admin_id: str, actor: Actor = Depends(get_current_actor), db: Session = Depends(get_db)):
    admin_service.delete_admin(db, actor, admin_id)
    return MessageOut(message="Admin deleted successfully")
