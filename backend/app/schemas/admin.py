"""Pydantic schemas for admin accounts and login."""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel


class LoginRequest(BaseModel):
    username: Optional[str] = None
    password: Optional[str] = None


class AdminOut(BaseModel):
    admin_id: str
    username: str
    email: str
    role: str
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    last_login: Optional[datetime] = None

    model_config = {"from_attributes": True}


class LoginResponse(BaseModel):
    success: bool = True
    token: str
    user: AdminOut
    message: str = "Login successful"


class AdminCreate(BaseModel):
    username: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    role: str = "admin"


class PasswordChange(BaseModel):
    current_password: Optional[str] = None
    new_password: Optional[str] = None
    target_admin_id: Optional[str] = None


class MessageOut(BaseModel):
    success: bool = True
    message: str
