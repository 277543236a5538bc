from typing import Optional

from pydantic import BaseModel


class RegisterRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None


class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class TokenRequest(BaseModel):
    token: Optional[str] = None


class EmailRequest(BaseModel):
    email: Optional[str] = None


class ResetPasswordRequest(BaseModel):
    token: Optional[str] = None
    new_password: Optional[str] = None
