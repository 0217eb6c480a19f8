from pydantic import BaseModel, EmailStr, Field
from typing import Optional
from datetime import datetime

class PlayerSummary(BaseModel):
    """Player fields embedded in match rows through the users foreign keys."""
    id: str
    username: Optional[str] = None
    game_id: Optional[str] = None

    class Config:
        from_attributes = True

class UserRead(BaseModel):
    id: str
    email: str
    username: Optional[str] = None
    wallet_balance: float = 0
    game_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class RegisterForm(BaseModel):
    username: str = Field(..., min_length=3, description="Username must be at least 3 characters")
    email: EmailStr
    password: str = Field(..., min_length=6, description="Password must be at least 6 characters")

class LoginForm(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)
