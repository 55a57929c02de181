'''

'''
from typing import Optional
from pydantic import BaseModel, EmailStr, Field
from datetime import datetime

class Token(BaseModel):
    access_token: str
    token_type: str
    expires_at: Optional[datetime] = None

class TokenPayload(BaseModel):
    sub: EmailStr # 'sub' is standard JWT claim for subject (the user's email)
    exp: datetime
    purpose: str = "access"
    pwd: Optional[str] = None # password-hash fingerprint, only on reset tokens

class PasswordResetRequest(BaseModel):
    email: EmailStr

class PasswordResetConfirm(BaseModel):
    token: str
    new_password: str = Field(min_length=8)
