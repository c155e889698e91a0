from datetime import datetime, timedelta, timezone
from typing import Optional
from jose import JWTError, jwt
from fastapi import HTTPException, status
from fastapi.security import HTTPBearer
from pydantic import BaseModel
from enum import Enum

from .config import settings

# JWT Security
security = HTTPBearer(auto_error=False)

class HospitalRole(str, Enum):
    PATIENT = "PATIENT"
    STAFF = "STAFF"
    ADMIN = "ADMIN"

class TokenPayload(BaseModel):
    sub: Optional[int] = None  # patient id for patients, doctor id for staff/admin
    email: Optional[str] = None
    role: Optional[HospitalRole] = None
    exp: Optional[int] = None
    token_type: Optional[str] = None  # "access"

# JWT utilities
def create_access_token(
    data: dict,
    expires_delta: Optional[timedelta] = None
) -> str:
    """Create JWT access token.

    Tokens are normally issued by the identity service; this helper exists
    for local tooling and tests that need a token the API will accept.
    """
    to_encode = data.copy()

    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(
            minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES
        )

    # python-jose requires a string subject
    if "sub" in to_encode:
        to_encode["sub"] = str(to_encode["sub"])
    if isinstance(to_encode.get("role"), HospitalRole):
        to_encode["role"] = to_encode["role"].value

    to_encode.update({
        "exp": expire,
        "token_type": "access"
    })

    encoded_jwt = jwt.encode(
        to_encode,
        settings.SECRET_KEY,
        algorithm=settings.ALGORITHM
    )
    return encoded_jwt

def verify_token(token: str) -> Optional[TokenPayload]:
    """Verify and decode JWT token."""
    try:
        payload = jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=[settings.ALGORITHM]
        )

        return TokenPayload(**payload)

    except (JWTError, ValueError):
        return None

# Security exceptions
class AuthenticationError(HTTPException):
    def __init__(self, detail: str = "Could not validate credentials"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )

class AuthorizationError(HTTPException):
    def __init__(self, detail: str = "Not enough permissions"):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=detail,
        )
