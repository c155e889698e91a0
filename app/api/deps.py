from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from typing import List, Optional

from ..core.database import get_db, get_redis
from ..core.security import (
    security, verify_token, AuthenticationError,
    AuthorizationError, HospitalRole, TokenPayload
)
from ..repositories.appointments import SqlAppointmentStore
from ..repositories.directory import SqlDirectoryStore
from ..services.access import CallerContext, caller_from_token
from ..services.appointment_service import AppointmentService
from ..services.slot_lock import SlotLock

async def get_current_user_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> TokenPayload:
    """Extract and verify JWT token from Authorization header."""
    if credentials is None:
        raise AuthenticationError("Not authenticated")

    token_payload = verify_token(credentials.credentials)
    if not token_payload:
        raise AuthenticationError("Invalid or expired token")

    # Check if token is access token
    if token_payload.token_type != "access":
        raise AuthenticationError("Invalid token type")

    return token_payload

async def get_caller(
    token_payload: TokenPayload = Depends(get_current_user_token)
) -> CallerContext:
    """Resolve the verified token into the caller's context."""
    if token_payload.sub is None or token_payload.role is None:
        raise AuthenticationError("Invalid token payload")

    return caller_from_token(token_payload.role, token_payload.sub)

# Role-based access control dependencies
def require_role(allowed_roles: List[HospitalRole]):
    """Create a dependency that requires specific caller roles."""
    async def role_checker(
        caller: CallerContext = Depends(get_caller)
    ) -> CallerContext:
        if caller.role not in allowed_roles:
            raise AuthorizationError(
                f"Access denied. Required roles: {[role.value for role in allowed_roles]}"
            )
        return caller

    return role_checker

get_staff_caller = require_role([HospitalRole.STAFF, HospitalRole.ADMIN])

# Store and service wiring, one set per request session
def get_directory_store(db: Session = Depends(get_db)) -> SqlDirectoryStore:
    return SqlDirectoryStore(db)

def get_appointment_store(db: Session = Depends(get_db)) -> SqlAppointmentStore:
    return SqlAppointmentStore(db)

def get_slot_lock(redis_client = Depends(get_redis)) -> SlotLock:
    return SlotLock(redis_client)

def get_appointment_service(
    directory: SqlDirectoryStore = Depends(get_directory_store),
    appointments: SqlAppointmentStore = Depends(get_appointment_store),
    slot_lock: SlotLock = Depends(get_slot_lock),
) -> AppointmentService:
    return AppointmentService(directory, appointments, slot_lock)
