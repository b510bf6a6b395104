from fastapi import Depends, HTTPException, status, Request
from fastapi.security import HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.database import get_db, get_redis
from ..core.security import (
    security, verify_token, authorize, AuthenticationError,
    AuthorizationError, UserRole, TokenPayload
)
from ..models.user import User

async def get_current_user_token(
    credentials: HTTPAuthorizationCredentials = Depends(security)
) -> TokenPayload:
    """Extract and verify JWT token from Authorization header."""
    token_payload = verify_token(credentials.credentials)
    if not token_payload:
        raise AuthenticationError("Invalid or expired token")

    if token_payload.token_type != "access":
        raise AuthenticationError("Invalid token type")

    return token_payload

async def get_current_user(
    token_payload: TokenPayload = Depends(get_current_user_token),
    db: Session = Depends(get_db)
) -> User:
    """Get current authenticated user from database."""
    if not token_payload.sub:
        raise AuthenticationError("Invalid token payload")

    user = db.get(User, token_payload.sub)
    if not user:
        raise AuthenticationError("User not found")

    if not user.is_active:
        raise AuthenticationError("User account is deactivated")

    return user

# Role-based access control dependencies
def require_role(required_role: UserRole):
    """Create a dependency that requires at least ``required_role``."""
    async def role_checker(
        current_user: User = Depends(get_current_user)
    ) -> User:
        if not authorize(current_user.role, required_role):
            raise AuthorizationError(
                f"Access denied. Required role: {required_role.value}"
            )
        return current_user

    return role_checker

# Specific role dependencies
async def get_admin_user(
    current_user: User = Depends(require_role(UserRole.ADMIN))
) -> User:
    """Require admin role."""
    return current_user

async def get_secretary_user(
    current_user: User = Depends(require_role(UserRole.SECRETARY))
) -> User:
    """Require secretary role or above."""
    return current_user

# Rate limiting dependency
async def rate_limit_check(
    request: Request,
    redis_client = Depends(get_redis)
) -> None:
    """Basic rate limiting for the login endpoint."""
    client_ip = request.client.host if request.client else "unknown"
    key = f"rate_limit:{client_ip}"

    current_requests = redis_client.get(key)
    if current_requests is None:
        redis_client.setex(key, 3600, 1)  # one hour window
    else:
        if int(current_requests) >= settings.LOGIN_RATE_LIMIT:
            raise HTTPException(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                detail="Too many requests. Please try again later."
            )
        redis_client.incr(key)
