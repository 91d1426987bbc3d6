"""Firebase JWT verification and request principals."""

import hashlib
from typing import Any, Optional

import firebase_admin
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from firebase_admin import auth, credentials
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from passport.core.config import get_settings
from passport.core.database import get_db
from passport.policies.roles import UserSession, is_admin

settings = get_settings()

security = HTTPBearer()
optional_security = HTTPBearer(auto_error=False)


def _ensure_firebase_app() -> None:
    """Initialize the Firebase Admin SDK once per process."""
    if firebase_admin._apps:
        return
    if settings.google_application_credentials:
        cred = credentials.Certificate(settings.google_application_credentials)
        firebase_admin.initialize_app(cred, {"projectId": settings.firebase_project_id})
    else:
        firebase_admin.initialize_app(options={"projectId": settings.firebase_project_id})


class AuthenticatedUser:
    """Represents an authenticated user from Firebase JWT."""

    def __init__(
        self,
        uid: str,
        email: Optional[str] = None,
        email_verified: bool = False,
        claims: Optional[dict[str, Any]] = None,
    ):
        self.uid = uid
        self.email = email
        self.email_verified = email_verified
        self.claims = claims or {}


def _verify_token(token: str) -> AuthenticatedUser:
    _ensure_firebase_app()
    try:
        decoded_token = auth.verify_id_token(token)
    except auth.ExpiredIdTokenError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token has expired",
            headers={"WWW-Authenticate": "Bearer"},
        )
    except auth.InvalidIdTokenError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    except Exception as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Token verification failed: {str(e)}",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return AuthenticatedUser(
        uid=decoded_token["uid"],
        email=decoded_token.get("email"),
        email_verified=decoded_token.get("email_verified", False),
        claims=decoded_token,
    )


async def verify_firebase_token(
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> AuthenticatedUser:
    """Verify Firebase JWT and return authenticated user.

    This service NEVER mints JWTs - it only verifies tokens issued by Firebase.
    """
    return _verify_token(credentials.credentials)


async def verify_optional_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(optional_security),
) -> Optional[AuthenticatedUser]:
    """Like verify_firebase_token, but anonymous requests yield None."""
    if credentials is None:
        return None
    return _verify_token(credentials.credentials)


async def _load_session(auth_user: AuthenticatedUser, db: AsyncSession) -> UserSession:
    from passport.models.user import User
    from passport.services.sessions import build_user_session

    result = await db.execute(select(User).where(User.firebase_uid == auth_user.uid))
    user = result.scalar_one_or_none()

    if user is None:
        if not auth_user.email:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Account email required",
            )
        # First sign-in: provision the account row
        user = User(
            firebase_uid=auth_user.uid,
            email=auth_user.email.lower(),
            full_name=auth_user.claims.get("name"),
        )
        db.add(user)
        await db.commit()
        await db.refresh(user)

    return await build_user_session(db, user)


async def get_current_user(
    auth_user: AuthenticatedUser = Depends(verify_firebase_token),
    db: AsyncSession = Depends(get_db),
) -> UserSession:
    """Resolve the caller's session: account row plus live property roles."""
    return await _load_session(auth_user, db)


async def get_optional_user(
    auth_user: Optional[AuthenticatedUser] = Depends(verify_optional_token),
    db: AsyncSession = Depends(get_db),
) -> Optional[UserSession]:
    if auth_user is None:
        return None
    return await _load_session(auth_user, db)


def require_admin(
    current_user: UserSession = Depends(get_current_user),
) -> UserSession:
    """Require a system administrator."""
    if not is_admin(current_user):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin privileges required",
        )
    return current_user


def compute_file_hash(content: bytes) -> str:
    """Compute SHA-256 hash of file content."""
    return hashlib.sha256(content).hexdigest()
