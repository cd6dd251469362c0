from datetime import datetime, timedelta, timezone
from typing import Iterator

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from jobtracker.core.config import get_settings
from jobtracker.core.database import SessionFactory, get_engine
from jobtracker.features.tracking.users import register_user

# Configure OAuth2
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="token")
ACCESS_TOKEN_EXPIRE_MINUTES = 30


def get_db() -> Iterator[Session]:
    """Get a database session for one request"""
    get_engine()
    db = SessionFactory()
    try:
        yield db
    finally:
        db.close()


def create_access_token(user_id: str, expires_in_minutes: int = ACCESS_TOKEN_EXPIRE_MINUTES) -> str:
    """Issue a signed token for ``user_id`` (used by tooling and tests)"""
    settings = get_settings()
    expire = datetime.now(timezone.utc) + timedelta(minutes=expires_in_minutes)
    payload = {"sub": user_id, "exp": expire}
    return jwt.encode(payload, settings.secret_key, algorithm=settings.jwt_algorithm)


def verify_token(token: str = Depends(oauth2_scheme)) -> dict:
    """Verify JWT token and return decoded payload"""
    settings = get_settings()
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])
    except jwt.PyJWTError:
        raise credentials_exception
    if not payload.get("sub"):
        raise credentials_exception
    return payload


def get_current_user(payload: dict = Depends(verify_token)) -> str:
    """Get current authenticated user id from token payload"""
    return str(payload["sub"])


def get_acting_user(
    user_id: str = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> str:
    """Resolve the acting user, provisioning it on first sight"""
    register_user(db, user_id)
    return user_id
