from __future__ import annotations

import time
from typing import Optional

import jwt
from fastapi import APIRouter, Depends, Header, HTTPException, status
from passlib.context import CryptContext

from ..config import Settings
from ..db import get_settings, get_storage
from ..errors import DuplicateEntryError
from ..models import ROLE_ADMIN, ROLE_USER, without_password
from ..rate_limit import rate_limit
from ..storage import Storage
from .. import schemas

router = APIRouter()

# Plain bcrypt keeps hashes compatible with accounts created by other bcrypt clients
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


# ----------------
# Helpers
# ----------------
def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    if not password_hash:
        return False
    return pwd_context.verify(password, password_hash)


def create_access_token(*, user: dict, settings: Settings) -> str:
    now = int(time.time())
    payload = {
        "sub": str(user["id"]),
        "email": user["email"],
        "role": user["role"],
        "iat": now,
        "exp": now + settings.JWT_TTL_SECONDS,
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_token(token: str, settings: Settings) -> dict:
    try:
        return jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
            options={"require": ["exp", "sub"]},
        )
    except jwt.InvalidTokenError as exc:
        # Covers bad signatures, malformed tokens, expiry and missing exp/sub
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Invalid token") from exc


def _auth_response(user: dict, settings: Settings) -> schemas.AuthResponse:
    return schemas.AuthResponse(
        user=schemas.UserRead.model_validate(without_password(user)),
        token=create_access_token(user=user, settings=settings),
    )


# ----------------
# Dependencies
# ----------------
def bearer_token_from_auth_header(authorization: Optional[str]) -> str:
    if not authorization:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Access token required")
    parts = authorization.split(" ", 1)
    if len(parts) != 2 or parts[0].lower() != "bearer" or not parts[1].strip():
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Access token required")
    return parts[1].strip()


def get_current_user(
    settings: Settings = Depends(get_settings),
    authorization: Optional[str] = Header(default=None, alias="Authorization"),
) -> schemas.CurrentUser:
    """
    Authenticate the request from its bearer token.

    Stateless: the identity comes from the verified token claims, the store is not consulted.
    - no/malformed header -> 401
    - bad signature, expired or incomplete claims -> 403
    """
    token = bearer_token_from_auth_header(authorization)
    payload = decode_token(token, settings)
    try:
        return schemas.CurrentUser(
            user_id=int(payload["sub"]),
            email=payload["email"],
            role=payload["role"],
        )
    except (KeyError, TypeError, ValueError) as exc:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Invalid token") from exc


def require_admin(user: schemas.CurrentUser = Depends(get_current_user)) -> schemas.CurrentUser:
    if user.role != ROLE_ADMIN:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required")
    return user


# ----------------
# Routes
# ----------------
@router.post(
    "/register",
    response_model=schemas.AuthResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(rate_limit("register"))],
)
def register(
    payload: schemas.UserCreate,
    storage: Storage = Depends(get_storage),
    settings: Settings = Depends(get_settings),
) -> schemas.AuthResponse:
    if storage.get_user_by_email(payload.email) is not None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="User already exists")

    try:
        user = storage.create_user(
            {
                "first_name": payload.first_name,
                "last_name": payload.last_name,
                "email": payload.email,
                "password": hash_password(payload.password),
                "role": ROLE_USER,
            }
        )
    except DuplicateEntryError:
        # Lost a race with a concurrent registration; the unique email index decided
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="User already exists")

    return _auth_response(user, settings)


@router.post("/login", response_model=schemas.AuthResponse, dependencies=[Depends(rate_limit("login"))])
def login(
    payload: schemas.LoginRequest,
    storage: Storage = Depends(get_storage),
    settings: Settings = Depends(get_settings),
) -> schemas.AuthResponse:
    user = storage.get_user_by_email(payload.email)
    if not user or not verify_password(payload.password, user.get("password", "")):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid credentials")
    return _auth_response(user, settings)
