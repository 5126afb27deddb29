"""
Account registration, cookie sessions and the auth dependencies used by routes.

Sessions are Starlette's signed-cookie sessions; only the user id is stored
in them. Passwords are hashed with argon2.
"""

from __future__ import annotations

import logging
from typing import Optional

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError
from fastapi import APIRouter, Depends, HTTPException, Request, status

from blog_backend.config import get_settings
from blog_backend.db import DbClient, NewUser, UserRecord
from blog_backend.dependencies import get_db_client
from blog_backend.schemas import (
    LoginRequest,
    LoginResponse,
    MessageResponse,
    ProfileUpdate,
    RegisterRequest,
    UserResponse,
)

logger = logging.getLogger(__name__)

SESSION_USER_KEY = "user_id"

_hasher = PasswordHasher()

router = APIRouter(prefix="/auth")


def hash_password(password: str) -> str:
    return _hasher.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return _hasher.verify(password_hash, password)
    except (VerificationError, InvalidHashError):
        return False


def user_response(user: UserRecord) -> UserResponse:
    return UserResponse(**user.public_dict())


def get_optional_user(
    request: Request, db: DbClient = Depends(get_db_client)
) -> Optional[UserRecord]:
    user_id = request.session.get(SESSION_USER_KEY)
    if user_id is None:
        return None
    user = db.get_user_by_id(user_id)
    if user is None:
        # Account was removed while the session cookie was still alive.
        request.session.clear()
    return user


def get_current_user(
    user: Optional[UserRecord] = Depends(get_optional_user),
) -> UserRecord:
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")
    return user


def require_admin(user: UserRecord = Depends(get_current_user)) -> UserRecord:
    if not user.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin role required")
    return user


def ensure_owner_or_admin(user: UserRecord, owner_id: Optional[int], what: str) -> None:
    if user.is_admin or (owner_id is not None and owner_id == user.id):
        return
    raise HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail=f"Only the owner or an admin can modify this {what}",
    )


def ensure_admin_user(db: DbClient, username: str, email: str, password: str) -> UserRecord:
    """
    Create ``username`` as an admin, or promote it if the account exists.

    Used by the seed script so an operator can claim the admin account before
    the API is exposed. The password of an existing account is left alone.
    """
    user = db.get_user_by_username(username)
    if user is None:
        user = db.create_user(
            NewUser(
                username=username,
                email=email,
                password_hash=hash_password(password),
                role="admin",
            )
        )
        logger.info("Created admin user %s", username)
    elif not user.is_admin:
        user = db.update_user(user.id, {"role": "admin"})
        logger.warning("Promoted existing user %s to admin", username)
    return user


@router.post("/register", response_model=UserResponse, status_code=201)
def register(payload: RegisterRequest, db: DbClient = Depends(get_db_client)):
    if db.get_user_by_username(payload.username):
        raise HTTPException(status_code=400, detail="Username already taken")
    if db.get_user_by_email(payload.email):
        raise HTTPException(status_code=400, detail="Email already registered")

    settings = get_settings()
    role = "admin" if payload.username in settings.admin_usernames else "user"
    if role == "admin":
        logger.warning(
            "Username %s is listed in admin_usernames; registering it as admin",
            payload.username,
        )
    user = db.create_user(
        NewUser(
            username=payload.username,
            email=payload.email,
            password_hash=hash_password(payload.password),
            display_name=payload.display_name,
            profile_image=payload.profile_image,
            bio=payload.bio,
            role=role,
        )
    )
    logger.info("Registered user %s (role=%s)", user.username, user.role)
    return user_response(user)


@router.post("/login", response_model=LoginResponse)
def login(
    payload: LoginRequest,
    request: Request,
    db: DbClient = Depends(get_db_client),
):
    user = db.get_user_by_username(payload.username)
    if not user or not verify_password(payload.password, user.password_hash):
        logger.info("Failed login for %s", payload.username)
        raise HTTPException(status_code=401, detail="Invalid username or password")

    request.session.clear()
    request.session[SESSION_USER_KEY] = user.id
    return LoginResponse(user=user_response(user))


@router.post("/logout", response_model=MessageResponse)
def logout(request: Request):
    request.session.clear()
    return MessageResponse(message="Logged out successfully")


@router.get("/me", response_model=UserResponse)
def me(user: UserRecord = Depends(get_current_user)):
    return user_response(user)


@router.patch("/me", response_model=UserResponse)
def update_me(
    payload: ProfileUpdate,
    user: UserRecord = Depends(get_current_user),
    db: DbClient = Depends(get_db_client),
):
    changes = payload.changes(exclude=frozenset({"password"}))
    if payload.password is not None:
        changes["password_hash"] = hash_password(payload.password)
    if "email" in changes:
        existing = db.get_user_by_email(changes["email"])
        if existing and existing.id != user.id:
            raise HTTPException(status_code=400, detail="Email already registered")
    updated = db.update_user(user.id, changes)
    if updated is None:
        raise HTTPException(status_code=404, detail="User not found")
    return user_response(updated)
