"""FastAPI routes for local auth and CareVoiceOS token exchange."""

import logging
from typing import Any

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel

from carevoice_gateway.api.auth import Session
from carevoice_gateway.api.dependencies import Identity, enforce_rate_limit
from carevoice_gateway.models.auth import (
    ApiResponse,
    CareVoiceAuthRequest,
    LoginRequest,
    RegisterRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/auth",
    tags=["auth"],
    dependencies=[Depends(enforce_rate_limit)],
)


def ok(data: BaseModel, message: str | None = None) -> dict[str, Any]:
    """Wrap a payload in the success envelope (camelCase field names)."""
    return ApiResponse(
        message=message,
        data=data.model_dump(mode="json", by_alias=True),
    ).model_dump(exclude_none=True)


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(body: RegisterRequest, identity: Identity) -> dict:
    """Register a new local user."""
    result = await identity.register(body.email, body.password)
    return ok(result, "User registered successfully")


@router.post("/login")
async def login(body: LoginRequest, identity: Identity) -> dict:
    """Log in locally and obtain CareVoiceOS SDK tokens."""
    result = await identity.login(body.email, body.password)
    return ok(result, "Login successful")


@router.post("/carevoice")
async def authenticate_carevoice(body: CareVoiceAuthRequest, identity: Identity) -> dict:
    """Obtain CareVoiceOS SDK tokens for a caller-supplied unique identifier."""
    result = await identity.authenticate_unique_id(body.unique_id)
    return ok(result, "CareVoiceOS authentication successful")


@router.get("/profile")
async def profile(claims: Session, identity: Identity) -> dict:
    """Return the authenticated user's profile."""
    user = await identity.profile(claims)
    return ok(user.profile())
