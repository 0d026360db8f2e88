"""Account endpoints — register, login, profile."""

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from watchlist.api.schemas import (
    AuthResponse, LoginRequest, RegisterRequest, UpdateUserRequest, UserOut,
)
from watchlist.database import get_db
from watchlist.errors import DuplicateEmail, DuplicateUsername, Unauthenticated, UserNotFound
from watchlist.services.users import UserService

router = APIRouter(prefix="/auth")


def _get_service(db: AsyncSession = Depends(get_db)) -> UserService:
    return UserService(db)


def _failure(message: str) -> JSONResponse:
    body = AuthResponse(success=False, message=message, user=None)
    return JSONResponse(status_code=400, content=body.model_dump(mode="json", by_alias=True))


@router.post("/register", response_model=AuthResponse)
async def register(req: RegisterRequest, users: UserService = Depends(_get_service)):
    """Create an account. Username conflicts are reported before email conflicts."""
    try:
        user = await users.register(
            req.username, req.email, req.password, req.first_name, req.last_name,
        )
    except (DuplicateUsername, DuplicateEmail) as e:
        return _failure(e.message)

    return AuthResponse(success=True, message="Registration successful", user=UserOut.model_validate(user))


@router.post("/login", response_model=AuthResponse)
async def login(req: LoginRequest, users: UserService = Depends(_get_service)):
    try:
        user = await users.login(req.username, req.password)
    except Unauthenticated as e:
        return _failure(e.message)

    return AuthResponse(success=True, message="Login successful", user=UserOut.model_validate(user))


@router.get("/user/{user_id}", response_model=UserOut)
async def get_user(user_id: int, users: UserService = Depends(_get_service)):
    try:
        return await users.get(user_id)
    except UserNotFound as e:
        raise HTTPException(404, e.message)


@router.put("/user/{user_id}", response_model=UserOut)
async def update_user(
    user_id: int,
    req: UpdateUserRequest,
    users: UserService = Depends(_get_service),
):
    try:
        return await users.update_profile(user_id, req.first_name, req.last_name, req.email)
    except UserNotFound as e:
        return _failure(e.message)
    except IntegrityError:
        await users.db.rollback()
        return _failure(DuplicateEmail.message)


@router.delete("/user/{user_id}")
async def delete_user(user_id: int, users: UserService = Depends(_get_service)) -> bool:
    """Delete an account and every watchlist item it owns."""
    return await users.delete_user(user_id)
