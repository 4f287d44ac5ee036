from typing import AsyncGenerator

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio.session import AsyncSession
from sqlmodel import select

from kos_market.models.enums.user_role import UserRole
from kos_market.models.user_model import User
from kos_market.schemas.user_schema import Actor
from kos_market.services.user.exceptions import (
    InsufficientRole,
    UserEmailNotFound,
    UserNotAuthenticated,
    UserNotFound,
)

from ..db.database import async_session


async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    async with async_session() as session:
        yield session


async def get_user(request: Request) -> dict:
    # set by the authentication middleware
    user = getattr(request.state, "user", None)
    if not user:
        raise UserNotAuthenticated("User not authenticated.")
    return user


async def get_current_actor(
    session: AsyncSession = Depends(get_async_session),
    user: dict = Depends(get_user),
) -> Actor:
    """Resolves the verified token to the (user id, role) pair of a stored user."""
    email = user.get("email")
    if not email:
        raise UserEmailNotFound("User email not found in token metadata.")

    result = await session.execute(select(User).where(User.email == email))
    db_user = result.scalars().one_or_none()
    if not db_user:
        raise UserNotFound("User not found in the database.")

    return Actor(id=db_user.id, role=db_user.role)


class RequireRole:
    def __init__(self, *roles: UserRole):
        self.roles = roles

    async def __call__(self, actor: Actor = Depends(get_current_actor)) -> Actor:
        if actor.role not in self.roles:
            raise InsufficientRole("Insufficient permissions.")
        return actor


require_admin = RequireRole(UserRole.ADMIN)
