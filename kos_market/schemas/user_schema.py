from pydantic import ConfigDict, EmailStr
from sqlmodel import Field, SQLModel

from kos_market.models.enums.user_role import UserRole


class UserBase(SQLModel):
    model_config = ConfigDict(extra="forbid")
    name: str = Field(min_length=1, max_length=255)
    username: str = Field(unique=True, min_length=1, max_length=255)
    email: EmailStr = Field(unique=True, max_length=255)
    role: UserRole = Field(default=UserRole.RENTER)


# identity resolved by the guard, handed to the lifecycle routes
class Actor(SQLModel):
    model_config = ConfigDict(extra="forbid")
    id: int
    role: UserRole
