from enum import Enum


# https://github.com/fastapi/sqlmodel/issues/96#issuecomment-921179607
class ListingState(str, Enum):
    ACTIVE = "active"
    # soft deleted, can be restored
    ARCHIVED = "archived"
    # terminal, rows are gone
    DELETED = "deleted"
