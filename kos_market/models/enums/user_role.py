from enum import Enum


class UserRole(str, Enum):
    ADMIN = "ADMIN"
    SELLER = "SELLER"
    RENTER = "RENTER"
