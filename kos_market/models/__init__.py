from .content_model import Content
from .listing_model import Listing
from .user_model import User

__all__ = ["Content", "Listing", "User"]
