# app/models/__init__.py

from models.registered_user import RegisteredUser
from models.friendship import Friendship
from models.status_update import StatusUpdate

__all__ = ["RegisteredUser", "Friendship", "StatusUpdate"]
