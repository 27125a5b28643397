"""i-Haru Database Models."""

from iharu.models.user import ChildProfile, Family, User
from iharu.models.schedule import Recurrence, Schedule
from iharu.models.preparation import Preparation
from iharu.models.message import Message, MessageRead
from iharu.models.reset_token import PasswordResetToken

__all__ = [
    "Family",
    "User",
    "ChildProfile",
    "Schedule",
    "Recurrence",
    "Preparation",
    "Message",
    "MessageRead",
    "PasswordResetToken",
]
