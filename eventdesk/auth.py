"""Request principal passed from the HTTP layer into services."""

import enum
from dataclasses import dataclass


class Role(str, enum.Enum):
    """User roles issued by the identity provider."""

    USER = "user"
    EVENT_ORGANIZER = "eventOrganizer"
    ADMIN = "admin"


@dataclass(frozen=True)
class Principal:
    """Authenticated caller."""

    user_id: str
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN

    @property
    def is_organizer(self) -> bool:
        return self.role is Role.EVENT_ORGANIZER
