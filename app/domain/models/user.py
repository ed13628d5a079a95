"""User contact record resolved when notifying about subscriptions."""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(slots=True)
class User:
    """
    User entity as seen by this service.

    Attributes:
        id: User ID issued by the auth service
        email: Contact address, may be empty for partially onboarded accounts
        first_name: Given name
        last_name: Family name
        created_at: Record creation timestamp
    """

    id: str
    email: Optional[str]
    first_name: str
    last_name: str
    created_at: Optional[datetime] = None

    def __repr__(self) -> str:
        return f"<User id={self.id} email={self.email}>"
