"""Domain models for the SMS food logger."""

from dataclasses import dataclass
from uuid import UUID


@dataclass(frozen=True)
class UserRecord:
    """Represents a user resolved from a phone number."""

    id: UUID
    phone: str
