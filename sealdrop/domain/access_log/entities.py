"""
Access Log Entities

Immutable audit records of access to shared files.
"""

import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..file_sharing.value_objects import AccessType, Actor


@dataclass(frozen=True)
class AccessLogEntry:
    """
    One audited access (upload, view or download) of a shared file.

    Entries are never updated; they disappear only when their file record
    is deleted.
    """
    id: str
    file_id: str
    access_type: AccessType
    accessed_at: datetime
    actor_address: str = ""
    actor_agent: str = ""

    @classmethod
    def create(
        cls,
        file_id: str,
        access_type: AccessType,
        actor: Optional[Actor] = None,
        now: Optional[datetime] = None,
    ) -> "AccessLogEntry":
        actor = actor or Actor()
        return cls(
            id=uuid.uuid4().hex,
            file_id=file_id,
            access_type=access_type,
            accessed_at=now or datetime.utcnow(),
            actor_address=actor.address or "",
            actor_agent=actor.agent or "",
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "file_id": self.file_id,
            "access_type": self.access_type.value,
            "accessed_at": self.accessed_at.isoformat(),
            "actor_address": self.actor_address,
            "actor_agent": self.actor_agent,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "AccessLogEntry":
        return cls(
            id=data["id"],
            file_id=data["file_id"],
            access_type=AccessType(data["access_type"]),
            accessed_at=datetime.fromisoformat(data["accessed_at"]),
            actor_address=data.get("actor_address", ""),
            actor_agent=data.get("actor_agent", ""),
        )

    def to_public_dict(self) -> dict:
        """Shape returned to the file owner by the API."""
        return {
            "id": self.id,
            "accessType": self.access_type.value,
            "ipAddress": self.actor_address,
            "userAgent": self.actor_agent,
            "accessedAt": self.accessed_at.isoformat(),
        }
