from dataclasses import dataclass
from typing import Any, Optional


@dataclass(frozen=True)
class OtpRecord:
    """A stored one-time passcode bound to a parent identity.

    Timestamps are Unix epoch seconds. ``id`` is None until the store assigns
    one on create.
    """

    code: str
    parent_source: str
    parent_id: str
    created_at: int
    expires_at: int
    metadata: Optional[dict[str, Any]] = None
    id: Optional[int] = None

    def is_expired(self, now: int) -> bool:
        return now > self.expires_at

    def matches_parent(self, parent_source: str, parent_id: str) -> bool:
        return self.parent_source == parent_source and self.parent_id == parent_id
