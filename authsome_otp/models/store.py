"""Storage boundary for OTP records.

Every method takes the caller's ``CallContext`` and must honor it before
touching storage. Timestamps crossing this boundary are Unix epoch seconds.
"""

from abc import ABC, abstractmethod
from typing import Optional

from authsome_otp.context import CallContext
from authsome_otp.models.record import OtpRecord


class OtpStore(ABC):
    @abstractmethod
    def create(self, ctx: CallContext, record: OtpRecord) -> int:
        """Persist ``record`` and return the id assigned to it."""

    @abstractmethod
    def find_by_id(self, ctx: CallContext, record_id: int) -> Optional[OtpRecord]:
        ...

    @abstractmethod
    def find_by_code(self, ctx: CallContext, code: str) -> Optional[OtpRecord]:
        ...

    @abstractmethod
    def find_by_parent(
        self, ctx: CallContext, parent_id: str, parent_source: Optional[str] = None
    ) -> list[OtpRecord]:
        """Records issued for a parent, newest first."""

    @abstractmethod
    def delete_by_id(self, ctx: CallContext, record_id: int) -> None:
        """Delete a record. Deleting an unknown id is not an error."""

    @abstractmethod
    def delete_by_parent(
        self, ctx: CallContext, parent_id: str, parent_source: Optional[str] = None
    ) -> int:
        ...

    @abstractmethod
    def delete_expired_before(self, ctx: CallContext, instant: int) -> int:
        """Delete every record with ``expires_at < instant``; return the count."""
