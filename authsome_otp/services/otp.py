"""OTP lifecycle: issue, fetch with lazy expiry, validate, and sweep.

Expiry is checked against absolute epoch-second instants. A fetch that finds
an expired record deletes it on the spot, and ``sweep_expired`` removes the
records nobody reads again. Both paths go through the store's idempotent
deletes, so they can run concurrently without extra locking.
"""

import hmac
import logging
import secrets
import time
from typing import Any, Callable, Mapping, Optional

from authsome_otp.config import settings
from authsome_otp.context import CallContext, ensure_context
from authsome_otp.errors import (
    CodeMismatch,
    OtpError,
    ParentMismatch,
    RecordExpired,
    RecordNotFound,
    ValidationFailed,
)
from authsome_otp.models.record import OtpRecord
from authsome_otp.models.store import OtpStore
from authsome_otp.services.generator import GeneratorOptions, RandomSource, generate_otp

LOGGER = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 300

Clock = Callable[[], int]


def _epoch_now() -> int:
    return int(time.time())


class OtpService:
    def __init__(
        self,
        store: OtpStore,
        default_ttl_seconds: int = DEFAULT_TTL_SECONDS,
        clock: Clock = _epoch_now,
        random_source: RandomSource = secrets.randbelow,
    ) -> None:
        if default_ttl_seconds <= 0:
            raise ValueError("default_ttl_seconds must be positive")
        self._store = store
        self._default_ttl_seconds = default_ttl_seconds
        self._clock = clock
        self._random_source = random_source

    @property
    def default_ttl_seconds(self) -> int:
        return self._default_ttl_seconds

    def issue(
        self,
        code: str,
        parent_source: str,
        parent_id: str,
        metadata: Optional[Mapping[str, Any]] = None,
        ttl_seconds: int = 0,
        ctx: Optional[CallContext] = None,
    ) -> int:
        ctx = ensure_context(ctx)
        ctx.check()
        if ttl_seconds <= 0:
            ttl_seconds = self._default_ttl_seconds
        now = self._clock()
        record = OtpRecord(
            code=code,
            parent_source=parent_source,
            parent_id=parent_id,
            metadata=dict(metadata) if isinstance(metadata, Mapping) else metadata,
            created_at=now,
            expires_at=now + ttl_seconds,
        )
        record_id = self._store.create(ctx, record)
        LOGGER.info(
            "Issued OTP %s for %s (ttl=%ss)", record_id, parent_source, ttl_seconds
        )
        return record_id

    def generate_and_issue(
        self,
        options: GeneratorOptions,
        parent_source: str,
        parent_id: str,
        metadata: Optional[Mapping[str, Any]] = None,
        ttl_seconds: int = 0,
        ctx: Optional[CallContext] = None,
    ) -> tuple[int, str]:
        code = generate_otp(options, self._random_source)
        record_id = self.issue(code, parent_source, parent_id, metadata, ttl_seconds, ctx)
        return record_id, code

    def fetch(self, record_id: int, ctx: Optional[CallContext] = None) -> OtpRecord:
        ctx = ensure_context(ctx)
        ctx.check()
        record = self._store.find_by_id(ctx, record_id)
        if record is None:
            raise RecordNotFound(f"OTP {record_id} not found")
        self._expire_if_stale(ctx, record)
        return record

    def find_by_code(self, code: str, ctx: Optional[CallContext] = None) -> OtpRecord:
        ctx = ensure_context(ctx)
        ctx.check()
        record = self._store.find_by_code(ctx, code)
        if record is None:
            raise RecordNotFound("OTP not found")
        self._expire_if_stale(ctx, record)
        return record

    def validate(
        self,
        record_id: int,
        code: str,
        parent_source: str,
        parent_id: str,
        ctx: Optional[CallContext] = None,
    ) -> OtpRecord:
        try:
            record = self.fetch(record_id, ctx)
        except (RecordNotFound, RecordExpired) as exc:
            LOGGER.warning("OTP validation failed: not found or expired")
            raise ValidationFailed("OTP not found or expired") from exc

        if not hmac.compare_digest(
            record.code.encode("utf-8", "surrogatepass"),
            code.encode("utf-8", "surrogatepass"),
        ):
            LOGGER.warning("OTP validation failed: code mismatch for %s", record_id)
            raise CodeMismatch("OTP mismatch")

        if not record.matches_parent(parent_source, parent_id):
            LOGGER.warning("OTP validation failed: parent mismatch for %s", record_id)
            raise ParentMismatch("Invalid parent mismatch")

        return record

    def revoke(self, record_id: int, ctx: Optional[CallContext] = None) -> None:
        ctx = ensure_context(ctx)
        ctx.check()
        self._store.delete_by_id(ctx, record_id)

    def revoke_for_parent(
        self, parent_source: str, parent_id: str, ctx: Optional[CallContext] = None
    ) -> int:
        ctx = ensure_context(ctx)
        ctx.check()
        return self._store.delete_by_parent(ctx, parent_id, parent_source)

    def find_active_for_parent(
        self, parent_source: str, parent_id: str, ctx: Optional[CallContext] = None
    ) -> list[OtpRecord]:
        ctx = ensure_context(ctx)
        ctx.check()
        now = self._clock()
        records = self._store.find_by_parent(ctx, parent_id, parent_source)
        return [record for record in records if not record.is_expired(now)]

    def sweep_expired(
        self, now: Optional[int] = None, ctx: Optional[CallContext] = None
    ) -> int:
        ctx = ensure_context(ctx)
        ctx.check()
        if now is None:
            now = self._clock()
        deleted = self._store.delete_expired_before(ctx, now)
        if deleted:
            LOGGER.info("Swept %s expired OTP records", deleted)
        return deleted

    def _expire_if_stale(self, ctx: CallContext, record: OtpRecord) -> None:
        if not record.is_expired(self._clock()):
            return
        try:
            self._store.delete_by_id(ctx, record.id)
        except OtpError as exc:
            LOGGER.warning("Failed to delete expired OTP %s: %s", record.id, exc)
        else:
            LOGGER.debug("Deleted expired OTP %s on read", record.id)
        raise RecordExpired(f"OTP {record.id} expired")


def build_service(store: OtpStore) -> OtpService:
    return OtpService(store, default_ttl_seconds=settings.otp_default_ttl_seconds)
