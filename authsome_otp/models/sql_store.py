import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from authsome_otp.context import CallContext
from authsome_otp.database import SessionLocal
from authsome_otp.errors import StorageFailure
from authsome_otp.metadata import decode_metadata, encode_metadata
from authsome_otp.models.db_operation import (
    _add_record,
    _delete_expired_record_,
    _delete_records,
    _select_one_or_none,
    _select_records,
)
from authsome_otp.models.record import OtpRecord
from authsome_otp.models.schema.otp import OtpEntry
from authsome_otp.models.store import OtpStore

LOGGER = logging.getLogger(__name__)

_DB = "otp"

# widest integer any supported backend can store in the id column
_MAX_ID = 2**63 - 1


class SqlOtpStore(OtpStore):
    def __init__(self, factory: sessionmaker = SessionLocal) -> None:
        self._factory = factory

    def create(self, ctx: CallContext, record: OtpRecord) -> int:
        ctx.check()
        metadata_json = encode_metadata(record.metadata)
        try:
            entry = _add_record(
                _DB,
                factory=self._factory,
                code=record.code,
                parent_id=record.parent_id,
                parent_source=record.parent_source,
                metadata_json=metadata_json,
                created_at=record.created_at,
                expires_at=record.expires_at,
            )
        except SQLAlchemyError as exc:
            LOGGER.error("Failed to create OTP record: %s", exc)
            raise StorageFailure("Failed to save OTP") from exc
        return entry.id

    def find_by_id(self, ctx: CallContext, record_id: int) -> Optional[OtpRecord]:
        if not _storable_id(record_id):
            ctx.check()
            return None
        return self._find_one(ctx, id=record_id)

    def find_by_code(self, ctx: CallContext, code: str) -> Optional[OtpRecord]:
        return self._find_one(ctx, code=code)

    def find_by_parent(
        self, ctx: CallContext, parent_id: str, parent_source: Optional[str] = None
    ) -> list[OtpRecord]:
        ctx.check()
        filters = {"parent_id": parent_id}
        if parent_source is not None:
            filters["parent_source"] = parent_source
        try:
            entries = _select_records(
                _DB, factory=self._factory, order_by="id", descending=True, **filters
            )
        except SQLAlchemyError as exc:
            raise StorageFailure("Failed to read OTP records") from exc
        ctx.check()
        return [_to_record(entry) for entry in entries]

    def delete_by_id(self, ctx: CallContext, record_id: int) -> None:
        ctx.check()
        if not _storable_id(record_id):
            return
        try:
            _delete_records(_DB, factory=self._factory, id=record_id)
        except SQLAlchemyError as exc:
            raise StorageFailure("Failed to delete OTP") from exc

    def delete_by_parent(
        self, ctx: CallContext, parent_id: str, parent_source: Optional[str] = None
    ) -> int:
        ctx.check()
        filters = {"parent_id": parent_id}
        if parent_source is not None:
            filters["parent_source"] = parent_source
        try:
            return _delete_records(_DB, factory=self._factory, **filters)
        except SQLAlchemyError as exc:
            raise StorageFailure("Failed to delete OTP records") from exc

    def delete_expired_before(self, ctx: CallContext, instant: int) -> int:
        ctx.check()
        try:
            return _delete_expired_record_(_DB, instant, factory=self._factory)
        except SQLAlchemyError as exc:
            raise StorageFailure("Failed to delete expired OTP records") from exc

    def _find_one(self, ctx: CallContext, **filters) -> Optional[OtpRecord]:
        ctx.check()
        try:
            entry = _select_one_or_none(_DB, factory=self._factory, **filters)
        except SQLAlchemyError as exc:
            raise StorageFailure("Failed to read OTP record") from exc
        ctx.check()
        if entry is None:
            return None
        return _to_record(entry)


def _storable_id(record_id: int) -> bool:
    return -_MAX_ID - 1 <= record_id <= _MAX_ID


def _to_record(entry: OtpEntry) -> OtpRecord:
    return OtpRecord(
        id=entry.id,
        code=entry.code,
        parent_id=entry.parent_id,
        parent_source=entry.parent_source,
        metadata=decode_metadata(entry.metadata_json),
        created_at=entry.created_at,
        expires_at=entry.expires_at,
    )
