"""Process-local OTP store for development and testing."""

import itertools
import threading
from dataclasses import replace
from typing import Optional

from authsome_otp.context import CallContext
from authsome_otp.metadata import decode_metadata, encode_metadata
from authsome_otp.models.record import OtpRecord
from authsome_otp.models.store import OtpStore


class InMemoryOtpStore(OtpStore):
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._ids = itertools.count(1)
        self._rows: dict[int, tuple[OtpRecord, Optional[str]]] = {}

    def __len__(self) -> int:
        with self._lock:
            return len(self._rows)

    def create(self, ctx: CallContext, record: OtpRecord) -> int:
        ctx.check()
        metadata_json = encode_metadata(record.metadata)
        with self._lock:
            record_id = next(self._ids)
            self._rows[record_id] = (replace(record, id=record_id, metadata=None), metadata_json)
        return record_id

    def find_by_id(self, ctx: CallContext, record_id: int) -> Optional[OtpRecord]:
        ctx.check()
        with self._lock:
            row = self._rows.get(record_id)
        return _decode(row) if row else None

    def find_by_code(self, ctx: CallContext, code: str) -> Optional[OtpRecord]:
        ctx.check()
        with self._lock:
            rows = sorted(self._rows.items())
        for _, row in rows:
            if row[0].code == code:
                return _decode(row)
        return None

    def find_by_parent(
        self, ctx: CallContext, parent_id: str, parent_source: Optional[str] = None
    ) -> list[OtpRecord]:
        ctx.check()
        with self._lock:
            rows = sorted(self._rows.items(), reverse=True)
        return [
            _decode(row)
            for _, row in rows
            if _owned_by(row[0], parent_id, parent_source)
        ]

    def delete_by_id(self, ctx: CallContext, record_id: int) -> None:
        ctx.check()
        with self._lock:
            self._rows.pop(record_id, None)

    def delete_by_parent(
        self, ctx: CallContext, parent_id: str, parent_source: Optional[str] = None
    ) -> int:
        ctx.check()
        with self._lock:
            doomed = [
                record_id
                for record_id, row in self._rows.items()
                if _owned_by(row[0], parent_id, parent_source)
            ]
            for record_id in doomed:
                del self._rows[record_id]
        return len(doomed)

    def delete_expired_before(self, ctx: CallContext, instant: int) -> int:
        ctx.check()
        with self._lock:
            doomed = [
                record_id
                for record_id, row in self._rows.items()
                if row[0].expires_at < instant
            ]
            for record_id in doomed:
                del self._rows[record_id]
        return len(doomed)


def _owned_by(record: OtpRecord, parent_id: str, parent_source: Optional[str]) -> bool:
    if record.parent_id != parent_id:
        return False
    return parent_source is None or record.parent_source == parent_source


def _decode(row: tuple[OtpRecord, Optional[str]]) -> OtpRecord:
    record, metadata_json = row
    return replace(record, metadata=decode_metadata(metadata_json))
