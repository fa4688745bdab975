from __future__ import annotations

import threading
import time
from typing import Optional

from authsome_otp.errors import Cancelled


class CallContext:
    """Cancellation and deadline signal carried through every store call.

    A context may be cancelled explicitly from another thread or expire once
    its timeout elapses. ``check()`` raises ``Cancelled`` in either case.
    """

    def __init__(self, timeout: Optional[float] = None) -> None:
        self._cancelled = threading.Event()
        self._deadline: Optional[float] = None
        if timeout is not None:
            self._deadline = time.monotonic() + timeout

    @classmethod
    def background(cls) -> "CallContext":
        return cls()

    def cancel(self) -> None:
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    @property
    def timed_out(self) -> bool:
        return self._deadline is not None and time.monotonic() >= self._deadline

    def check(self) -> None:
        if self.cancelled:
            raise Cancelled("Operation was cancelled")
        if self.timed_out:
            raise Cancelled("Operation deadline exceeded")


def ensure_context(ctx: Optional[CallContext]) -> CallContext:
    if ctx is None:
        return CallContext.background()
    return ctx
