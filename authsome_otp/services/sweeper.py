import logging
import threading
from typing import Optional

from authsome_otp.services.otp import OtpService

LOGGER = logging.getLogger(__name__)


class ExpirySweeper:
    """Deletes expired OTP records on a fixed interval from a daemon thread."""

    def __init__(self, service: OtpService, interval_seconds: float) -> None:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self._service = service
        self._interval_seconds = interval_seconds
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._lock = threading.Lock()

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        with self._lock:
            if self.running:
                return
            self._stop.clear()
            self._thread = threading.Thread(
                target=self._loop, name="otp-expiry-sweeper", daemon=True
            )
            self._thread.start()

    def stop(self, timeout: Optional[float] = None) -> None:
        with self._lock:
            self._stop.set()
            thread, self._thread = self._thread, None
        if thread is not None:
            thread.join(timeout)

    def run_once(self) -> int:
        return self._service.sweep_expired()

    def _loop(self) -> None:
        while not self._stop.wait(self._interval_seconds):
            try:
                self.run_once()
            except Exception:
                LOGGER.exception("OTP expiry sweep failed")
