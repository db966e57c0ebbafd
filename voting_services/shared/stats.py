"""Per-process request counters reported by the health endpoints."""
import threading
import time
from datetime import datetime
from typing import Any, Dict, Optional

from .models import utc_now


class RequestStats:
    """
    Call count, error count and cumulative request time for one service.

    One instance is created per app and shared by every request, so all
    updates go through a lock.
    """

    def __init__(self, boot_time: Optional[datetime] = None):
        self._lock = threading.Lock()
        self.boot_time = boot_time or utc_now()
        self._boot_monotonic = time.monotonic()
        self.total_calls = 0
        self.error_calls = 0
        self.total_request_time = 0.0

    def record_call(self) -> None:
        """Count a request before it is handled."""
        with self._lock:
            self.total_calls += 1

    def record_result(self, status_code: int, duration: float) -> None:
        """
        Account for a finished request.

        Args:
            status_code: HTTP status sent to the client
            duration: Wall-clock handling time in seconds
        """
        with self._lock:
            if status_code >= 400:
                self.error_calls += 1
            self.total_request_time += duration

    def uptime(self) -> float:
        return time.monotonic() - self._boot_monotonic

    def snapshot(self) -> Dict[str, Any]:
        """
        Build the health report.

        Returns:
            dict with status, uptime, counters, boot time and
            total/average request time in seconds
        """
        with self._lock:
            total_calls = self.total_calls
            error_calls = self.error_calls
            total_time = self.total_request_time

        average = total_time / total_calls if total_calls else 0.0

        return {
            "status": "ok",
            "uptime": self.uptime(),
            "totalAPICalls": total_calls,
            "totalAPICallsError": error_calls,
            "bootTime": self.boot_time.isoformat(),
            "totalRequestTime": total_time,
            "averageRequestTime": average,
        }
