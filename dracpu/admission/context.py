"""
dracpu/admission/context.py
───────────────────────────
AdmissionContext: the deadline and cancellation signal of one admission request.

A single context is created per review and handed down the whole validation
chain, so that claim lookups and retry sleeps all respect the same request
timeout. Deadlines are time.monotonic() values.

    ctx = AdmissionContext(timeout_s=8.0)
    ...
    if ctx.wait(0.05):          # True → cancelled or past deadline
        raise ctx.err()
"""

from __future__ import annotations

import threading
import time
from typing import Optional

from dracpu.admission.errors import AdmissionCancelledError


class AdmissionContext:
    """
    Deadline plus cancellation event.

    Attributes:
        deadline: Monotonic time after which the request is expired, or None
                  for no deadline.
    """

    def __init__(self, timeout_s: Optional[float] = None) -> None:
        self.deadline: Optional[float] = (
            time.monotonic() + timeout_s if timeout_s is not None else None
        )
        self._cancelled = threading.Event()

    def cancel(self) -> None:
        """Cancel the request. Wakes any thread blocked in wait()."""
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def expired(self) -> bool:
        return self.deadline is not None and time.monotonic() >= self.deadline

    def err(self) -> Optional[AdmissionCancelledError]:
        """The reason the request is done, or None while it is still live."""
        if self.cancelled:
            return AdmissionCancelledError("admission request cancelled")
        if self.expired():
            return AdmissionCancelledError("admission request deadline exceeded")
        return None

    def wait(self, seconds: float) -> bool:
        """
        Sleep for up to `seconds`.

        Returns True as soon as the request is cancelled, or if its deadline
        has passed by the time the sleep ends. Returns False otherwise.
        """
        if self._cancelled.wait(max(seconds, 0.0)):
            return True
        return self.expired()
