"""Time-ordered business IDs for orders, withdrawals and disputes.

IDs sort lexicographically in creation order, which is what the keyset
pagination in every list endpoint relies on ("id < :cursor ORDER BY id DESC").

Format: <PREFIX>-<19-digit zero-padded integer>
  integer = (ms since epoch << 22) | (worker << 12) | sequence
"""

import threading
import time

from config.settings import settings

_EPOCH_MS = 1_735_689_600_000  # 2025-01-01T00:00:00Z
_WORKER_BITS = 10
_SEQUENCE_BITS = 12
_SEQUENCE_MASK = (1 << _SEQUENCE_BITS) - 1


class BusinessIdGenerator:
    def __init__(self, worker_id: int = 0) -> None:
        if not (0 <= worker_id < (1 << _WORKER_BITS)):
            raise ValueError(f"worker_id must be 0-{(1 << _WORKER_BITS) - 1}")
        self._worker_id = worker_id
        self._last_ms = -1
        self._sequence = 0
        self._lock = threading.Lock()

    def next_int(self) -> int:
        with self._lock:
            now_ms = time.time_ns() // 1_000_000
            if now_ms < self._last_ms:
                # clock stepped back: keep counting on the last timestamp
                now_ms = self._last_ms
            if now_ms == self._last_ms:
                self._sequence = (self._sequence + 1) & _SEQUENCE_MASK
                if self._sequence == 0:
                    while now_ms <= self._last_ms:
                        now_ms = time.time_ns() // 1_000_000
            else:
                self._sequence = 0
            self._last_ms = now_ms
            return (
                ((now_ms - _EPOCH_MS) << (_WORKER_BITS + _SEQUENCE_BITS))
                | (self._worker_id << _SEQUENCE_BITS)
                | self._sequence
            )

    def next_id(self, prefix: str) -> str:
        return f"{prefix}-{self.next_int():019d}"


_default_generator = BusinessIdGenerator(settings.ID_WORKER_ID)


def new_order_id() -> str:
    return _default_generator.next_id("ORD")


def new_withdrawal_id() -> str:
    return _default_generator.next_id("WDR")


def new_dispute_id() -> str:
    return _default_generator.next_id("DSP")
