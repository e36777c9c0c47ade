"""anonymous verification counter

the only public signal of how many proofs succeeded, so increments must
never be lost under concurrent verifications.
"""

import threading

from ringkyc.errors import InvalidParameter


class VerificationCounter:
    """monotonic, thread-safe success tally"""

    def __init__(self, initial: int = 0) -> None:
        if not isinstance(initial, int) or initial < 0:
            raise InvalidParameter("counter must start at a non-negative integer")
        self._value = initial
        self._lock = threading.Lock()

    @property
    def value(self) -> int:
        return self._value

    def increment(self) -> int:
        """add exactly one and return the new value"""
        with self._lock:
            self._value += 1
            return self._value

    def __int__(self):
        return self._value

    def __repr__(self):
        return f"VerificationCounter({self._value})"
