import threading


class SequenceGenerator:
    """
    Thread-safe source of 16-bit ICMP sequence numbers.

    One instance is shared by every probe of a prober; each call to `next()`
    hands out the following value and wraps from 65535 back to 0.
    """

    MAX_SEQUENCE = 0xFFFF

    def __init__(self, start: int = 0):
        """
        Args:
            start: Last issued value; the first call to `next()` returns `start + 1`.
        """
        self._value = start & self.MAX_SEQUENCE
        self._lock = threading.Lock()

    def next(self) -> int:
        """Return the next sequence number."""
        with self._lock:
            self._value = (self._value + 1) & self.MAX_SEQUENCE
            return self._value

    @property
    def current(self) -> int:
        """Last value handed out."""
        with self._lock:
            return self._value
