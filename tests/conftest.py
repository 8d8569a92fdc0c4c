import secrets
from collections import deque

import pytest

from weakrsa.errors import RandomSourceFailure


class ScriptedRandom:
    """Replays queued randbits and randbelow values, then falls back to secrets."""

    def __init__(self, bits=(), below=()):
        self.bits = deque(bits)
        self.below = deque(below)

    def randbits(self, k):
        if self.bits:
            return self.bits.popleft()
        return secrets.randbits(k)

    def randbelow(self, n):
        if self.below:
            return self.below.popleft()
        return secrets.randbelow(n)

    def randint(self, a, b):
        return a + secrets.randbelow(b - a + 1)


class FixedBase:
    """Always returns the same base from randint."""

    def __init__(self, base):
        self.base = base

    def randint(self, a, b):
        return self.base


class FailingRandom:
    def randbits(self, k):
        raise RandomSourceFailure("entropy source unavailable")

    def randbelow(self, n):
        raise RandomSourceFailure("entropy source unavailable")

    def randint(self, a, b):
        raise RandomSourceFailure("entropy source unavailable")


@pytest.fixture
def failing_random():
    return FailingRandom()
