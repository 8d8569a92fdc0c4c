"""
Exceptions raised by key generation, the RSA service and the attacks.
"""

from typing import List, Optional


class WeakRSAError(Exception):
    """Base class for every error raised by weakrsa."""


class RandomSourceFailure(WeakRSAError):
    """The secure random source could not produce a value."""


class UninitializedKey(WeakRSAError):
    """Encrypt or decrypt was called before a key pair exists."""


class MessageOutOfRange(WeakRSAError, ValueError):
    """The plaintext is not in the range [0, n)."""


class InverseUndefined(WeakRSAError, ValueError):
    """A modular inverse does not exist for the given pair."""


class AttackExhausted(WeakRSAError):
    """
    An attack reached the end of its search space without success.

    The Wiener attack attaches every convergent it examined so callers can
    inspect them even though no private exponent was found.
    """

    def __init__(self, message: str, convergents: Optional[List] = None):
        super().__init__(message)
        self.convergents = list(convergents) if convergents else []
