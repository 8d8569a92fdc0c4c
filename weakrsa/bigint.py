"""
Arbitrary-precision helpers and the secure random source.

Integer arithmetic is plain Python ``int`` backed by gmpy2 for the
operations that need number theory (square roots, inverses, prime search).
Randomness always comes from ``secrets``; anything that needs random values
takes a source object so tests can substitute their own.
"""

import secrets

import gmpy2

from .errors import InverseUndefined, RandomSourceFailure


class SecureRandom:
    """
    Cryptographically secure random integers.

    Every method raises RandomSourceFailure if the operating system cannot
    supply entropy.
    """

    def randbits(self, k: int) -> int:
        """Return a non-negative integer with at most k random bits."""
        try:
            return secrets.randbits(k)
        except (OSError, NotImplementedError) as e:
            raise RandomSourceFailure(f"Secure random source failed: {str(e)}") from e

    def randbelow(self, n: int) -> int:
        """Return a random integer in [0, n)."""
        try:
            return secrets.randbelow(n)
        except (OSError, NotImplementedError) as e:
            raise RandomSourceFailure(f"Secure random source failed: {str(e)}") from e

    def randint(self, a: int, b: int) -> int:
        """Return a random integer in [a, b], both ends included."""
        if b < a:
            raise ValueError(f"Empty range [{a}, {b}]")
        return a + self.randbelow(b - a + 1)


def random_prime(bits: int, rng: SecureRandom) -> int:
    """
    Sample a random prime with exactly ``bits`` bits.

    A random odd candidate with the top bit set is drawn and advanced to the
    next prime by gmpy2. Candidates that overflow the requested size are
    discarded and drawn again.

    Args:
        bits: Bit length of the prime (at least 2)
        rng: Random source used for the candidate

    Returns:
        A prime p with p.bit_length() == bits

    Raises:
        RandomSourceFailure: If the random source fails
    """
    if bits < 2:
        raise ValueError(f"Cannot sample a {bits}-bit prime")

    top = 1 << (bits - 1)
    while True:
        candidate = rng.randbits(bits) | top | 1
        prime = int(gmpy2.next_prime(candidate))
        if prime.bit_length() == bits:
            return prime


def mod_inverse(a: int, m: int) -> int:
    """
    Calculate the modular multiplicative inverse of a modulo m.

    Args:
        a: Integer to find inverse for
        m: Modulus

    Returns:
        Modular multiplicative inverse in the range [0, m-1]

    Raises:
        InverseUndefined: If a and m are not coprime (inverse doesn't exist)
    """
    try:
        return int(gmpy2.invert(a, m))
    except ZeroDivisionError:
        raise InverseUndefined(f"Modular inverse does not exist (gcd={int(gmpy2.gcd(a, m))})")


def gcd(a: int, b: int) -> int:
    return int(gmpy2.gcd(a, b))


def isqrt(n: int) -> int:
    """Integer square root (floor)."""
    return int(gmpy2.isqrt(n))
