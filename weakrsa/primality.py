"""
Probabilistic primality tests: Fermat, Solovay-Strassen and Miller-Rabin.

All three share one iteration policy. A non-prime passes a single round with
probability at most 1/2, so ``k`` rounds give an error probability of at most
``0.5 ** k`` and ``k`` is chosen as the smallest count reaching the requested
confidence.
"""

import enum
import math
from typing import Callable, Dict, Optional

from .bigint import SecureRandom
from .errors import RandomSourceFailure
from .log import Reporter

# Used when the caller asks for certainty (probability 1.0)
MAX_ROUNDS = 128


class PrimalityTest(enum.Enum):
    FERMAT = 'fermat'
    SOLOVAY_STRASSEN = 'solovay-strassen'
    MILLER_RABIN = 'miller-rabin'


def calculate_iterations(min_probability: float) -> int:
    """
    Number of rounds needed to reach ``min_probability`` confidence.

    Args:
        min_probability: Required probability that an accepted number is prime

    Returns:
        1 for probabilities up to 0.5, otherwise ceil(ln(1 - p) / ln(0.5))
    """
    if min_probability <= 0.5:
        return 1
    if min_probability >= 1.0:
        return MAX_ROUNDS
    return int(math.ceil(math.log(1.0 - min_probability) / math.log(0.5)))


def jacobi(a: int, n: int) -> int:
    """
    Jacobi symbol (a|n) for odd positive n.

    Returns:
        -1, 0 or 1

    Raises:
        ValueError: If n is even or not positive
    """
    if n <= 0 or n % 2 == 0:
        raise ValueError(f"Jacobi symbol is undefined for n={n}")

    result = 1
    a %= n
    while a != 0:
        # Pull out factors of two: (2|n) = -1 when n = 3, 5 (mod 8)
        while a % 2 == 0:
            a //= 2
            if n % 8 in (3, 5):
                result = -result

        # Quadratic reciprocity
        a, n = n, a
        if a % 4 == 3 and n % 4 == 3:
            result = -result
        a %= n

    return result if n == 1 else 0


def fermat_round(n: int, rng: SecureRandom) -> bool:
    a = rng.randint(1, n - 1)
    return pow(a, n - 1, n) == 1


def solovay_strassen_round(n: int, rng: SecureRandom) -> bool:
    a = rng.randint(1, n - 1)
    symbol = jacobi(a, n)
    if symbol == 0:
        return False
    # Compare by congruence so that -1 matches n - 1
    return pow(a, (n - 1) // 2, n) == symbol % n


def miller_rabin_round(n: int, rng: SecureRandom) -> bool:
    # Express n - 1 as 2^s * d with d odd
    s, d = 0, n - 1
    while d % 2 == 0:
        s += 1
        d //= 2

    a = rng.randint(2, n - 2)
    x = pow(a, d, n)
    if x == 1 or x == n - 1:
        return True

    for _ in range(s - 1):
        x = pow(x, 2, n)
        if x == n - 1:
            return True
        if x == 1:
            # Nontrivial square root of 1: a is a witness
            return False
    return False


ROUNDS: Dict[PrimalityTest, Callable[[int, SecureRandom], bool]] = {
    PrimalityTest.FERMAT: fermat_round,
    PrimalityTest.SOLOVAY_STRASSEN: solovay_strassen_round,
    PrimalityTest.MILLER_RABIN: miller_rabin_round,
}


class PrimalityTester(Reporter):
    """
    Runs one of the probabilistic tests with a fixed confidence target.

    Args:
        test: Which per-round test to use
        min_probability: Required confidence in (0, 1]
        rng: Random source for the bases, SecureRandom by default
        verbose: Whether to print detailed information
    """

    def __init__(self, test: PrimalityTest = PrimalityTest.MILLER_RABIN, min_probability: float = 0.99,
                 rng: Optional[SecureRandom] = None, verbose: bool = False):
        super().__init__(verbose)
        self.test = test
        self.min_probability = min_probability
        self.rounds = calculate_iterations(min_probability)
        self.rng = rng if rng is not None else SecureRandom()
        self._round = ROUNDS[test]

    def is_probably_prime(self, n: int) -> bool:
        """
        Check whether n is prime with the configured confidence.

        Returns:
            True only if every round passes, False for composites and when
            the random source fails
        """
        # Handle small cases
        if n < 2:
            return False
        if n <= 3:
            return True
        if n % 2 == 0:
            return False

        try:
            for _ in range(self.rounds):
                if not self._round(n, self.rng):
                    return False
        except RandomSourceFailure as e:
            self.log(f"{self.test.value} test aborted: {str(e)}", level="WARNING")
            return False
        return True


def is_probably_prime(n: int, min_probability: float, test: PrimalityTest = PrimalityTest.MILLER_RABIN,
                      rng: Optional[SecureRandom] = None) -> bool:
    return PrimalityTester(test, min_probability, rng).is_probably_prime(n)


def fermat_test(n: int, min_probability: float, rng: Optional[SecureRandom] = None) -> bool:
    return is_probably_prime(n, min_probability, PrimalityTest.FERMAT, rng)


def solovay_strassen_test(n: int, min_probability: float, rng: Optional[SecureRandom] = None) -> bool:
    return is_probably_prime(n, min_probability, PrimalityTest.SOLOVAY_STRASSEN, rng)


def miller_rabin_test(n: int, min_probability: float, rng: Optional[SecureRandom] = None) -> bool:
    return is_probably_prime(n, min_probability, PrimalityTest.MILLER_RABIN, rng)
