"""
Wiener's attack on RSA keys with a small private exponent.

From e*d - k*phi(n) = 1 it follows that k/d is very close to e/n when d is
small (d < n^(1/4) / 3), close enough that k/d shows up among the
convergents of the continued fraction of e/n. Each convergent is tested by
rebuilding p and q from the implied totient.
"""

from dataclasses import dataclass
from typing import List, Optional, Tuple

from .attack import Attacker, AttackResult
from .bigint import isqrt
from .errors import AttackExhausted
from .keygen import PublicKey


@dataclass(frozen=True)
class Convergent:
    numerator: int
    denominator: int


def continued_fraction(numerator: int, denominator: int) -> List[int]:
    """Quotients of the continued fraction expansion of numerator/denominator."""
    quotients = []
    while denominator:
        q, r = divmod(numerator, denominator)
        quotients.append(q)
        numerator, denominator = denominator, r
    return quotients


def convergents(quotients: List[int]) -> List[Convergent]:
    """
    Convergents of a continued fraction, in order.

    Uses h[i] = a[i]*h[i-1] + h[i-2] and k[i] = a[i]*k[i-1] + k[i-2]
    seeded with h = (0, 1) and k = (1, 0).
    """
    result = []
    num_prev, num = 0, 1
    den_prev, den = 1, 0
    for q in quotients:
        num_prev, num = num, q * num + num_prev
        den_prev, den = den, q * den + den_prev
        result.append(Convergent(num, den))
    return result


def check_convergent(e: int, n: int, k: int, d: int) -> Optional[Tuple[int, int, int]]:
    """
    Test whether k/d is the convergent that reveals the private key.

    Args:
        e: Public exponent
        n: Modulus
        k: Convergent numerator
        d: Convergent denominator (candidate private exponent)

    Returns:
        (phi, p, q) if p and q rebuilt from the implied totient multiply to n,
        None otherwise
    """
    ed_minus_1 = e * d - 1
    # phi(n) = (e*d - 1) / k must be exact
    if ed_minus_1 % k != 0:
        return None
    phi = ed_minus_1 // k

    # p and q are the roots of x^2 - (n - phi + 1)x + n
    s = n - phi + 1
    discriminant = s * s - 4 * n
    if discriminant < 0:
        return None

    root = isqrt(discriminant)
    if root * root != discriminant:
        return None

    p = (s - root) // 2
    q = (s + root) // 2
    if p * q != n:
        return None
    return phi, p, q


class WienerAttacker(Attacker):
    """Recover a small private exponent from the continued fraction of e/n."""

    name = 'wiener'

    def attack(self, public_key: PublicKey) -> AttackResult:
        """
        Run Wiener's attack.

        Returns:
            AttackResult with every convergent computed, not only the ones checked

        Raises:
            AttackExhausted: If no convergent yields a valid factorization; the
                exception carries the convergent list
        """
        e, n = public_key.e, public_key.n
        self.log("Attempting Wiener's attack for small private exponent...")

        terms = convergents(continued_fraction(e, n))
        self.log(f"Expanded e/n into {len(terms)} convergents")

        for index, term in enumerate(terms, start=1):
            k, d = term.numerator, term.denominator
            if k == 0 or d == 0:
                continue

            found = check_convergent(e, n, k, d)
            if found is None:
                continue

            phi, p, q = found
            self.log(f"Found private exponent d = {d} with Wiener's attack!", level="SUCCESS")
            return AttackResult(method=self.name, d=d, phi=phi, p=p, q=q,
                                iterations=index, convergents=terms)

        raise AttackExhausted("No small private exponent found among the convergents of e/n",
                              convergents=terms)
