"""
Fermat factorization attack against moduli with close prime factors.

If n = p*q with p < q, then n = a^2 - b^2 for a = (p+q)/2 and b = (q-p)/2.
When q - p is small, a is only slightly above sqrt(n) and a short upward
search finds it.
"""

from typing import Optional, Tuple

from .attack import Attacker, AttackResult
from .bigint import isqrt, mod_inverse
from .errors import AttackExhausted
from .keygen import PublicKey

# The search stops once a exceeds n + DEFAULT_SEARCH_SLACK
DEFAULT_SEARCH_SLACK = 1000


class FermatAttacker(Attacker):
    """
    Recover the private exponent by factoring n with Fermat's method.

    Args:
        search_slack: The search gives up once a > n + search_slack
        max_iterations: Optional cap on the number of increments of a
        verbose: Whether to print detailed information
    """

    name = 'fermat'

    def __init__(self, search_slack: int = DEFAULT_SEARCH_SLACK, max_iterations: Optional[int] = None,
                 verbose: bool = False):
        super().__init__(verbose)
        self.search_slack = search_slack
        self.max_iterations = max_iterations

    def factorize(self, n: int) -> Tuple[int, int, int]:
        """
        Try to factor n using Fermat's factorization method.

        Args:
            n: Odd number to factor

        Returns:
            Tuple of (p, q, iterations) with p <= q

        Raises:
            AttackExhausted: If the search bound is reached
        """
        self.log(f"Attempting Fermat factorization of a {n.bit_length()}-bit modulus...")

        limit = n + self.search_slack
        a = isqrt(n) + 1
        b2 = a * a - n
        iterations = 0

        while True:
            if iterations % 1000 == 0:
                self.progress(f"Fermat: iteration {iterations}")

            b = isqrt(b2)
            if b * b == b2:
                p, q = a - b, a + b
                self.log(f"Found factorization with Fermat's method: {p}, {q}", level="SUCCESS")
                return p, q, iterations

            a += 1
            iterations += 1
            if a > limit:
                raise AttackExhausted(f"Failed to factorize n with Fermat's method (a exceeded n + {self.search_slack})")
            if self.max_iterations is not None and iterations >= self.max_iterations:
                raise AttackExhausted(f"Failed to factorize n with Fermat's method in {iterations} iterations")
            b2 = a * a - n

    def attack(self, public_key: PublicKey) -> AttackResult:
        """
        Factor the modulus and derive d from the recovered totient.

        Raises:
            AttackExhausted: If no factorization is found within the bound
            InverseUndefined: If e has no inverse modulo the recovered totient
        """
        p, q, iterations = self.factorize(public_key.n)
        phi = (p - 1) * (q - 1)
        d = mod_inverse(public_key.e, phi)
        self.log(f"Recovered private exponent d = {d}", level="SUCCESS")
        return AttackResult(method=self.name, d=d, phi=phi, p=p, q=q, iterations=iterations)
