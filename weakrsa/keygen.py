"""
RSA key generation with optional, deliberately injected weaknesses.

``Vulnerability.CLOSE_FACTORS`` places q a fixed, small distance above p so
that Fermat factorization succeeds almost immediately.
``Vulnerability.SMALL_PRIVATE_EXPONENT`` picks a tiny private exponent so that
Wiener's continued-fraction attack recovers it from the public key.
Without a vulnerability the generator rejects both situations.
"""

import enum
from dataclasses import dataclass
from typing import Optional, Tuple

from .bigint import SecureRandom, gcd, mod_inverse, random_prime
from .errors import InverseUndefined
from .log import Reporter
from .primality import PrimalityTest, PrimalityTester

DEFAULT_PUBLIC_EXPONENT = 65537

# Draws of a small d before the primes are discarded
SMALL_D_DRAWS = 1000


class Vulnerability(enum.Enum):
    NONE = 'none'
    CLOSE_FACTORS = 'close-factors'
    SMALL_PRIVATE_EXPONENT = 'small-private-exponent'


@dataclass(frozen=True)
class PublicKey:
    n: int
    e: int


@dataclass(frozen=True)
class PrivateKey:
    n: int
    d: int


@dataclass(frozen=True)
class KeyMaterial:
    """Everything produced by one generation run, secrets included."""
    p: int
    q: int
    phi: int
    public_key: PublicKey
    private_key: PrivateKey
    attempts: int = 1

    @property
    def n(self) -> int:
        return self.public_key.n


@dataclass(frozen=True)
class KeyGeneratorConfig:
    """
    Parameters of a generation run.

    Args:
        primality_test: Test used to validate every prime candidate
        min_probability: Required confidence of the primality test, in (0, 1]
        bit_length: Size of the modulus; even and at least 16
        vulnerability: Weakness to inject, if any
    """
    primality_test: PrimalityTest = PrimalityTest.MILLER_RABIN
    min_probability: float = 0.99
    bit_length: int = 1024
    vulnerability: Vulnerability = Vulnerability.NONE

    def __post_init__(self):
        if not isinstance(self.primality_test, PrimalityTest):
            raise ValueError(f"Unknown primality test: {self.primality_test!r}")
        if not isinstance(self.vulnerability, Vulnerability):
            raise ValueError(f"Unknown vulnerability mode: {self.vulnerability!r}")
        if not 0 < self.min_probability <= 1:
            raise ValueError(f"min_probability must be in (0, 1], got {self.min_probability}")
        if self.bit_length < 16 or self.bit_length % 2 != 0:
            raise ValueError(f"bit_length must be an even integer >= 16, got {self.bit_length}")
        # 2^(bits/16) must leave room for at least one d >= 2
        if self.vulnerability is Vulnerability.SMALL_PRIVATE_EXPONENT and self.bit_length < 32:
            raise ValueError(f"small-private-exponent mode needs bit_length >= 32, got {self.bit_length}")
        # e = 65537 has to stay below n
        if self.vulnerability is not Vulnerability.SMALL_PRIVATE_EXPONENT and self.bit_length < 20:
            raise ValueError(f"e = {DEFAULT_PUBLIC_EXPONENT} needs bit_length >= 20, got {self.bit_length}")

    @property
    def prime_bits(self) -> int:
        return self.bit_length // 2

    @property
    def close_factor_gap(self) -> int:
        """Distance between p and q in CLOSE_FACTORS mode: 2^(bits/2 - 10), at least 2."""
        return 1 << max(self.prime_bits - 10, 1)

    @property
    def min_prime_distance(self) -> int:
        """Smallest allowed |p - q| otherwise: 2^(bits/2 - 100), at least 1."""
        return 1 << max(self.prime_bits - 100, 0)

    @property
    def small_d_limit(self) -> int:
        """Exclusive upper bound of d in SMALL_PRIVATE_EXPONENT mode: 2^(bits/16)."""
        return 1 << (self.bit_length // 16)

    @property
    def min_private_exponent(self) -> int:
        """Smallest d accepted outside SMALL_PRIVATE_EXPONENT mode: 2^(bits/4)."""
        return 1 << (self.bit_length // 4)


class KeyGenerator(Reporter):
    """
    Produces RSA key pairs by rejection sampling.

    Each attempt builds a full candidate (p, q, e, d) and throws it away as
    soon as one check fails; only a candidate that passes every check is
    returned. Errors from the random source are not retried.
    """

    def __init__(self, config: Optional[KeyGeneratorConfig] = None, rng: Optional[SecureRandom] = None,
                 verbose: bool = False):
        super().__init__(verbose)
        self.config = config if config is not None else KeyGeneratorConfig()
        self.rng = rng if rng is not None else SecureRandom()
        self.tester = PrimalityTester(self.config.primality_test, self.config.min_probability,
                                      rng=self.rng, verbose=verbose)

    def generate_keys(self) -> Tuple[PublicKey, PrivateKey]:
        material = self.generate_key_material()
        return material.public_key, material.private_key

    def generate_key_material(self) -> KeyMaterial:
        """
        Run the generator until a valid key pair comes out.

        Returns:
            KeyMaterial with the primes, totient and both keys

        Raises:
            RandomSourceFailure: If the secure random source fails
        """
        config = self.config
        self.log(f"Generating {config.bit_length}-bit key "
                 f"({config.primality_test.value}, p >= {config.min_probability}, "
                 f"vulnerability={config.vulnerability.value})...")

        attempt = 0
        while True:
            attempt += 1
            self.progress(f"Key generation: attempt {attempt}")

            p = self.generate_prime()
            q = self._second_prime(p)
            if q is None:
                continue

            phi = (p - 1) * (q - 1)
            exponents = self.derive_exponents(phi)
            if exponents is None:
                continue
            e, d = exponents

            n = p * q
            self.log(f"Key pair found after {attempt} attempt(s)", level="SUCCESS")
            return KeyMaterial(p=p, q=q, phi=phi,
                               public_key=PublicKey(n, e),
                               private_key=PrivateKey(n, d),
                               attempts=attempt)

    def generate_prime(self) -> int:
        """Sample primes until one also passes the configured primality test."""
        while True:
            candidate = random_prime(self.config.prime_bits, self.rng)
            if self.tester.is_probably_prime(candidate):
                return candidate
            self.log(f"Candidate {candidate} rejected by {self.config.primality_test.value} test")

    def _second_prime(self, p: int) -> Optional[int]:
        config = self.config

        if config.vulnerability is Vulnerability.CLOSE_FACTORS:
            # q is pinned to p; a composite q means starting over with a new p
            q = p + config.close_factor_gap
            if not self.tester.is_probably_prime(q):
                return None
            return q

        q = self.generate_prime()
        if abs(p - q) < config.min_prime_distance:
            self.log(f"Primes too close (|p - q| < 2^{config.min_prime_distance.bit_length() - 1}), retrying")
            return None
        return q

    def derive_exponents(self, phi: int) -> Optional[Tuple[int, int]]:
        """
        Pick (e, d) for the totient ``phi`` according to the vulnerability mode.

        Returns:
            (e, d) or None when the candidate has to be discarded

        Raises:
            RandomSourceFailure: If d has to be sampled and the random source fails
        """
        config = self.config

        if config.vulnerability is Vulnerability.SMALL_PRIVATE_EXPONENT:
            for _ in range(SMALL_D_DRAWS):
                d = self.rng.randbelow(config.small_d_limit)
                if d >= 2 and gcd(d, phi) == 1:
                    break
            else:
                # Every small d shares a factor with phi; new primes are needed
                return None
            # gcd(d, phi) == 1, so the inverse exists
            e = mod_inverse(d, phi)
            if e <= 1 or e >= phi:
                return None
            return e, d

        e = DEFAULT_PUBLIC_EXPONENT
        if gcd(e, phi) != 1:
            return None
        try:
            d = mod_inverse(e, phi)
        except InverseUndefined:
            return None
        # Guard against Wiener's attack
        if d < config.min_private_exponent:
            self.log(f"Private exponent below 2^{config.bit_length // 4}, retrying")
            return None
        return e, d
