"""
Common pieces of the private-exponent recovery attacks.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List

from .keygen import PrivateKey, PublicKey
from .log import Reporter


@dataclass(frozen=True)
class AttackResult:
    """
    Outcome of a successful attack.

    ``iterations`` counts search steps (Fermat) or convergents examined
    (Wiener). ``convergents`` is only filled by the Wiener attack.
    """
    method: str
    d: int
    phi: int
    p: int
    q: int
    iterations: int = 0
    convergents: List = field(default_factory=list)

    def private_key(self, public_key: PublicKey) -> PrivateKey:
        return PrivateKey(public_key.n, self.d)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'success': True,
            'method': self.method,
            'd': self.d,
            'phi_n': self.phi,
            'p': self.p,
            'q': self.q,
            'iterations': self.iterations,
            'convergents': [(c.numerator, c.denominator) for c in self.convergents],
        }


class Attacker(Reporter):
    """Base class for attacks that work from a public key alone."""

    name = 'attack'

    def attack(self, public_key: PublicKey) -> AttackResult:
        raise NotImplementedError
