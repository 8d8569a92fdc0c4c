"""
weakrsa - RSA key generation with injectable weaknesses, and the attacks
that exploit them (Fermat factorization, Wiener's continued-fraction attack).
"""

from .attack import AttackResult
from .bigint import SecureRandom
from .errors import (AttackExhausted, InverseUndefined, MessageOutOfRange, RandomSourceFailure,
                     UninitializedKey, WeakRSAError)
from .fermat import FermatAttacker
from .keygen import KeyGenerator, KeyGeneratorConfig, KeyMaterial, PrivateKey, PublicKey, Vulnerability
from .primality import PrimalityTest, PrimalityTester, calculate_iterations, jacobi
from .service import RSAService
from .wiener import Convergent, WienerAttacker

__version__ = "1.0.0"
