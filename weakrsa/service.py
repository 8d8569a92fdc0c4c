"""
Textbook RSA encryption and decryption over a generated key pair.
"""

from typing import Optional

from .errors import MessageOutOfRange, UninitializedKey
from .keygen import KeyGenerator, KeyMaterial, PrivateKey, PublicKey


class RSAService:
    """
    Holds one key pair and applies raw RSA with it.

    Keys passed explicitly to ``encrypt``/``decrypt`` take precedence over
    the stored pair, so the service can also be used with keys it did not
    generate (for example a private exponent recovered by an attack).
    """

    def __init__(self, generator: Optional[KeyGenerator] = None):
        self.generator = generator if generator is not None else KeyGenerator()
        self.public_key: Optional[PublicKey] = None
        self.private_key: Optional[PrivateKey] = None
        self.material: Optional[KeyMaterial] = None

    def generate_keys(self) -> KeyMaterial:
        """Generate a new key pair and make it the service's current pair."""
        material = self.generator.generate_key_material()
        # Both keys are replaced together
        self.material = material
        self.public_key, self.private_key = material.public_key, material.private_key
        return material

    def encrypt(self, message: int, public_key: Optional[PublicKey] = None) -> int:
        """
        Encrypt an integer message: c = m^e mod n.

        Args:
            message: Integer message, 0 <= message < n
            public_key: Key to use instead of the stored one

        Returns:
            Ciphertext

        Raises:
            UninitializedKey: If no public key is available
            MessageOutOfRange: If the message is negative or not below n
        """
        key = public_key if public_key is not None else self.public_key
        if key is None:
            raise UninitializedKey("Public key is not initialized")
        if not 0 <= message < key.n:
            raise MessageOutOfRange(f"Message must satisfy 0 <= m < n (n has {key.n.bit_length()} bits)")
        return pow(message, key.e, key.n)

    def decrypt(self, ciphertext: int, private_key: Optional[PrivateKey] = None) -> int:
        """
        Decrypt a ciphertext: m = c^d mod n.

        Raises:
            UninitializedKey: If no private key is available
        """
        key = private_key if private_key is not None else self.private_key
        if key is None:
            raise UninitializedKey("Private key is not initialized")
        return pow(ciphertext, key.d, key.n)
