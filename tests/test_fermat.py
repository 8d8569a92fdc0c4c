import pytest

from weakrsa.errors import AttackExhausted, InverseUndefined
from weakrsa.fermat import FermatAttacker
from weakrsa.keygen import KeyGenerator, KeyGeneratorConfig, PublicKey, Vulnerability
from weakrsa.service import RSAService


def test_factorize_toy_modulus():
    p, q, iterations = FermatAttacker().factorize(5959)
    assert (p, q) == (59, 101)
    assert iterations == 2


def test_attack_toy_key():
    result = FermatAttacker().attack(PublicKey(5959, 7))
    assert result.phi == 58 * 100
    assert (7 * result.d) % result.phi == 1
    assert result.method == 'fermat'
    assert result.convergents == []


@pytest.mark.parametrize("bits", [48, 64])
def test_attack_recovers_close_factor_key(bits):
    config = KeyGeneratorConfig(bit_length=bits, vulnerability=Vulnerability.CLOSE_FACTORS)
    material = KeyGenerator(config).generate_key_material()

    result = FermatAttacker().attack(material.public_key)

    assert result.d == material.private_key.d
    assert result.phi == material.phi
    assert (result.p, result.q) == (material.p, material.q)


def test_recovered_key_decrypts():
    config = KeyGeneratorConfig(bit_length=64, vulnerability=Vulnerability.CLOSE_FACTORS)
    service = RSAService(KeyGenerator(config))
    material = service.generate_keys()

    result = FermatAttacker().attack(material.public_key)
    ciphertext = service.encrypt(12345)
    assert service.decrypt(ciphertext, result.private_key(material.public_key)) == 12345


def test_iteration_cap_exhausts():
    # Factors far apart: a has to climb roughly 85000 steps
    n = 1000003 * 2000003
    with pytest.raises(AttackExhausted):
        FermatAttacker(max_iterations=10).factorize(n)


def test_search_slack_exhausts():
    # n = 2 (mod 4) is never a difference of two squares
    with pytest.raises(AttackExhausted):
        FermatAttacker(search_slack=50).factorize(14)


def test_sound_key_is_not_broken():
    material = KeyGenerator(KeyGeneratorConfig(bit_length=128)).generate_key_material()
    with pytest.raises(AttackExhausted) as info:
        FermatAttacker(max_iterations=1000).attack(material.public_key)
    assert info.value.convergents == []


def test_prime_modulus_has_no_inverse():
    # For prime n the only factorization is 1 * n, so phi = 0
    with pytest.raises(InverseUndefined):
        FermatAttacker().attack(PublicKey(7, 3))
