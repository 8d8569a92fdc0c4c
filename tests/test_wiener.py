import pytest

from weakrsa.errors import AttackExhausted
from weakrsa.keygen import KeyGenerator, KeyGeneratorConfig, PublicKey, Vulnerability
from weakrsa.wiener import Convergent, WienerAttacker, check_convergent, continued_fraction, convergents

# 90581 = 239 * 379, d = 5
TOY_KEY = PublicKey(90581, 17993)


def test_continued_fraction_of_17_over_60():
    assert continued_fraction(17, 60) == [0, 3, 1, 1, 8]


def test_convergents_of_17_over_60():
    terms = convergents(continued_fraction(17, 60))
    assert terms == [
        Convergent(0, 1),
        Convergent(1, 3),
        Convergent(1, 4),
        Convergent(2, 7),
        Convergent(17, 60),
    ]


def test_last_convergent_is_the_fraction_itself():
    terms = convergents(continued_fraction(17993, 90581))
    assert terms[-1] == Convergent(17993, 90581)


def test_check_convergent():
    assert check_convergent(17993, 90581, 1, 5) == (238 * 378, 239, 379)
    # 17993 * 5 - 1 is not divisible by 5
    assert check_convergent(17993, 90581, 5, 5) is None
    # Divisible, but the implied totient gives no integer roots
    assert check_convergent(17993, 90581, 2, 5) is None


def test_attack_toy_key():
    result = WienerAttacker().attack(TOY_KEY)
    assert result.d == 5
    assert (result.p, result.q) == (239, 379)
    assert result.phi == 238 * 378
    assert result.method == 'wiener'
    assert Convergent(1, 5) in result.convergents


@pytest.mark.parametrize("bits", [256, 512])
def test_attack_recovers_small_private_exponent(bits):
    config = KeyGeneratorConfig(bit_length=bits, vulnerability=Vulnerability.SMALL_PRIVATE_EXPONENT)
    material = KeyGenerator(config).generate_key_material()

    result = WienerAttacker().attack(material.public_key)

    assert result.d == material.private_key.d
    assert result.phi == material.phi
    assert {result.p, result.q} == {material.p, material.q}
    accepted = result.convergents[result.iterations - 1]
    assert accepted.denominator == material.private_key.d


def test_sound_key_exhausts_with_convergents():
    material = KeyGenerator(KeyGeneratorConfig(bit_length=128)).generate_key_material()
    public_key = material.public_key

    with pytest.raises(AttackExhausted) as info:
        WienerAttacker().attack(public_key)

    terms = info.value.convergents
    assert terms
    assert terms[-1] == Convergent(public_key.e, public_key.n)
