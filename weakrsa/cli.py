"""
Command-line demo: generate keys, round-trip a message, and run the attacks.

Modes:
    rsa     generate a sound key pair and encrypt/decrypt a message
    fermat  generate a key with close primes and break it with Fermat's method
    wiener  generate a key with a small d and break it with Wiener's attack
"""

import argparse
import json
import sys
import time
from dataclasses import replace
from typing import Any, Dict, List, Optional

from .attack import Attacker
from .errors import AttackExhausted, WeakRSAError
from .fermat import DEFAULT_SEARCH_SLACK, FermatAttacker
from .keygen import KeyGenerator, KeyGeneratorConfig, KeyMaterial, Vulnerability
from .log import Reporter
from .primality import PrimalityTest
from .service import RSAService
from .wiener import WienerAttacker

MODE_PRESETS = {
    'rsa': KeyGeneratorConfig(PrimalityTest.MILLER_RABIN, 0.99, 1024, Vulnerability.NONE),
    'fermat': KeyGeneratorConfig(PrimalityTest.MILLER_RABIN, 0.99, 64, Vulnerability.CLOSE_FACTORS),
    'wiener': KeyGeneratorConfig(PrimalityTest.MILLER_RABIN, 0.99, 512, Vulnerability.SMALL_PRIVATE_EXPONENT),
}

DEFAULT_MESSAGES = {
    'rsa': 123490,
    'fermat': 12345,
    'wiener': 123456789,
}

# Menu numbers accepted in place of mode names
MODE_ALIASES = {'1': 'rsa', '2': 'fermat', '3': 'wiener'}


def resolve_mode(value: str) -> str:
    mode = value.strip().lower()
    mode = MODE_ALIASES.get(mode, mode)
    if mode not in MODE_PRESETS:
        raise argparse.ArgumentTypeError(f"unknown mode {value!r} (choose rsa/1, fermat/2 or wiener/3)")
    return mode


class Demo(Reporter):
    """
    Runs one demo mode and collects everything it prints into a result dict.

    Args:
        mode: One of 'rsa', 'fermat', 'wiener'
        config: Key generator configuration for this run
        message: Integer plaintext used for the round trip
        search_slack: Search bound of the Fermat attack
        verbose: Whether to print detailed information
    """

    def __init__(self, mode: str, config: KeyGeneratorConfig, message: int,
                 search_slack: int = DEFAULT_SEARCH_SLACK, verbose: bool = False):
        super().__init__(verbose)
        self.mode = mode
        self.config = config
        self.message = message
        self.search_slack = search_slack
        self.service = RSAService(KeyGenerator(config, verbose=verbose))

    def run(self) -> Dict[str, Any]:
        results: Dict[str, Any] = {
            'success': False,
            'mode': self.mode,
            'config': {
                'primality_test': self.config.primality_test.value,
                'min_probability': self.config.min_probability,
                'bit_length': self.config.bit_length,
                'vulnerability': self.config.vulnerability.value,
            },
        }

        try:
            print("Generating keys..." if self.mode == 'rsa' else "Generating vulnerable keys...")
            material = self.service.generate_keys()
            self.log("Keys generated successfully.", level="SUCCESS")
            self._print_keys(material)
            results['public_key'] = {'n': material.n, 'e': material.public_key.e}
            results['private_key'] = {'n': material.n, 'd': material.private_key.d}
            results['attempts'] = material.attempts

            if self.mode == 'rsa':
                results.update(self._round_trip())
            else:
                self._break(material, results)
        except WeakRSAError as e:
            self.log(f"{type(e).__name__}: {str(e)}", level="ERROR")
            results['error'] = str(e)
            if isinstance(e, AttackExhausted) and e.convergents:
                results['convergents'] = [(c.numerator, c.denominator) for c in e.convergents]

        return results

    def _print_keys(self, material: KeyMaterial) -> None:
        print(f"Public key:  n = {material.n}")
        print(f"             e = {material.public_key.e}")
        print(f"Private key: d = {material.private_key.d}")

    def _round_trip(self) -> Dict[str, Any]:
        print(f"Original message: {self.message}")
        ciphertext = self.service.encrypt(self.message)
        print(f"Ciphertext: {ciphertext}")
        decrypted = self.service.decrypt(ciphertext)
        print(f"Decrypted message: {decrypted}")

        success = decrypted == self.message
        if success:
            self.log("Message encrypted and decrypted successfully.", level="SUCCESS")
        else:
            self.log("Decrypted message does not match the original.", level="ERROR")
        return {'success': success, 'message': self.message, 'ciphertext': ciphertext, 'decrypted': decrypted}

    def _attacker(self) -> Attacker:
        if self.mode == 'fermat':
            return FermatAttacker(search_slack=self.search_slack, verbose=self.verbose)
        return WienerAttacker(verbose=self.verbose)

    def _break(self, material: KeyMaterial, results: Dict[str, Any]) -> None:
        attacker = self._attacker()
        print(f"Running {attacker.name} attack...")
        result = attacker.attack(material.public_key)

        print(f"Recovered d: {result.d}")
        print(f"Euler's totient phi(n): {result.phi}")
        if result.convergents:
            print("Convergents (k/d):")
            for term in result.convergents:
                print(f"  k = {term.numerator}, d = {term.denominator}")

        d_matches = result.d == material.private_key.d
        if d_matches:
            self.log("Recovered d matches the original private exponent!", level="SUCCESS")
        else:
            self.log("Recovered d does not match the original private exponent.", level="WARNING")
        # Recorded before the round trip, which can still fail on the message
        results['attack'] = result.to_dict()
        results['d_matches'] = d_matches

        ciphertext = self.service.encrypt(self.message)
        decrypted = self.service.decrypt(ciphertext, result.private_key(material.public_key))
        print(f"Message decrypted with recovered d: {decrypted}")
        decrypts = decrypted == self.message
        if decrypts:
            self.log("Ciphertext decrypted with the recovered d.", level="SUCCESS")
        else:
            self.log("Failed to decrypt with the recovered d.", level="ERROR")

        results.update({
            'success': d_matches and decrypts,
            'message': self.message,
            'ciphertext': ciphertext,
            'decrypted': decrypted,
        })


def build_config(mode: str, args: argparse.Namespace) -> KeyGeneratorConfig:
    """Start from the mode's preset and apply command-line overrides."""
    overrides = {}
    if args.bits is not None:
        overrides['bit_length'] = args.bits
    if args.test is not None:
        overrides['primality_test'] = PrimalityTest(args.test)
    if args.probability is not None:
        overrides['min_probability'] = args.probability
    return replace(MODE_PRESETS[mode], **overrides)


def write_report(results: Dict[str, Any], path: str, output_format: str) -> None:
    with open(path, 'w') as f:
        if output_format == 'json':
            json.dump(results, f, indent=2, default=str)
        else:
            # Text format
            f.write(f"weakrsa results\n")
            f.write(f"===============\n\n")
            f.write(f"Mode: {results['mode']}\n")
            f.write(f"Success: {results['success']}\n")
            if 'public_key' in results:
                f.write(f"n: {results['public_key']['n']}\n")
                f.write(f"e: {results['public_key']['e']}\n")
            if 'attack' in results:
                f.write(f"Recovered d: {results['attack']['d']}\n")
            if 'error' in results:
                f.write(f"Error: {results['error']}\n")
            f.write(f"Elapsed time: {results['elapsed_time']:.2f} seconds\n")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Weak RSA lab - generate RSA keys with injected weaknesses and break them"
    )
    parser.add_argument('--mode', type=resolve_mode,
                        help='rsa (1), fermat (2) or wiener (3); prompts when omitted')

    # Key generation overrides
    parser.add_argument('--bits', type=int, help='Modulus size in bits (overrides the mode preset)')
    parser.add_argument('--test', choices=[t.value for t in PrimalityTest],
                        help='Primality test used for prime candidates')
    parser.add_argument('--probability', type=float,
                        help='Minimum probability that accepted candidates are prime')
    parser.add_argument('--message', type=int, help='Integer message to encrypt')
    parser.add_argument('--search-slack', type=int, default=DEFAULT_SEARCH_SLACK,
                        help='Fermat attack gives up once a exceeds n + this value')

    # Output options
    parser.add_argument('--output-file', type=str, help='Output file for results')
    parser.add_argument('--output-format', choices=['json', 'text'], default='json',
                        help='Output format')
    parser.add_argument('--verbose', action='store_true', help='Enable verbose output')
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    """Main function for the weak RSA demo."""
    args = parse_args(argv)

    mode = args.mode
    if mode is None:
        choice = input("Select mode (RSA (1), Fermat attack (2), Wiener attack (3)): ")
        try:
            mode = resolve_mode(choice)
        except argparse.ArgumentTypeError as e:
            print(f"Error: {str(e)}")
            return 1

    try:
        config = build_config(mode, args)
    except ValueError as e:
        print(f"Error: {str(e)}")
        return 1

    message = args.message if args.message is not None else DEFAULT_MESSAGES[mode]
    demo = Demo(mode, config, message, search_slack=args.search_slack, verbose=args.verbose)

    start_time = time.time()
    results = demo.run()
    elapsed = time.time() - start_time
    print(f"\nCompleted in {elapsed:.2f} seconds")

    if args.output_file:
        results['timestamp'] = time.time()
        results['elapsed_time'] = elapsed
        try:
            write_report(results, args.output_file, args.output_format)
            print(f"Results saved to {args.output_file}")
        except OSError as e:
            print(f"Error saving results: {str(e)}")

    return 0 if results['success'] else 1


if __name__ == "__main__":
    sys.exit(main())
