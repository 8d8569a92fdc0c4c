import json

import pytest

from weakrsa import cli
from weakrsa.primality import PrimalityTest


def test_resolve_mode_aliases():
    assert cli.resolve_mode('1') == 'rsa'
    assert cli.resolve_mode(' 2\n') == 'fermat'
    assert cli.resolve_mode('Wiener') == 'wiener'


def test_unknown_mode_is_a_usage_error():
    with pytest.raises(SystemExit) as info:
        cli.main(['--mode', '7'])
    assert info.value.code == 2


def test_presets_follow_the_menu():
    assert cli.MODE_PRESETS['rsa'].bit_length == 1024
    assert cli.MODE_PRESETS['fermat'].bit_length == 64
    assert cli.MODE_PRESETS['wiener'].bit_length == 512
    assert all(c.primality_test is PrimalityTest.MILLER_RABIN for c in cli.MODE_PRESETS.values())


def test_build_config_overrides():
    args = cli.parse_args(['--bits', '96', '--test', 'fermat', '--probability', '0.9'])
    config = cli.build_config('fermat', args)
    assert config.bit_length == 96
    assert config.primality_test is PrimalityTest.FERMAT
    assert config.min_probability == 0.9
    assert config.vulnerability is cli.MODE_PRESETS['fermat'].vulnerability


def test_rsa_mode(capsys):
    assert cli.main(['--mode', 'rsa', '--bits', '128']) == 0
    out = capsys.readouterr().out
    assert "Decrypted message: 123490" in out


def test_fermat_mode(capsys):
    assert cli.main(['--mode', '2']) == 0
    out = capsys.readouterr().out
    assert "Recovered d:" in out
    assert "matches the original" in out


def test_wiener_mode_json_report(tmp_path, capsys):
    report = tmp_path / "report.json"
    code = cli.main(['--mode', 'wiener', '--bits', '256', '--test', 'solovay-strassen',
                     '--output-file', str(report)])
    assert code == 0

    results = json.loads(report.read_text())
    assert results['success']
    assert results['d_matches']
    assert results['attack']['d'] == results['private_key']['d']
    assert results['attack']['convergents']
    assert results['decrypted'] == 123456789
    assert 'elapsed_time' in results
    assert "k = " in capsys.readouterr().out


def test_text_report(tmp_path):
    report = tmp_path / "report.txt"
    assert cli.main(['--mode', 'rsa', '--bits', '64', '--output-file', str(report),
                     '--output-format', 'text']) == 0
    text = report.read_text()
    assert "Mode: rsa" in text
    assert "Success: True" in text


def test_interactive_mode_selection(monkeypatch, capsys):
    monkeypatch.setattr('builtins.input', lambda prompt='': '1')
    assert cli.main(['--bits', '64']) == 0
    assert "Decrypted message" in capsys.readouterr().out


def test_interactive_unknown_mode(monkeypatch, capsys):
    monkeypatch.setattr('builtins.input', lambda prompt='': '9')
    assert cli.main([]) == 1
    assert "unknown mode" in capsys.readouterr().out


def test_message_too_large_fails(capsys):
    assert cli.main(['--mode', 'rsa', '--bits', '64', '--message', str(2 ** 70)]) == 1
    assert "MessageOutOfRange" in capsys.readouterr().out


def test_recovered_key_is_reported_when_message_is_too_large(tmp_path, capsys):
    report = tmp_path / "report.json"
    code = cli.main(['--mode', 'wiener', '--bits', '256', '--message', str(2 ** 300),
                     '--output-file', str(report)])
    assert code == 1

    results = json.loads(report.read_text())
    assert not results['success']
    assert results['d_matches']
    assert results['attack']['d'] == results['private_key']['d']
    assert 'error' in results
    assert 'ciphertext' not in results
    assert "MessageOutOfRange" in capsys.readouterr().out


def test_invalid_bit_length_fails(capsys):
    assert cli.main(['--mode', 'rsa', '--bits', '33']) == 1
    assert "bit_length" in capsys.readouterr().out


def test_verbose_logging(capsys):
    assert cli.main(['--mode', 'fermat', '--bits', '48', '--verbose']) == 0
    out = capsys.readouterr().out
    assert "[INFO] Attempting Fermat factorization" in out
