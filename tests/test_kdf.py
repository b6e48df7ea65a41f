"""Testes para derivação de chave."""

import hashlib

from krypt import KDF_ITERATIONS, RandomSource, derive_key, generate_salt


def test_derive_key_known_vector():
    """Testa vetor conhecido PBKDF2-HMAC-SHA256 (password/salt/4096/32)."""
    key = derive_key(b"password", b"salt")

    assert key.hex() == "c5e478d59288c841aa530db6845c4c8d962893a001ce4e11a4963873aa98134a"


def test_derive_key_matches_hashlib():
    """Testa que os parâmetros fixos batem com hashlib.pbkdf2_hmac."""
    expected = hashlib.pbkdf2_hmac("sha256", b"senha", b"salt-do-cofre", KDF_ITERATIONS, 32)

    assert derive_key(b"senha", b"salt-do-cofre") == expected


def test_derive_key_deterministic():
    """Testa que mesma senha e salt produzem a mesma chave."""
    assert derive_key(b"pw", b"s1") == derive_key(b"pw", b"s1")


def test_derive_key_salt_changes_key():
    """Testa que salts diferentes produzem chaves diferentes."""
    assert derive_key(b"pw", b"s1") != derive_key(b"pw", b"s2")


def test_derive_key_str_passphrase():
    """Testa que str é codificada em UTF-8."""
    assert derive_key("senhá", b"salt") == derive_key("senhá".encode("utf-8"), b"salt")


def test_derive_key_empty_passphrase():
    """Testa que senha vazia é aceita (política é do chamador)."""
    key = derive_key(b"", b"salt")

    assert len(key) == 32


def test_generate_salt_uses_source():
    """Testa geração de salt com fonte injetada."""
    source = RandomSource(lambda n: b"\x07" * n)

    assert generate_salt(source=source) == b"\x07" * 16
    assert len(generate_salt(24)) == 24
