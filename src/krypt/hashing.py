"""Fingerprint SHA-256 para checagem de integridade de dados não secretos."""

import hashlib

FINGERPRINT_SIZE = 32


def fingerprint(data: bytes) -> bytes:
    """Retorna o digest SHA-256 (32 bytes) de ``data``.

    Não use para material secreto de baixa entropia (senhas); para isso
    existe :func:`krypt.kdf.derive_key`.
    """
    return hashlib.sha256(data).digest()


def fingerprint_hex(data: bytes) -> str:
    """Mesmo que :func:`fingerprint`, em hexadecimal."""
    return hashlib.sha256(data).hexdigest()
