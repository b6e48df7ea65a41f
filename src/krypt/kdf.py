"""Derivação de chave a partir de senha (PBKDF2-HMAC-SHA256)."""

from typing import Optional

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from .rand import RandomSource, rand_bytes

KDF_ITERATIONS = 4096
KEY_SIZE = 32
SALT_SIZE = 16


def derive_key(passphrase: bytes | str, salt: bytes) -> bytes:
    """Deriva uma chave simétrica de 32 bytes usando PBKDF2.

    Parâmetros fixos: SHA-256, 4096 iterações, 32 bytes de saída. A função
    é determinística: mesma senha e salt sempre produzem a mesma chave.

    Senha vazia é aceita; política de senha é responsabilidade do chamador.
    O chamador também é responsável por descartar a chave retornada.

    Args:
        passphrase: Senha (str é codificada em UTF-8)
        salt: Salt do cofre

    Returns:
        bytes: Chave derivada
    """
    if isinstance(passphrase, str):
        passphrase = passphrase.encode("utf-8")

    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=KEY_SIZE,
        salt=bytes(salt),
        iterations=KDF_ITERATIONS,
    )
    return kdf.derive(bytes(passphrase))


def generate_salt(length: int = SALT_SIZE, source: Optional[RandomSource] = None) -> bytes:
    """Gera um salt aleatório para um novo cofre."""
    return rand_bytes(length, source)
