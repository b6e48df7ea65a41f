"""Funções auxiliares para o krypt."""

import base64
import os
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterator, Mapping, TextIO

from dotenv import dotenv_values

from .hashing import fingerprint_hex


ENV_CHECKSUM_KEY = "KRYPT_ENV_CHECKSUM"


def as_key_bytes(key: Any) -> bytes:
    """Converte material de chave aceito (bytes, bytearray, memoryview, SymmetricKey) em bytes.

    Raises:
        TypeError: Se o tipo não for suportado
    """
    if isinstance(key, bytes):
        return key
    if isinstance(key, (bytearray, memoryview)):
        return bytes(key)
    if hasattr(key, "__bytes__"):
        return bytes(key)
    raise TypeError(f"Chave deve ser bytes, recebido: {type(key)}")


def zero_buffer(buffer: bytearray) -> None:
    """Sobrescreve o bytearray com zeros, no local."""
    for i in range(len(buffer)):
        buffer[i] = 0


def escape_env_value(value: str) -> str:
    """Escapa valores para escrita segura em arquivos .env."""
    return value.replace("\\", "\\\\").replace('"', '\\"')


def compute_env_checksum(values: Mapping[str, str]) -> str:
    """Calcula checksum SHA256 determinístico para um mapeamento .env."""
    lines = [
        f"{key}={values[key]}"
        for key in sorted(values)
        if key != ENV_CHECKSUM_KEY and values[key] is not None
    ]
    return fingerprint_hex("\n".join(lines).encode("utf-8"))


def parse_env_stream(stream: TextIO) -> Dict[str, str]:
    """Parseia um stream .env usando python-dotenv."""
    return {k: v for k, v in dotenv_values(stream=stream).items() if v is not None}


def parse_env_file(path: Path) -> Dict[str, str]:
    """Parseia um arquivo .env usando python-dotenv."""
    with path.open("r", encoding="utf-8", errors="strict") as f:
        return parse_env_stream(f)


def _lock_file(file_handle: TextIO, unlock: bool = False) -> None:
    if os.name == "nt":
        import msvcrt

        file_handle.seek(0)
        mode = msvcrt.LK_UNLCK if unlock else msvcrt.LK_LOCK
        msvcrt.locking(file_handle.fileno(), mode, 1)
        return

    import fcntl

    fcntl.flock(file_handle.fileno(), fcntl.LOCK_UN if unlock else fcntl.LOCK_EX)


@contextmanager
def locked_file(path: Path) -> Iterator[TextIO]:
    """Abre o arquivo com lock exclusivo enquanto estiver em uso (melhor esforço)."""
    file_handle = path.open("a+", encoding="utf-8", errors="strict")
    _lock_file(file_handle)
    try:
        yield file_handle
    finally:
        _lock_file(file_handle, unlock=True)
        file_handle.close()


def normalize_salt(salt: Any) -> bytes:
    """Converte salt de diversos formatos para bytes.

    Ordem de tentativa para str: hexadecimal, base64 urlsafe, UTF-8.

    Args:
        salt: Salt como bytes, bytearray ou str

    Returns:
        bytes: Salt convertido

    Raises:
        TypeError: Se salt não for str ou bytes

    Examples:
        >>> normalize_salt(b"salt")
        b'salt'
        >>> normalize_salt("73616c74")
        b'salt'
        >>> normalize_salt("c2FsdA==")
        b'salt'
    """
    if isinstance(salt, (bytes, bytearray)):
        return bytes(salt)

    if not isinstance(salt, str):
        raise TypeError(f"Salt deve ser str ou bytes, recebido: {type(salt)}")

    if len(salt) % 2 == 0:
        try:
            return bytes.fromhex(salt)
        except ValueError:
            pass

    try:
        return base64.urlsafe_b64decode(salt.encode("ascii"))
    except (ValueError, UnicodeEncodeError):
        pass

    return salt.encode("utf-8")
