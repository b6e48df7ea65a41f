"""Interface do armazenamento da chave de sessão.

O krypt só troca bytes opacos com o armazenamento; onde a chave fica
(arquivo, keyring, memória) é decisão do chamador. Chave vazia significa
sessão encerrada.
"""

from threading import Lock
from typing import Protocol, runtime_checkable

from .utils import zero_buffer


@runtime_checkable
class KeyStore(Protocol):
    """Acesso à chave derivada/armazenada."""

    def get_key(self) -> bytes: ...

    def set_key(self, key: bytes) -> None: ...


class MemoryKeyStore:
    """KeyStore em memória; a chave anterior é zerada ao ser substituída."""

    def __init__(self, key: bytes = b"") -> None:
        self._key = bytearray(key)
        self._lock = Lock()

    def get_key(self) -> bytes:
        with self._lock:
            return bytes(self._key)

    def set_key(self, key: bytes) -> None:
        with self._lock:
            zero_buffer(self._key)
            self._key = bytearray(key)
