"""Fonte de bytes aleatórios para nonces e salts."""

import logging
import secrets
from threading import Lock
from typing import Callable, Optional

from .errors import KryptError

logger = logging.getLogger(__name__)


class RandomSource:
    """Fonte de bytes imprevisíveis com inicialização única e thread-safe.

    Por padrão usa :func:`secrets.token_bytes` (CSPRNG do sistema, sem seed
    manual). Um ``generator`` alternativo pode ser injetado, por exemplo para
    fixar nonces em testes.

    Attributes:
        generator: Callable ``(n) -> bytes``; resolvido na primeira chamada
    """

    def __init__(self, generator: Optional[Callable[[int], bytes]] = None) -> None:
        self._generator = generator
        self._ready = False
        self._lock = Lock()

    def _initialize(self) -> None:
        with self._lock:
            if self._ready:
                return
            if self._generator is None:
                self._generator = secrets.token_bytes
            self._ready = True
        logger.debug("Fonte aleatória inicializada: %s", getattr(self._generator, "__name__", self._generator))

    @property
    def initialized(self) -> bool:
        return self._ready

    def rand_bytes(self, n: int) -> bytes:
        """Retorna exatamente ``n`` bytes aleatórios.

        Raises:
            ValueError: Se ``n`` for negativo
            KryptError: Se o gerador devolver tamanho diferente de ``n``
        """
        if n < 0:
            raise ValueError(f"Quantidade de bytes deve ser >= 0, recebido: {n}")

        if not self._ready:
            self._initialize()

        data = self._generator(n)
        if len(data) != n:
            raise KryptError(f"Gerador aleatório retornou {len(data)} bytes, esperado {n}")
        return bytes(data)


_default_source: Optional[RandomSource] = None
_default_lock = Lock()


def get_default_source() -> RandomSource:
    """Retorna a fonte aleatória do processo, criada uma única vez."""
    global _default_source
    if _default_source is None:
        with _default_lock:
            if _default_source is None:
                _default_source = RandomSource()
    return _default_source


def rand_bytes(n: int, source: Optional[RandomSource] = None) -> bytes:
    """Atalho para ``(source or get_default_source()).rand_bytes(n)``."""
    return (source or get_default_source()).rand_bytes(n)
