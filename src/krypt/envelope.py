"""Envelopes autenticados AES-256-GCM.

Formato (fixo, sem versão):
    [nonce 12B][ciphertext + tag GCM 16B]

Não há campo de tamanho nem dados associados. Quem precisar de versionamento
deve embrulhar o envelope num formato externo.

Nota de segurança:
    Nunca reutilize um nonce com a mesma chave. ``seal`` sempre gera um nonce
    novo; a fonte aleatória só deve ser substituída em testes.
"""

from dataclasses import dataclass, field
from typing import Any, Optional

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from .errors import AuthenticationError, InvalidKeyError, KryptError, MalformedEnvelopeError
from .rand import RandomSource, get_default_source
from .utils import as_key_bytes, zero_buffer

KEY_SIZE = 32  # AES-256
NONCE_SIZE = 12  # 96-bit
TAG_SIZE = 16


@dataclass(frozen=True, eq=False)
class SymmetricKey:
    """Material de chave simétrica com limpeza explícita.

    NOTA DE SEGURANÇA: usa bytearray para permitir zerar a chave via
    :meth:`cleanup`. É segurança de melhor esforço: o Python pode ter deixado
    cópias em memória. Zerar a chave é obrigação do chamador; ``seal`` e
    ``open_envelope`` nunca retêm a chave.

    Pode ser usado como context manager, limpando a chave na saída::

        with SymmetricKey(derive_key(senha, salt)) as key:
            envelope = seal(b"segredo", key)
    """

    material: bytearray = field(repr=False)
    _wiped: bool = field(default=False, init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if not isinstance(self.material, bytearray):
            object.__setattr__(self, "material", bytearray(as_key_bytes(self.material)))
        if len(self.material) != KEY_SIZE:
            raise InvalidKeyError(
                f"Chave deve ter exatamente {KEY_SIZE} bytes, recebido: {len(self.material)}"
            )

    def __bytes__(self) -> bytes:
        if self._wiped:
            raise KryptError("Chave já foi limpa da memória")
        return bytes(self.material)

    def __len__(self) -> int:
        return len(self.material)

    def __enter__(self) -> "SymmetricKey":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.cleanup()

    @property
    def wiped(self) -> bool:
        return self._wiped

    def cleanup(self) -> None:
        """Zera a chave no local. A instância não deve ser usada depois."""
        zero_buffer(self.material)
        object.__setattr__(self, "_wiped", True)


def _check_key(key: Any) -> bytes:
    raw = as_key_bytes(key)
    if len(raw) != KEY_SIZE:
        raise InvalidKeyError(
            f"Chave deve ter exatamente {KEY_SIZE} bytes, recebido: {len(raw)}"
        )
    return raw


def seal(plaintext: bytes, key: Any, source: Optional[RandomSource] = None) -> bytes:
    """Criptografa ``plaintext`` e retorna ``nonce || ciphertext+tag``.

    Args:
        plaintext: Dados a proteger (pode ser vazio)
        key: Chave de 32 bytes (bytes, bytearray ou SymmetricKey)
        source: Fonte aleatória para o nonce (padrão: fonte do processo)

    Returns:
        bytes: Envelope

    Raises:
        InvalidKeyError: Se a chave não tiver 32 bytes
    """
    cipher = AESGCM(_check_key(key))
    nonce = (source or get_default_source()).rand_bytes(NONCE_SIZE)
    return nonce + cipher.encrypt(nonce, bytes(plaintext), None)


def open_envelope(envelope: bytes, key: Any) -> bytes:
    """Verifica e descriptografa um envelope produzido por :func:`seal`.

    Só retorna plaintext após verificação completa da tag; em qualquer falha
    uma exceção é levantada e nenhum dado parcial é devolvido.

    Raises:
        InvalidKeyError: Se a chave não tiver 32 bytes
        MalformedEnvelopeError: Se o envelope for menor que o nonce
        AuthenticationError: Se a tag não conferir (chave errada ou dados corrompidos)
    """
    cipher = AESGCM(_check_key(key))

    envelope = bytes(envelope)
    if len(envelope) < NONCE_SIZE:
        raise MalformedEnvelopeError(
            f"Envelope muito curto: {len(envelope)} bytes (mínimo {NONCE_SIZE})"
        )

    nonce, body = envelope[:NONCE_SIZE], envelope[NONCE_SIZE:]
    try:
        return cipher.decrypt(nonce, body, None)
    except InvalidTag as exc:
        raise AuthenticationError("Falha na autenticação do envelope") from exc


class EnvelopeCipher:
    """Par (chave, fonte aleatória) para várias operações seguidas.

    Não guarda cópias da chave além da referência recebida; para limpar,
    passe um :class:`SymmetricKey` e chame ``cleanup()`` nele.
    """

    def __init__(self, key: Any, source: Optional[RandomSource] = None):
        _check_key(key)
        self._key = key
        self._source = source

    def seal(self, plaintext: bytes) -> bytes:
        return seal(plaintext, self._key, self._source)

    def open(self, envelope: bytes) -> bytes:
        return open_envelope(envelope, self._key)
