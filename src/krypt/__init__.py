"""krypt - Núcleo criptográfico de um gerenciador de senhas local.

Este pacote fornece:
- Derivação de chave PBKDF2-HMAC-SHA256 (4096 iterações, 32 bytes)
- Envelopes autenticados AES-256-GCM (nonce || ciphertext+tag)
- Fonte aleatória com inicialização única thread-safe
- Fingerprint SHA-256 para dados não secretos
- Sessão de login/logout com verificador de senha
"""

from .config import KryptConfig
from .envelope import (
    KEY_SIZE,
    NONCE_SIZE,
    TAG_SIZE,
    EnvelopeCipher,
    SymmetricKey,
    open_envelope,
    seal,
)
from .errors import AuthenticationError, InvalidKeyError, KryptError, MalformedEnvelopeError
from .hashing import fingerprint, fingerprint_hex
from .kdf import KDF_ITERATIONS, derive_key, generate_salt
from .keystore import KeyStore, MemoryKeyStore
from .manager import KeyManager
from .rand import RandomSource, get_default_source, rand_bytes
from .utils import normalize_salt

__version__ = "0.1.0"

__all__ = [
    # Operações principais
    "derive_key",
    "generate_salt",
    "seal",
    "open_envelope",
    "rand_bytes",
    "fingerprint",
    "fingerprint_hex",
    # Classes
    "SymmetricKey",
    "EnvelopeCipher",
    "RandomSource",
    "get_default_source",
    "KeyManager",
    "KeyStore",
    "MemoryKeyStore",
    "KryptConfig",
    # Erros
    "KryptError",
    "InvalidKeyError",
    "MalformedEnvelopeError",
    "AuthenticationError",
    # Constantes
    "KEY_SIZE",
    "NONCE_SIZE",
    "TAG_SIZE",
    "KDF_ITERATIONS",
    # Utilidades
    "normalize_salt",
]
