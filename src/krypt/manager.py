"""KeyManager - Sessão de login sobre a derivação de chave e os envelopes."""

import logging
from threading import Lock
from typing import Optional

from .config import KryptConfig
from .envelope import open_envelope, seal
from .errors import AuthenticationError, KryptError
from .kdf import derive_key
from .keystore import KeyStore, MemoryKeyStore
from .rand import RandomSource

VERIFIER_SENTINEL = b"krypt-master-key"


class AtomicCounter:
    """Contador thread-safe para estatísticas.

    Usa lock para garantir incremento e leitura atômicos sob acesso concorrente.
    """

    def __init__(self) -> None:
        """Inicializa o contador com zero."""
        self._value = 0
        self._lock = Lock()

    def increment(self) -> None:
        """Incrementa o contador em 1 de forma atômica."""
        with self._lock:
            self._value += 1

    def value(self) -> int:
        """Lê o valor atual de forma atômica.

        Returns:
            int: Valor atual do contador
        """
        with self._lock:
            return self._value


class KeyManager:
    """Gerenciador de sessão do cofre.

    Esta classe fornece:
    - Login com senha mestra (PBKDF2 + verificador selado)
    - Logout limpando a chave do armazenamento
    - Criptografia/descriptografia com a chave da sessão
    - Auditoria configurável via callbacks
    - Estatísticas de uso

    A chave nunca é mantida pelo manager; ela vive apenas no ``store``.

    Attributes:
        config: Configuração do cofre
        store: Armazenamento da chave de sessão
    """

    def __init__(
        self,
        config: KryptConfig,
        store: Optional[KeyStore] = None,
        source: Optional[RandomSource] = None,
    ):
        """Inicializa o KeyManager.

        Args:
            config: Configuração do cofre
            store: Armazenamento da chave (padrão: MemoryKeyStore)
            source: Fonte aleatória para nonces (padrão: fonte do processo)
        """
        self.config = config
        self.store = store if store is not None else MemoryKeyStore()
        self._source = source
        self._logger = config.logger or logging.getLogger(__name__)

        self._stats = {
            "encryptions": AtomicCounter(),
            "decryptions": AtomicCounter(),
            "logins": AtomicCounter(),
            "failed_logins": AtomicCounter(),
        }

    def is_logged_in(self) -> bool:
        """Retorna True se houver chave de sessão no armazenamento."""
        return bool(self.store.get_key())

    def login(self, passphrase: bytes | str) -> None:
        """Deriva a chave da senha mestra e a grava no armazenamento.

        No primeiro login o verificador é criado em ``config.verifier``; nos
        seguintes ele é aberto para confirmar a senha. Persistir a config
        (``config.to_file``) fica a cargo do chamador.

        Raises:
            KryptError: Se a senha não conferir com o verificador
        """
        key = derive_key(passphrase, self.config.salt)

        if self.config.verifier:
            try:
                open_envelope(self.config.verifier, key)
            except AuthenticationError as exc:
                self._stats["failed_logins"].increment()
                self._audit("login_failed", {})
                raise KryptError("Senha mestra inválida") from exc
        else:
            self.config.verifier = seal(VERIFIER_SENTINEL, key, self._source)
            self._logger.info("Verificador de senha mestra criado")

        self.store.set_key(key)
        self._stats["logins"].increment()
        self._audit("login", {})
        self._logger.info("Login realizado")

    def logout(self) -> None:
        """Encerra a sessão gravando uma chave vazia no armazenamento.

        Raises:
            KryptError: Se não houver sessão ativa
        """
        if not self.is_logged_in():
            raise KryptError("Você não está conectado")

        self.store.set_key(b"")
        self._audit("logout", {})
        self._logger.info("Logout realizado")

    def _session_key(self) -> bytes:
        key = self.store.get_key()
        if not key:
            raise KryptError("Sessão não iniciada; chame login() primeiro")
        return key

    def encrypt(self, plaintext: bytes) -> bytes:
        """Sela ``plaintext`` com a chave da sessão.

        Examples:
            >>> envelope = manager.encrypt(b"sensitive data")
        """
        envelope = seal(plaintext, self._session_key(), self._source)

        self._stats["encryptions"].increment()
        self._audit("encryption", {"size": len(plaintext)})
        return envelope

    def decrypt(self, envelope: bytes) -> bytes:
        """Abre ``envelope`` com a chave da sessão.

        Erros de envelope (InvalidKeyError, MalformedEnvelopeError,
        AuthenticationError) são propagados sem alteração.
        """
        plaintext = open_envelope(envelope, self._session_key())

        self._stats["decryptions"].increment()
        self._audit("decryption", {"size": len(envelope)})
        return plaintext

    def _audit(self, event: str, metadata: dict) -> None:
        """Registra evento de auditoria se callback configurado.

        Args:
            event: Nome do evento (e.g., "login", "encryption", "logout")
            metadata: Metadados do evento (nunca contém material de chave)
        """
        if self.config.audit_callback:
            try:
                self.config.audit_callback(event, metadata)
            except Exception as e:
                self._logger.warning(f"Erro no callback de auditoria: {e}")

    def get_statistics(self) -> dict:
        """Retorna estatísticas de uso.

        Examples:
            >>> stats = manager.get_statistics()
            >>> print(f"Encryptions: {stats['encryptions']}")
        """
        return {name: counter.value() for name, counter in self._stats.items()}

    def cleanup(self) -> None:
        """Limpa a chave de sessão do armazenamento (melhor esforço)."""
        self.store.set_key(b"")
        self._logger.info("Chave de sessão removida da memória")
