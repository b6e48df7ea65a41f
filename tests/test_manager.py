"""Testes para KeyManager."""

import logging

import pytest

from krypt import (
    AuthenticationError,
    KeyManager,
    KryptConfig,
    KryptError,
    MalformedEnvelopeError,
    MemoryKeyStore,
    derive_key,
    open_envelope,
)
from krypt.manager import VERIFIER_SENTINEL, AtomicCounter


def make_manager(**kwargs):
    config = KryptConfig(salt=b"\x01\x02salt", **kwargs)
    return KeyManager(config)


def test_manager_login_encrypt_decrypt():
    """Testa fluxo básico de login, criptografia e descriptografia."""
    manager = make_manager()
    manager.login("senha-mestra")

    envelope = manager.encrypt(b"sensitive data")

    assert envelope != b"sensitive data"
    assert manager.decrypt(envelope) == b"sensitive data"


def test_manager_first_login_creates_verifier():
    """Testa que o primeiro login cria o verificador selado."""
    manager = make_manager()
    assert manager.config.verifier is None

    manager.login(b"pw")

    key = derive_key(b"pw", manager.config.salt)
    assert open_envelope(manager.config.verifier, key) == VERIFIER_SENTINEL
    assert manager.store.get_key() == key


def test_manager_login_wrong_passphrase():
    """Testa que senha errada é rejeitada pelo verificador."""
    manager = make_manager()
    manager.login(b"certa")
    manager.logout()

    with pytest.raises(KryptError, match="Senha mestra inválida") as excinfo:
        manager.login(b"errada")

    assert isinstance(excinfo.value.__cause__, AuthenticationError)
    assert not manager.is_logged_in()
    assert manager.get_statistics()["failed_logins"] == 1


def test_manager_relogin_recovers_same_key():
    """Testa que a mesma senha recupera dados de uma sessão anterior."""
    config = KryptConfig(salt=b"\x01\x02salt")
    first = KeyManager(config)
    first.login(b"pw")
    envelope = first.encrypt(b"record")
    first.logout()

    second = KeyManager(config)
    second.login(b"pw")

    assert second.decrypt(envelope) == b"record"


def test_manager_logout():
    """Testa logout limpando a chave do armazenamento."""
    store = MemoryKeyStore()
    manager = KeyManager(KryptConfig(salt=b"\x01\x02salt"), store=store)
    manager.login(b"pw")
    assert manager.is_logged_in()

    manager.logout()

    assert store.get_key() == b""
    assert not manager.is_logged_in()


def test_manager_logout_not_logged_in():
    """Testa erro de logout sem sessão."""
    with pytest.raises(KryptError, match="não está conectado"):
        make_manager().logout()


def test_manager_requires_session():
    """Testa que encrypt/decrypt exigem login."""
    manager = make_manager()

    with pytest.raises(KryptError, match="Sessão não iniciada"):
        manager.encrypt(b"data")
    with pytest.raises(KryptError, match="Sessão não iniciada"):
        manager.decrypt(b"\x00" * 40)


def test_manager_decrypt_propagates_envelope_errors():
    """Testa que erros de envelope são propagados sem alteração."""
    manager = make_manager()
    manager.login(b"pw")

    with pytest.raises(MalformedEnvelopeError):
        manager.decrypt(b"short")

    envelope = bytearray(manager.encrypt(b"data"))
    envelope[-1] ^= 0x01
    with pytest.raises(AuthenticationError):
        manager.decrypt(bytes(envelope))


def test_manager_uses_external_store():
    """Testa que a chave é lida do armazenamento a cada operação."""
    store = MemoryKeyStore()
    manager = KeyManager(KryptConfig(salt=b"\x01\x02salt"), store=store)

    store.set_key(derive_key(b"pw", b"\x01\x02salt"))

    assert manager.is_logged_in()
    assert manager.decrypt(manager.encrypt(b"x")) == b"x"


def test_manager_statistics():
    """Testa estatísticas de uso."""
    manager = make_manager()
    manager.login(b"pw")

    env1 = manager.encrypt(b"data1")
    manager.encrypt(b"data2")
    manager.decrypt(env1)

    stats = manager.get_statistics()

    assert stats["encryptions"] == 2
    assert stats["decryptions"] == 1
    assert stats["logins"] == 1
    assert stats["failed_logins"] == 0


def test_manager_audit_callback():
    """Testa callback de auditoria sem material de chave."""
    audit_log = []

    manager = make_manager(audit_callback=lambda event, metadata: audit_log.append((event, metadata)))
    manager.login(b"pw")
    manager.encrypt(b"test data")
    manager.logout()

    assert [event for event, _ in audit_log] == ["login", "encryption", "logout"]
    assert audit_log[1][1] == {"size": 9}


def test_manager_audit_callback_exception(caplog):
    """Testa que exceções no callback de auditoria são tratadas."""

    def callback(event, metadata):
        raise RuntimeError("audit fail")

    caplog.set_level(logging.WARNING)
    manager = make_manager(audit_callback=callback)
    manager.login(b"pw")

    assert manager.is_logged_in()
    assert "Erro no callback de auditoria" in caplog.text


def test_manager_custom_logger():
    """Testa uso de logger customizado."""
    logger = logging.getLogger("test_logger")

    manager = make_manager(logger=logger)

    assert manager._logger == logger


def test_manager_cleanup():
    """Testa limpeza da chave de sessão."""
    manager = make_manager()
    manager.login(b"pw")

    manager.cleanup()

    assert not manager.is_logged_in()


def test_atomic_counter():
    """Testa contador atômico."""
    counter = AtomicCounter()
    counter.increment()
    counter.increment()

    assert counter.value() == 2


def test_manager_login_after_config_replaced_in_file(tmp_path):
    """Testa login com a senha certa após trocar a config no mesmo arquivo."""
    env_file = tmp_path / ".env"
    old = KeyManager(KryptConfig(salt=b"salt-antigo"))
    old.login(b"pw")
    old.config.to_file(str(env_file))

    KryptConfig.generate().to_file(str(env_file), append=True)
    manager = KeyManager(KryptConfig.from_file(str(env_file)))
    manager.login(b"pw")

    assert manager.is_logged_in()
