"""Exemplo básico de uso do krypt."""

import logging

from krypt import AuthenticationError, KeyManager, KryptConfig, KryptError

# Configurar logging
logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def main():
    """Demonstra login, criptografia e logout."""

    print("\n=== krypt - Exemplo Básico ===\n")

    # 1. Criar configuração com salt aleatório
    print("1. Criando configuração do cofre...")
    config = KryptConfig.generate(logger=logger)
    print(f"   Salt: {config.salt.hex()}")

    # 2. Login (primeiro login cria o verificador)
    print("\n2. Fazendo login...")
    manager = KeyManager(config)
    manager.login("minha-senha-mestra")

    # 3. Criptografar
    print("\n3. Criptografando credencial...")
    envelope = manager.encrypt(b"usuario: john@example.com / senha: super-secret-123")
    print(f"   Envelope: {envelope[:32].hex()}... ({len(envelope)} bytes)")

    # 4. Descriptografar
    print("\n4. Descriptografando...")
    print(f"   Plaintext: {manager.decrypt(envelope)}")

    # 5. Envelope adulterado
    print("\n5. Adulterando o envelope...")
    tampered = envelope[:-1] + bytes([envelope[-1] ^ 0x01])
    try:
        manager.decrypt(tampered)
    except AuthenticationError:
        print("   ✓ Adulteração detectada")

    # 6. Logout e senha errada
    print("\n6. Logout e tentativa com senha errada...")
    manager.logout()
    try:
        manager.login("senha-errada")
    except KryptError as e:
        print(f"   ✓ {e}")

    print("\n=== Exemplo concluído ===\n")


if __name__ == "__main__":
    main()
