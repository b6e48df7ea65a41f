"""Hierarquia de exceções do krypt."""


class KryptError(Exception):
    """Erro base do krypt."""

    pass


class InvalidKeyError(KryptError, ValueError):
    """Tamanho da chave diferente do exigido pela cifra (sempre erro de configuração)."""

    pass


class MalformedEnvelopeError(KryptError, ValueError):
    """Envelope menor que o nonce; entrada corrompida ou estranha."""

    pass


class AuthenticationError(KryptError):
    """Falha na verificação AEAD.

    Cobre tanto chave errada quanto ciphertext corrompido; as duas causas
    são indistinguíveis.
    """

    pass
