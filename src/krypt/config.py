"""Configuração do cofre: salt, hash de integridade e verificador de senha."""

import base64
import os
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Optional, Self

from .hashing import fingerprint_hex
from .kdf import SALT_SIZE, generate_salt
from .rand import RandomSource
from .utils import (
    ENV_CHECKSUM_KEY,
    compute_env_checksum,
    escape_env_value,
    locked_file,
    normalize_salt,
    parse_env_file,
    parse_env_stream,
)

SALT_ENV_KEY = "KRYPT_SALT"
SALT_HASH_ENV_KEY = "KRYPT_SALT_HASH"
VERIFIER_ENV_KEY = "KRYPT_VERIFIER"


@dataclass
class KryptConfig:
    """Configuração do KeyManager.

    O salt não é secreto, mas deve ser o mesmo em todas as derivações do
    mesmo cofre; por isso é persistido junto (e separado) da chave.

    Attributes:
        salt: Salt da derivação (bytes, hex ou base64; normalizado para bytes)
        salt_hash: Hash SHA256 do salt para validação de integridade (opcional)
        verifier: Envelope de verificação da senha mestra (opcional)
        verify_salt_integrity: Se deve validar hash do salt (padrão: True)
        audit_callback: Callback opcional para auditoria de eventos
        logger: Logger opcional (usa logging padrão se None)
    """

    salt: bytes
    salt_hash: Optional[str] = None
    verifier: Optional[bytes] = None
    verify_salt_integrity: bool = True
    audit_callback: Optional[Callable] = None
    logger: Optional[Any] = None  # logging.Logger

    def __post_init__(self) -> None:
        """Valida configuração após inicialização."""
        try:
            self.salt = normalize_salt(self.salt)
        except TypeError as exc:
            raise TypeError("Salt deve ser bytes ou str") from exc

        if not self.salt:
            raise ValueError("Salt não pode ser vazio")

        if isinstance(self.verifier, str):
            self.verifier = base64.urlsafe_b64decode(self.verifier.encode("ascii"))

        if self.salt_hash and self.verify_salt_integrity:
            computed = fingerprint_hex(self.salt)
            if computed != self.salt_hash:
                raise ValueError(
                    f"Integridade do salt comprometida. "
                    f"Hash esperado: {self.salt_hash}, calculado: {computed}"
                )

    @classmethod
    def generate(
        cls,
        salt_size: int = SALT_SIZE,
        source: Optional[RandomSource] = None,
        **kwargs: Any,
    ) -> Self:
        """Cria configuração nova com salt aleatório.

        Args:
            salt_size: Tamanho do salt em bytes (padrão: 16)
            source: Fonte aleatória (padrão: fonte do processo)
            **kwargs: Argumentos adicionais para KryptConfig
        """
        salt = generate_salt(salt_size, source)
        return cls(salt=salt, salt_hash=fingerprint_hex(salt), **kwargs)

    @classmethod
    def from_environment(
        cls,
        salt_key: str = SALT_ENV_KEY,
        salt_hash_key: str = SALT_HASH_ENV_KEY,
        verifier_key: str = VERIFIER_ENV_KEY,
        **kwargs: Any,
    ) -> Self:
        """Cria configuração a partir de variáveis de ambiente.

        Formato esperado:
            KRYPT_SALT=<base64 urlsafe>
            KRYPT_SALT_HASH=sha256-hash (opcional)
            KRYPT_VERIFIER=<base64 urlsafe> (opcional)

        Raises:
            ValueError: Se o salt não estiver definido ou for inválido
        """
        return cls._from_mapping(
            os.environ,
            salt_key=salt_key,
            salt_hash_key=salt_hash_key,
            verifier_key=verifier_key,
            **kwargs,
        )

    @classmethod
    def from_file(
        cls,
        filename: str,
        salt_key: str = SALT_ENV_KEY,
        salt_hash_key: str = SALT_HASH_ENV_KEY,
        verifier_key: str = VERIFIER_ENV_KEY,
        **kwargs: Any,
    ) -> Self:
        """Cria configuração a partir de um arquivo .env.

        Se o arquivo tiver ``KRYPT_ENV_CHECKSUM``, o checksum é validado.

        Raises:
            FileNotFoundError: Se o arquivo não existir
            ValueError: Se o checksum ou a configuração forem inválidos
        """
        env_path = Path(filename)
        if not env_path.exists():
            raise FileNotFoundError(f"Arquivo .env não encontrado: {filename}")

        data = parse_env_file(env_path)
        checksum = data.get(ENV_CHECKSUM_KEY)
        if checksum and compute_env_checksum(data) != checksum:
            raise ValueError("Checksum do arquivo .env inválido")

        return cls._from_mapping(
            data,
            salt_key=salt_key,
            salt_hash_key=salt_hash_key,
            verifier_key=verifier_key,
            **kwargs,
        )

    @classmethod
    def _from_mapping(
        cls,
        mapping: Mapping[str, str],
        salt_key: str = SALT_ENV_KEY,
        salt_hash_key: str = SALT_HASH_ENV_KEY,
        verifier_key: str = VERIFIER_ENV_KEY,
        **kwargs: Any,
    ) -> Self:
        """Cria configuração a partir de um mapeamento de variáveis."""
        # Remover aspas (problema comum com dotenv)
        values = {k: v.strip("\"'") for k, v in mapping.items() if v}

        salt_value = values.get(salt_key)
        if not salt_value:
            raise ValueError(f"Salt não encontrado. Esperado: {salt_key}")

        # Formato gravado por to_file: base64 urlsafe, sem adivinhação
        try:
            salt = base64.urlsafe_b64decode(salt_value.encode("ascii"))
        except (ValueError, UnicodeEncodeError) as exc:
            raise ValueError(f"Salt em {salt_key} deve estar em base64 urlsafe") from exc

        return cls(
            salt=salt,
            salt_hash=values.get(salt_hash_key),
            verifier=values.get(verifier_key),
            **kwargs,
        )

    def to_file(self, filename: str, append: bool = False) -> None:
        """Persiste salt, hash e verificador em um arquivo .env.

        Args:
            filename: Caminho do arquivo .env
            append: Se True, preserva variáveis existentes no arquivo

        Valores binários são gravados em base64 urlsafe.
        Usa lock de arquivo de melhor esforço; não é garantido em todos os sistemas.
        """
        data: Dict[str, str] = {}

        with locked_file(Path(filename)) as f:
            if append:
                f.seek(0)
                data.update(parse_env_stream(f))

            data[SALT_ENV_KEY] = base64.urlsafe_b64encode(self.salt).decode("ascii")
            data[SALT_HASH_ENV_KEY] = fingerprint_hex(self.salt)
            if self.verifier:
                data[VERIFIER_ENV_KEY] = base64.urlsafe_b64encode(self.verifier).decode("ascii")
            else:
                # Verificador de outro salt não vale para este
                data.pop(VERIFIER_ENV_KEY, None)
            data[ENV_CHECKSUM_KEY] = compute_env_checksum(data)

            f.seek(0)
            f.truncate()
            timestamp = datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S UTC")
            f.write(f"# Atualizado em {timestamp}\n")
            for k, v in sorted(data.items()):
                f.write(f'{k}="{escape_env_value(v)}"\n')
