# mei_facil/core/errors.py
from typing import List, Optional


class MeiFacilError(Exception):
    """Erro base da aplicação."""


class FetchError(MeiFacilError):
    """Falha ao ler dados do armazenamento."""


class PersistError(MeiFacilError):
    """Falha ao gravar dados no armazenamento."""


class ValidationError(MeiFacilError):
    """Configuração de relatório ou transação com campos obrigatórios ausentes ou inválidos."""

    def __init__(self, message: str, missing_fields: Optional[List[str]] = None):
        super().__init__(message)
        self.missing_fields = missing_fields or []


class AccessDeniedError(MeiFacilError):
    """Recurso exclusivo do plano Pro solicitado sem acesso."""
