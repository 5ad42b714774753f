# src/mlprocess/core/config/__init__.py

"""
Camada de configuração do mlprocess.

Responsabilidades do pacote:
    - Carregamento de arquivos de configuração (YAML/JSON)
    - Resolução da configuração final via deep-merge determinístico
    - Hash canônico para identidade de configuração e de tasks

Princípios fundamentais:
    - Configuração não contém lógica de planejamento
    - Overrides são sempre explícitos
    - A mesma entrada sempre produz a mesma configuração final

Limites explícitos:
    - Não valida semântica de domínio
    - Não interage com Plan Store, Workers ou Tasks
"""

from .defaults import DEFAULT_CONFIG
from .errors import (
    ConfigError,
    ConfigFileNotFoundError,
    ConfigTypeConflictError,
    InvalidConfigRootTypeError,
    UnsupportedConfigFormatError,
)
from .hashing import compute_config_hash
from .loader import resolve_config
from .merge import deep_merge

__all__ = [
    "DEFAULT_CONFIG",
    "ConfigError",
    "ConfigFileNotFoundError",
    "ConfigTypeConflictError",
    "InvalidConfigRootTypeError",
    "UnsupportedConfigFormatError",
    "compute_config_hash",
    "deep_merge",
    "resolve_config",
]
