# src/mlprocess/core/config/loader.py
"""
Loader canônico de configuração do mlprocess.

A configuração efetiva de um processo é resolvida, nesta ordem de
precedência crescente, a partir de:
    - `DEFAULT_CONFIG` (embutido no pacote)
    - um arquivo do operador (opcional, YAML ou JSON)
    - overrides explícitos da linha de comando (threads, verbosidade, ...)

Responsabilidades do módulo:
    - Carregar arquivos de configuração em YAML ou JSON
    - Validar requisitos estruturais mínimos (tipo raiz)
    - Resolver a configuração final via deep-merge determinístico

Princípios fundamentais:
    - Configuração é declarativa e explícita
    - Erros estruturais são tratados como falhas fatais
    - A mesma entrada sempre produz a mesma configuração final

Limites explícitos:
    - Não valida semântica (ex.: threads >= 1 é validado pela CLI)
    - Não interage com Plan Store ou Workers
"""

from pathlib import Path
from typing import Any, Dict, Optional, Union
import json

import yaml  # PyYAML

from .defaults import DEFAULT_CONFIG
from .merge import deep_merge
from .errors import (
    ConfigFileNotFoundError,
    InvalidConfigRootTypeError,
    UnsupportedConfigFormatError,
)


def _load_file(path: Path) -> Dict[str, Any]:
    """
    Carrega um arquivo YAML/JSON e valida sua estrutura básica.

    Decisões arquiteturais:
        - O arquivo deve existir no momento do carregamento
        - Arquivos vazios são interpretados como dicionários vazios
        - O conteúdo raiz deve ser um dicionário (`dict`)

    Raises:
        ConfigFileNotFoundError: Se o arquivo não existir.
        UnsupportedConfigFormatError: Se o formato do arquivo não for suportado.
        InvalidConfigRootTypeError: Se o conteúdo raiz não for um dicionário.
    """
    if not path.exists():
        raise ConfigFileNotFoundError(f"Arquivo de configuração não encontrado: {path}")

    suffix = path.suffix.lower()

    if suffix in {".yaml", ".yml"}:
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    elif suffix == ".json":
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)
    else:
        raise UnsupportedConfigFormatError(f"Formato não suportado: {path.suffix}")

    if data is None:
        data = {}

    if not isinstance(data, dict):
        raise InvalidConfigRootTypeError(
            f"Config root deve ser dict, recebido: {type(data).__name__}"
        )

    return data


def resolve_config(
    *,
    config_path: Optional[Union[str, Path]] = None,
    overrides: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """
    Resolve a configuração efetiva de um processo.

    Args:
        config_path: Arquivo do operador (YAML/JSON). Se informado, deve existir.
        overrides: Overrides explícitos (tipicamente derivados da CLI).

    Returns:
        Dict[str, Any]: `DEFAULT_CONFIG` ⟵ arquivo ⟵ overrides.

    Raises:
        ConfigError: Qualquer falha estrutural de carregamento ou merge.
    """
    effective: Dict[str, Any] = deep_merge(DEFAULT_CONFIG, {})

    if config_path is not None:
        effective = deep_merge(effective, _load_file(Path(config_path)))

    if overrides:
        effective = deep_merge(effective, overrides)

    return effective
