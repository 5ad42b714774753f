# src/mlprocess/core/config/errors.py
"""
Exceções canônicas da camada de configuração do mlprocess.

Este módulo define a hierarquia de exceções levantadas durante o
carregamento e a resolução da configuração de um processo (scheduler,
Plan Store e logging).

Princípios fundamentais:
    - Exceções são tipadas e semânticas
    - Erros estruturais de configuração são fatais para o processo
    - Mensagens de erro apontam o arquivo ou a chave problemática

Invariantes:
    - Todas as exceções de configuração herdam de `ConfigError`
    - Nenhuma exceção aqui representa falha de execução de Task

Limites explícitos:
    - Não realiza fallback ou recovery
    - Não depende de Plan Store, Worker ou CLI
"""


class ConfigError(Exception):
    """
    Exceção base para erros de configuração do mlprocess.

    Permite captura genérica pela CLI, que converte qualquer `ConfigError`
    em erro de parâmetro (código de saída 1).
    """


class ConfigFileNotFoundError(ConfigError):
    """
    Arquivo de configuração declarado explicitamente não existe.

    Decisões arquiteturais:
        - Um arquivo informado pelo operador é obrigatório
        - A ausência não é silenciosamente ignorada

    Limites explícitos:
        - Não tenta inferir caminhos alternativos
    """


class UnsupportedConfigFormatError(ConfigError):
    """
    Formato de arquivo não suportado pelo loader.

    Formatos suportados (v1):
        - YAML (.yaml, .yml)
        - JSON (.json)
    """


class InvalidConfigRootTypeError(ConfigError):
    """
    O conteúdo raiz do arquivo não é um dicionário (`dict`).

    Invariantes:
        - O loader só opera sobre mapas chave-valor
    """


class ConfigTypeConflictError(ConfigError):
    """
    Conflito de tipos durante o deep-merge.

    Exemplo de conflito:
        - base:     {"scheduler": {"threads": 1}}
        - override: {"scheduler": "fast"}

    Invariantes:
        - Nenhum merge parcial é produzido em caso de conflito
    """
