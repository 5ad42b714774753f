# src/mlprocess/core/config/hashing.py
"""
Hash canônico de estruturas declarativas do mlprocess.

Usado em dois pontos:
    - identidade da configuração efetiva de um processo
    - fingerprint da declaração de cada task do cenário, que permite ao
      reset `#` detectar tasks alteradas desde a construção do plano

Política de hashing (v1):
    - Serialização JSON canônica (chaves ordenadas, separadores compactos)
    - Codificação UTF-8
    - SHA-256 em hexadecimal
"""

import json
import hashlib
from typing import Dict, Any


def compute_config_hash(config: Dict[str, Any]) -> str:
    """
    Gera um hash determinístico de um dicionário declarativo.

    Invariantes:
        - O valor retornado é uma string hexadecimal de 64 caracteres
        - Dicionários estruturalmente equivalentes produzem o mesmo hash,
          independentemente da ordem original das chaves
        - Nenhuma mutação ocorre sobre o input

    Args:
        config (Dict[str, Any]): Estrutura a ser identificada.

    Returns:
        str: Hash SHA-256 hexadecimal.

    Raises:
        TypeError: Se o objeto fornecido não for um dicionário.
    """
    if not isinstance(config, dict):
        raise TypeError(
            f"Estrutura para hashing deve ser dict, recebido: {type(config).__name__}"
        )

    canonical_json = json.dumps(
        config,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
    )

    return hashlib.sha256(canonical_json.encode("utf-8")).hexdigest()
