# src/mlprocess/core/planning/patterns.py
"""
Padrões de nomes de arquivo usados na expansão de tasks.

Classes de padrão (decididas pela sequência de `*` no nome do arquivo):
    - `*`   TRANSITIVE → um clone por token, propagado aos dependentes
    - `**`  LOCAL      → lista de arquivos no próprio nó, sem clones
    - `***` CARTESIAN  → multiplica os clones pelas correspondências

Regras de correspondência:
    - Apenas o nome do arquivo pode conter `*`; o diretório é literal
    - Um nome contém uma única sequência de `*`
    - Um arquivo corresponde se começa com o prefixo, termina com o sufixo
      e tem ao menos `len(prefixo) + len(sufixo)` caracteres
    - O trecho do meio é o token; só arquivos regulares contam
    - Tokens são ordenados
"""

from __future__ import annotations

import posixpath
import re
from enum import Enum
from pathlib import Path
from typing import List, Tuple, Union

from mlprocess.core.exceptions import PatternSpecificationError


_STAR_RUN = re.compile(r"\*+")


class PatternClass(str, Enum):
    NONE = "none"
    TRANSITIVE = "*"
    LOCAL = "**"
    CARTESIAN = "***"


def _parts(pattern: str) -> Tuple[str, str, List[re.Match]]:
    directory, name = posixpath.split(pattern)
    if "*" in directory:
        raise PatternSpecificationError(
            f"Padrão '{pattern}': '*' só é permitido no nome do arquivo",
            details={"pattern": pattern},
        )
    runs = list(_STAR_RUN.finditer(name))
    if len(runs) > 1:
        raise PatternSpecificationError(
            f"Padrão '{pattern}': mais de uma sequência de '*' no nome do arquivo",
            details={"pattern": pattern},
        )
    return directory, name, runs


def classify(pattern: str) -> PatternClass:
    _, _, runs = _parts(pattern)
    if not runs:
        return PatternClass.NONE
    width = len(runs[0].group(0))
    if width == 1:
        return PatternClass.TRANSITIVE
    if width == 2:
        return PatternClass.LOCAL
    return PatternClass.CARTESIAN


def substitute(pattern: str, token: str) -> str:
    """Troca a sequência de `*` do nome do arquivo por `token`."""
    directory, name, runs = _parts(pattern)
    if not runs:
        return pattern
    run = runs[0]
    return posixpath.join(directory, name[: run.start()] + token + name[run.end():])


def match(pattern: str, base_dir: Union[str, Path]) -> List[Tuple[str, str]]:
    """
    Arquivos que correspondem ao padrão, como pares `(token, caminho)`.

    O caminho devolvido mantém o diretório como declarado; a busca é feita
    relativa a `base_dir` quando o diretório não é absoluto.
    """
    directory, name, runs = _parts(pattern)
    if not runs:
        return []
    run = runs[0]
    prefix, suffix = name[: run.start()], name[run.end():]

    root = Path(directory) if posixpath.isabs(directory) else Path(base_dir) / directory
    if not root.is_dir():
        return []

    found: List[Tuple[str, str]] = []
    for entry in root.iterdir():
        fname = entry.name
        if not entry.is_file():
            continue
        if len(fname) < len(prefix) + len(suffix):
            continue
        if not (fname.startswith(prefix) and fname.endswith(suffix)):
            continue
        token = fname[len(prefix): len(fname) - len(suffix)]
        found.append((token, posixpath.join(directory, fname)))

    return sorted(found)
