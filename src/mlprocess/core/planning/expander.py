# src/mlprocess/core/planning/expander.py
"""
Expansão de tasks com padrões de arquivo (`*`, `**`, `***`).

A expansão acontece quando a task é reivindicada: os arquivos que os
padrões casam normalmente são produzidos pelos predecessores, então só
existem depois que eles terminam.

Algoritmo (por nó):
    1. Classificar as ocorrências de padrão das entradas e saídas
    2. Apenas `**` → substituir cada ocorrência pela lista de arquivos, sem clones
    3. Caso contrário, um clone por token de `*` (interseção entre as
       ocorrências), multiplicado pelas correspondências de cada `***`
    4. Reescrever as saídas `*` de cada clone com seu texto de substituição
    5. Percorrer os sucessores:
         - entrada e saída `*` → clonados por token e ligados ao clone
           correspondente; sem `**`/`***` restantes, a travessia continua
         - entrada `*` sem saída `*` → cada entrada `*` vira a lista de
           arquivos de todos os tokens (o padrão permanece se outro
           predecessor ainda o produz); ligado a todos os clones
         - sem entrada `*` → ligado a todos os clones
         - clones criados nesta expansão só se ligam a clones do mesmo token
    6. Remover os originais e posicionar os clones (ordenados por id) no
       lugar do original

Ids de clones: `<id>#<token>`; o texto de substituição de um clone é a
parte do id após o primeiro `#`, com `#` trocado por `_`.

Erros: PatternSpecificationError, nomeando a task.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Set, Tuple, Union

from mlprocess.core.exceptions import PatternSpecificationError
from mlprocess.core.scenario.data_source import DataSource
from mlprocess.core.scenario.task_node import EXPANSION_SEPARATOR, TaskNode

from . import patterns
from .patterns import PatternClass
from .plan import Plan


INPUT_SECTIONS = ("train", "devel", "eval", "data", "input")


@dataclass(frozen=True)
class _Occurrence:
    section: str
    position: int
    source: DataSource
    cls: PatternClass


def _occurrences(node: TaskNode) -> List[_Occurrence]:
    found: List[_Occurrence] = []
    for section in INPUT_SECTIONS:
        for pos, src in enumerate(getattr(node, section)):
            if src.has_pattern:
                found.append(_Occurrence(section, pos, src, patterns.classify(src.id)))
    return found


def needs_expansion(node: TaskNode) -> bool:
    return any(s.has_pattern for s in node.task_inputs() + node.output)


def _fail(node: TaskNode, reason: str) -> PatternSpecificationError:
    return PatternSpecificationError(
        f"Task '{node.id}': {reason}",
        details={"task_id": node.id, "reason": reason},
    )


def check_patterns(node: TaskNode) -> List[_Occurrence]:
    """
    Valida a combinação de padrões de um nó.

    Raises:
        PatternSpecificationError: combinação inválida.
    """
    try:
        occs = _occurrences(node)
        out_classes = [patterns.classify(o.id) for o in node.output if o.has_pattern]
    except PatternSpecificationError as e:
        raise _fail(node, str(e)) from e

    if any(c != PatternClass.TRANSITIVE for c in out_classes):
        raise _fail(node, "saídas aceitam apenas o padrão '*'")

    in_classes = {o.cls for o in occs}
    if PatternClass.LOCAL in in_classes and (len(in_classes) > 1 or out_classes):
        raise _fail(node, "'**' não pode ser combinado com '*' ou '***' no mesmo nó")

    if in_classes - {PatternClass.LOCAL}:
        if out_classes and len(out_classes) != len(node.output):
            raise _fail(node, "com entradas padronizadas, todas as saídas ou nenhuma devem usar '*'")
    elif out_classes:
        raise _fail(node, "saídas com '*' exigem entradas com '*' ou '***'")

    return occs


# ---------------------------------------------------------------------------
# Reescrita de seções
# ---------------------------------------------------------------------------

def _rewrite_sections(node: TaskNode, rewrite) -> None:
    """Aplica `rewrite(src) -> List[DataSource]` a cada fonte de entrada padronizada."""
    for section in INPUT_SECTIONS:
        new: List[DataSource] = []
        for src in getattr(node, section):
            if src.has_pattern:
                new.extend(rewrite(src))
            else:
                new.append(src)
        setattr(node, section, new)


def _rewrite_outputs(node: TaskNode) -> None:
    repl = node.pattern_replacement
    if repl is None:
        return
    node.output = [
        o.with_id(patterns.substitute(o.id, repl)) if o.has_pattern else o
        for o in node.output
    ]


def _matches(node: TaskNode, src: DataSource, base_dir: Union[str, Path]) -> List[Tuple[str, str]]:
    found = patterns.match(src.id, base_dir)
    if not found:
        raise _fail(node, f"nenhum arquivo corresponde a '{src.id}'")
    return found


# ---------------------------------------------------------------------------
# Expansão
# ---------------------------------------------------------------------------

def _expand_local(node: TaskNode, base_dir: Union[str, Path]) -> None:
    def rewrite(src: DataSource) -> List[DataSource]:
        return [DataSource.file(path) for _, path in _matches(node, src, base_dir)]

    _rewrite_sections(node, rewrite)


def _combinations(node: TaskNode, occs: List[_Occurrence], base_dir: Union[str, Path]) -> List[List[str]]:
    transitive = [o for o in occs if o.cls == PatternClass.TRANSITIVE]
    cartesian = [o for o in occs if o.cls == PatternClass.CARTESIAN]

    combos: List[List[str]] = [[]]
    if transitive:
        token_sets = [{t for t, _ in _matches(node, o.source, base_dir)} for o in transitive]
        tokens = sorted(set.intersection(*token_sets))
        if not tokens:
            raise _fail(node, "as entradas '*' não têm tokens em comum")
        combos = [[t] for t in tokens]

    for occ in cartesian:
        tokens = [t for t, _ in _matches(node, occ.source, base_dir)]
        combos = [c + [t] for c in combos for t in tokens]

    return combos


def _instantiate(node: TaskNode, occs: List[_Occurrence], combo: List[str]) -> TaskNode:
    has_transitive = any(o.cls == PatternClass.TRANSITIVE for o in occs)
    cartesian = [o for o in occs if o.cls == PatternClass.CARTESIAN]
    offset = 1 if has_transitive else 0

    clone = node.clone(node.id + "".join(f"{EXPANSION_SEPARATOR}{t}" for t in combo))
    cart_tokens = {(o.section, o.position): combo[offset + k] for k, o in enumerate(cartesian)}

    for section in INPUT_SECTIONS:
        sources = getattr(clone, section)
        for occ in occs:
            if occ.section != section:
                continue
            token = combo[0] if occ.cls == PatternClass.TRANSITIVE else cart_tokens[(occ.section, occ.position)]
            sources[occ.position] = occ.source.with_id(patterns.substitute(occ.source.id, token))

    _rewrite_outputs(clone)
    return clone


def _suffix(node: TaskNode) -> str:
    return node.id.split(EXPANSION_SEPARATOR, 1)[1]


@dataclass
class _Walk:
    plan: Plan
    removed: Set[int]
    cloned: Dict[int, Dict[str, int]]
    placements: Dict[int, int]
    # clone criado nesta expansão → token do clone de origem
    tokens: Dict[int, str]


def _walk(state: _Walk, origin: int, clones: Dict[str, int]) -> None:
    plan = state.plan
    for s in list(plan.nodes[origin].depended_by):
        if s in state.tokens:
            continue
        succ = plan.nodes[s]
        occs = check_patterns(succ)
        if not any(o.cls == PatternClass.TRANSITIVE for o in occs):
            for ci in clones.values():
                plan.link(s, ci)
            continue

        if not any(o.has_pattern for o in succ.output):
            replacements = [plan.nodes[ci].pattern_replacement for ci in clones.values()]

            pending = {
                o.key
                for p in succ.depends_on
                if p != origin and p not in state.removed and p not in state.tokens
                for o in plan.nodes[p].output
            }
            produced = {o.key for o in plan.nodes[origin].output}

            def as_list(src: DataSource) -> List[DataSource]:
                if patterns.classify(src.id) != PatternClass.TRANSITIVE:
                    return [src]
                if src.key in pending and src.key not in produced:
                    return [src]
                listed = [src.with_id(patterns.substitute(src.id, r)) for r in replacements]
                # outro produtor do mesmo padrão ainda será expandido
                return listed + [src] if src.key in pending else listed

            _rewrite_sections(succ, as_list)
            for ci in clones.values():
                plan.link(s, ci)
            continue

        if s in state.cloned:
            existing = state.cloned[s]
            for suffix, ci in clones.items():
                if suffix in existing:
                    plan.link(existing[suffix], ci)
            continue

        remaining = any(o.cls != PatternClass.TRANSITIVE for o in occs)
        state.removed.add(s)
        mapping: Dict[str, int] = {}
        for suffix, ci in clones.items():
            repl = plan.nodes[ci].pattern_replacement
            sc = succ.clone(f"{succ.id}{EXPANSION_SEPARATOR}{suffix}")
            for occ in occs:
                if occ.cls == PatternClass.TRANSITIVE:
                    getattr(sc, occ.section)[occ.position] = occ.source.with_id(
                        patterns.substitute(occ.source.id, repl)
                    )
            if not remaining:
                _rewrite_outputs(sc)

            sci = plan.add(sc)
            state.placements[sci] = s
            state.tokens[sci] = suffix
            mapping[suffix] = sci
            plan.link(sci, ci)
            for p in list(succ.depends_on):
                if p == origin or p in state.removed or state.tokens.get(p, suffix) != suffix:
                    continue
                plan.link(sci, p)
            if remaining:
                for d in list(succ.depended_by):
                    if state.tokens.get(d, suffix) == suffix:
                        plan.link(d, sci)

        state.cloned[s] = mapping
        if not remaining:
            _walk(state, s, mapping)


def _place(plan: Plan, placements: Dict[int, int], removed: Set[int]) -> None:
    def key(i: int) -> Tuple[int, int, str]:
        if i in placements:
            return (placements[i], 1, plan.nodes[i].id)
        return (i, 0, plan.nodes[i].id)

    removed_ids = [plan.nodes[i].id for i in removed]
    plan.permute(sorted(range(len(plan.nodes)), key=key))
    plan.remove([plan.index_of(task_id) for task_id in removed_ids])


def expand_node(plan: Plan, index: int, *, base_dir: Union[str, Path]) -> List[str]:
    """
    Expande o nó `index` do plano.

    Returns:
        List[str]: ids dos nós que substituem o nó expandido (o próprio id
        quando a expansão é local ou não há padrões).

    Raises:
        PatternSpecificationError: padrões inválidos ou sem correspondência.
    """
    node = plan.nodes[index]
    occs = check_patterns(node)
    classes = {o.cls for o in occs}

    if not classes:
        return [node.id]
    if classes == {PatternClass.LOCAL}:
        _expand_local(node, base_dir)
        return [node.id]

    combos = _combinations(node, occs, base_dir)
    state = _Walk(plan=plan, removed={index}, cloned={}, placements={}, tokens={})

    clones: Dict[str, int] = {}
    for combo in combos:
        clone = _instantiate(node, occs, combo)
        ci = plan.add(clone)
        state.placements[ci] = index
        state.tokens[ci] = _suffix(clone)
        clones[_suffix(clone)] = ci
        for p in node.depends_on:
            plan.link(ci, p)

    _walk(state, index, clones)
    created = sorted(plan.nodes[ci].id for ci in clones.values())
    _place(plan, state.placements, state.removed)
    return created
