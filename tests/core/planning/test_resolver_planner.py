# tests/core/planning/test_resolver_planner.py
"""
Testes da resolução de dependências e da ordenação topológica.

Os testes asseguram que:
- cada consumidor depende do único produtor de uma fonte
- datasets nunca produzidos e saídas duplicadas são falhas de cenário
- arquivos sem produtor são tratados como pré-existentes
- ciclos são detectados e nomeiam as tasks envolvidas
- a ordem do plano construído respeita as dependências e é determinística
"""

import pytest

from mlprocess.core.exceptions import DatasetNeverProducedError, DuplicateOutputError, LoopDependencyError
from mlprocess.core.planning.plan import Plan
from mlprocess.core.planning.planner import build_plan, topological_order
from mlprocess.core.planning.resolver import resolve_dependencies
from mlprocess.core.scenario import AlgorithmDescriptor, DataSource, TaskKind, TaskNode


def _copy(task_id, inputs, outputs):
    return TaskNode(
        id=task_id,
        kind=TaskKind.MANIPULATION,
        algorithm=AlgorithmDescriptor("copy_input"),
        input=list(inputs),
        output=list(outputs),
        origin=task_id,
    )


def _manip(task_id, inputs, outputs):
    return {
        "id": task_id,
        "kind": "manipulation",
        "metric": "copy_input",
        "input": inputs,
        "output": outputs,
    }


def test_consumer_depends_on_producer():
    plan = Plan(nodes=[
        _copy("b", [DataSource.dataset("ds")], [DataSource.file("b.csv")]),
        _copy("a", [DataSource.file("raw.csv")], [DataSource.dataset("ds")]),
    ])

    table = resolve_dependencies(plan)

    assert plan.nodes[0].depends_on == [1]
    assert plan.nodes[1].depends_on == []
    assert table["file:raw.csv"].producer is None
    assert table["dataset:ds"].consumers == [0]


def test_dataset_never_produced():
    plan = Plan(nodes=[_copy("a", [DataSource.dataset("ghost")], [DataSource.file("a.csv")])])

    with pytest.raises(DatasetNeverProducedError) as exc:
        resolve_dependencies(plan)
    assert exc.value.details["source"] == "dataset:ghost"


def test_duplicate_output():
    plan = Plan(nodes=[
        _copy("a", [DataSource.file("x")], [DataSource.file("out.csv")]),
        _copy("b", [DataSource.file("y")], [DataSource.file("out.csv")]),
    ])

    with pytest.raises(DuplicateOutputError):
        resolve_dependencies(plan)


def test_task_consuming_own_output_has_no_self_edge():
    plan = Plan(nodes=[_copy("a", [DataSource.file("x.csv")], [DataSource.file("x.csv")])])

    resolve_dependencies(plan)

    assert plan.nodes[0].depends_on == []


def test_loop_detected_with_task_ids():
    plan = Plan(nodes=[
        _copy("a", [DataSource.file("b.out")], [DataSource.file("a.out")]),
        _copy("b", [DataSource.file("a.out")], [DataSource.file("b.out")]),
        _copy("c", [DataSource.file("raw")], [DataSource.file("c.out")]),
    ])
    resolve_dependencies(plan)

    with pytest.raises(LoopDependencyError) as exc:
        topological_order(plan)
    assert exc.value.details["tasks"] == ["a", "b"]


def test_build_plan_sorts_topologically(write_scenario):
    path = write_scenario([
        _manip("last", [{"file": "mid.csv"}], [{"file": "final.csv"}]),
        _manip("first", [{"file": "raw.csv"}], [{"file": "mid.csv"}]),
        _manip("other", [{"file": "raw.csv"}], [{"file": "other.csv"}]),
    ])

    plan = build_plan(path)

    assert plan.ids() == ["first", "last", "other"]
    assert plan.nodes[plan.index_of("last")].depends_on == [plan.index_of("first")]
    assert plan.scenario == str(path)
    assert build_plan(path).ids() == plan.ids()
