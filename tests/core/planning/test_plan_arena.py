# tests/core/planning/test_plan_arena.py
"""
Testes da arena do plano (`Plan`): simetria de arestas, remoção com
remapeamento de índices, prontidão e serialização.
"""

import pytest

from mlprocess.core.planning.plan import Plan
from mlprocess.core.scenario import AlgorithmDescriptor, DataSource, TaskKind, TaskNode, TaskStatus


def _node(task_id, status=TaskStatus.PENDING):
    return TaskNode(
        id=task_id,
        kind=TaskKind.MANIPULATION,
        algorithm=AlgorithmDescriptor("copy_input"),
        input=[DataSource.file(f"{task_id}.in")],
        output=[DataSource.file(f"{task_id}.out")],
        status=status,
    )


def _chain(*ids):
    plan = Plan(nodes=[_node(i) for i in ids])
    for k in range(1, len(ids)):
        plan.link(k, k - 1)
    return plan


def _assert_symmetric(plan):
    for i, node in enumerate(plan.nodes):
        for j in node.depends_on:
            assert i in plan.nodes[j].depended_by
        for j in node.depended_by:
            assert i in plan.nodes[j].depends_on


def test_link_is_symmetric_and_sets_waiting():
    plan = _chain("a", "b")

    assert plan.nodes[1].depends_on == [0]
    assert plan.nodes[0].depended_by == [1]
    assert plan.nodes[1].status == TaskStatus.WAITING
    assert plan.nodes[0].status == TaskStatus.PENDING


def test_link_ignores_self_and_duplicates():
    plan = _chain("a", "b")
    plan.link(1, 0)
    plan.link(0, 0)

    assert plan.nodes[1].depends_on == [0]
    assert plan.nodes[0].depends_on == []


def test_link_to_done_source_keeps_pending():
    plan = Plan(nodes=[_node("a", TaskStatus.DONE), _node("b")])
    plan.link(1, 0)

    assert plan.nodes[1].status == TaskStatus.PENDING


def test_is_ready():
    plan = _chain("a", "b")
    assert plan.is_ready(0)
    assert not plan.is_ready(1)

    plan.nodes[0].status = TaskStatus.DONE
    assert plan.is_ready(1)


def test_remove_remaps_indices():
    plan = _chain("a", "b", "c")
    plan.link(2, 0)

    plan.remove([1])

    assert plan.ids() == ["a", "c"]
    assert plan.nodes[1].depends_on == [0]
    assert plan.nodes[0].depended_by == [1]
    _assert_symmetric(plan)


def test_permute_reorders():
    plan = _chain("a", "b", "c")
    plan.permute([2, 0, 1])

    assert plan.ids() == ["c", "a", "b"]
    assert plan.nodes[0].depends_on == [2]
    _assert_symmetric(plan)


def test_dependents_closure():
    plan = _chain("a", "b", "c", "d")

    assert plan.dependents_closure([1]) == [2, 3]
    assert plan.dependents_closure([3]) == []


def test_unique_id_uses_generated_counter():
    plan = _chain("a", "a.split")

    assert plan.unique_id("b") == "b"
    assert plan.unique_id("a.split") == "a.split-1"
    assert plan.generated == 1


def test_find_and_index_of():
    plan = _chain("a")
    assert plan.find("zz") is None
    with pytest.raises(KeyError):
        plan.index_of("zz")


def test_dict_round_trip():
    plan = _chain("a", "b", "c")
    plan.scenario = "s.yaml"
    plan.generated = 4

    restored = Plan.from_dict(plan.to_dict())

    assert restored.ids() == plan.ids()
    assert restored.generated == 4
    assert [n.depends_on for n in restored] == [n.depends_on for n in plan]


def test_from_dict_rejects_bad_version_and_edges():
    data = _chain("a", "b").to_dict()

    with pytest.raises(ValueError):
        Plan.from_dict({**data, "version": 99})

    data["nodes"][0]["depended_by"] = []
    with pytest.raises(ValueError):
        Plan.from_dict(data)
