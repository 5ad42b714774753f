# tests/core/engine/test_process.py
"""Testes do Process: construção do plano e execução com várias threads de Worker."""

from pathlib import Path

import pytest

from mlprocess.core.engine import Process
from mlprocess.core.exceptions import ScenarioError
from mlprocess.core.scenario import TaskStatus
from mlprocess.core.tasks import AlgorithmRegistry, BaseTask


class EchoTask(BaseTask):
    def perform(self):
        for out in self.outputs:
            Path(out).write_text(self.task_id, encoding="utf-8")


def _manip(task_id, inputs, outputs):
    return {
        "id": task_id,
        "kind": "manipulation",
        "metric": "echo",
        "input": [{"file": i} for i in inputs],
        "output": [{"file": o} for o in outputs],
    }


def _registry():
    registry = AlgorithmRegistry()
    registry.register("echo", EchoTask)
    return registry


def test_process_runs_all_tasks_with_threads(tmp_path, write_scenario, make_ctx):
    tasks = [_manip(f"t{i}", ["raw.csv"], [f"t{i}.txt"]) for i in range(12)]
    tasks.append(_manip("join", [f"t{i}.txt" for i in range(12)], ["join.txt"]))
    path = write_scenario(tasks)
    ctx = make_ctx(path, threads=3)
    ctx.registry = _registry()

    stats = Process(ctx).run()

    assert len(stats) == 3
    done = [task_id for s in stats for task_id in s.done]
    assert sorted(done) == sorted([f"t{i}" for i in range(12)] + ["join"])
    assert (tmp_path / "join.txt").read_text(encoding="utf-8") == "join"
    assert {n.status for n in Process(ctx).store.snapshot().nodes} == {TaskStatus.DONE}


def test_second_run_finds_nothing_to_do(tmp_path, write_scenario, make_ctx):
    path = write_scenario([_manip("only", ["raw.csv"], ["only.txt"])])
    ctx = make_ctx(path)
    ctx.registry = _registry()

    Process(ctx).run()
    stats = Process(ctx).run()

    assert stats[0].done == []


def test_reset_reruns_task(tmp_path, write_scenario, make_ctx):
    path = write_scenario([_manip("only", ["raw.csv"], ["only.txt"])])
    ctx = make_ctx(path)
    ctx.registry = _registry()

    Process(ctx).run()
    stats = Process(ctx).run(["only"])

    assert stats[0].done == ["only"]


def test_invalid_scenario_propagates(tmp_path, write_scenario, make_ctx):
    path = write_scenario([_manip("a", [], ["a.txt"])])

    with pytest.raises(ScenarioError):
        Process(make_ctx(path)).run()
