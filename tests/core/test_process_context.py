# tests/core/test_process_context.py
"""
Testes do ProcessContext.

Invariantes:
    - `workers` é o mesmo orçamento usado pelo paralelizador
    - o log estruturado retém apenas os `logging.max_events` eventos mais recentes
    - caminhos relativos resolvem contra o diretório de trabalho
"""

from mlprocess.core.config import resolve_config
from mlprocess.core.context import ProcessContext
from mlprocess.core.planning.parallelizer import worker_budget


def _ctx(tmp_path, **overrides):
    return ProcessContext.create(
        scenario_path=tmp_path / "scenario.yaml",
        config=resolve_config(overrides=overrides),
    )


def test_workers_is_threads_times_instances(tmp_path):
    ctx = _ctx(tmp_path, scheduler={"threads": 3, "instances": 2})

    assert ctx.workers == 6
    assert ctx.workers == worker_budget(threads=3, instances=2)


def test_events_keep_only_most_recent(tmp_path):
    ctx = _ctx(tmp_path, logging={"verbosity": 0, "max_events": 3})

    for i in range(5):
        ctx.log(task_id=f"t{i}", level="info", message=f"evento {i}")

    assert len(ctx.events) == 3
    assert [e["task_id"] for e in ctx.events] == ["t2", "t3", "t4"]
    assert ctx.events[-1]["message"] == "evento 4"


def test_resolve_relative_to_workdir(tmp_path):
    ctx = _ctx(tmp_path)

    assert ctx.workdir == tmp_path.resolve()
    assert ctx.resolve("data/a.csv") == tmp_path.resolve() / "data" / "a.csv"
    assert ctx.resolve(tmp_path / "x") == tmp_path / "x"
