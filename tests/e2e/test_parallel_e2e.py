# tests/e2e/test_parallel_e2e.py
"""
Testes end-to-end da paralelização de uma computação `parallelizable`.

O mesmo cenário é executado com orçamentos de workers diferentes; os
artefatos finais devem ser os mesmos, qualquer que seja W.

Casos:
    - quatro partições com saídas pareadas (W = 1, 2, 4)
    - quatro partições com saída compartilhada (W = 1, 2, 4)
    - uma partição dividida pelo splitter (W = 4)
"""

import pandas as pd
import pytest

from mlprocess.core.engine import Process
from mlprocess.core.scenario import TaskStatus


def _classifier(n, outputs):
    return [
        {
            "id": "clf",
            "kind": "computation",
            "algorithm": {
                "name": "classifier",
                "parameters": {"class_arg": "label", "model": "knn", "n_neighbors": 1},
                "parallelizable": True,
            },
            "train": [{"file": f"data/tr{i}.csv"} for i in range(n)],
            "eval": [{"file": f"data/te{i}.csv"} for i in range(n)],
            "output": [{"file": o} for o in outputs],
        }
    ]


def _write_partitions(write_csv, df, n):
    for i in range(n):
        write_csv(df, f"data/tr{i}.csv")
        write_csv(df, f"data/te{i}.csv")


def _run(process):
    stats = process.run()
    assert sum(len(s.failed) for s in stats) == 0
    statuses = {n.id: n.status for n in process.store.snapshot().nodes}
    assert set(statuses.values()) == {TaskStatus.DONE}
    return statuses


@pytest.mark.parametrize(
    "threads, expected",
    [
        (1, {"clf.train0", "clf.train1", "clf.train2", "clf.train3"}),
        (4, {"clf.part0", "clf.part1", "clf.part2", "clf.part3"}),
    ],
)
def test_paired_outputs_direct_units(tmp_path, iris_like, write_csv, write_scenario, make_ctx, threads, expected):
    _write_partitions(write_csv, iris_like, 4)
    path = write_scenario(_classifier(4, [f"out/p{i}.csv" for i in range(4)]))

    statuses = _run(Process(make_ctx(path, threads=threads)))

    assert set(statuses) == expected
    for i in range(4):
        pred = pd.read_csv(tmp_path / "out" / f"p{i}.csv")
        assert list(pred["label"]) == list(iris_like["label"])


def test_paired_outputs_units_parallelized_again(tmp_path, iris_like, write_csv, write_scenario, make_ctx):
    _write_partitions(write_csv, iris_like, 4)
    path = write_scenario(_classifier(4, [f"out/p{i}.csv" for i in range(4)]))

    statuses = _run(Process(make_ctx(path, threads=2)))

    assert len(statuses) == 16
    assert "clf.train3.merge" in statuses
    for i in range(4):
        pred = pd.read_csv(tmp_path / "out" / f"p{i}.csv")
        assert list(pred["label"]) == list(iris_like["label"])
        assert (tmp_path / "out" / f"p{i}_1.csv").exists()


@pytest.mark.parametrize("threads", [1, 2, 4])
def test_shared_output_merged_for_any_budget(tmp_path, iris_like, write_csv, write_scenario, make_ctx, threads):
    _write_partitions(write_csv, iris_like, 4)
    path = write_scenario(_classifier(4, ["out/pred.csv"]))

    statuses = _run(Process(make_ctx(path, threads=threads)))

    assert "clf.merge" in statuses
    pred = pd.read_csv(tmp_path / "out" / "pred.csv")
    assert list(pred["label"]) == list(iris_like["label"]) * 4


def test_single_partition_split_across_workers(tmp_path, iris_like, write_csv, write_scenario, make_ctx):
    _write_partitions(write_csv, iris_like, 1)
    path = write_scenario(_classifier(1, ["out/pred.csv"]))

    statuses = _run(Process(make_ctx(path, threads=4)))

    assert set(statuses) == {"clf.split", "clf.part0", "clf.part1", "clf.part2", "clf.part3", "clf.merge"}
    pred = pd.read_csv(tmp_path / "out" / "pred.csv")
    assert list(pred["label"]) == list(iris_like["label"])
