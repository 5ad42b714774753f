# tests/tasks/test_manipulation_tasks.py
"""
Testes das Tasks de manipulação embutidas (data_splitter, data_merger, copy_input).

Decisões arquiteturais:
    - Tasks são instanciadas diretamente, como faria o AlgorithmRegistry
    - Todo I/O acontece sob `tmp_path`
"""

import pandas as pd
import pytest

from mlprocess.core.exceptions import (
    InvalidParametersError,
    TaskIOError,
    WrongNumberOfInputsError,
    WrongNumberOfOutputsError,
)
from mlprocess.tasks import CopyInput, DataMerger, DataSplitter


def test_splitter_contiguous_parts_grouped_by_input(tmp_path, iris_like, write_csv):
    train = write_csv(iris_like, "train.csv")
    test = write_csv(iris_like.head(2), "test.csv")
    outputs = [str(tmp_path / f"p{i}.csv") for i in range(6)]

    DataSplitter(
        task_id="c.split",
        parameters={"num_parts": "3"},
        inputs=[str(train), str(test)],
        outputs=outputs,
    ).perform()

    parts = [pd.read_csv(o) for o in outputs[:3]]
    assert [len(p) for p in parts] == [4, 4, 4]
    pd.testing.assert_frame_equal(pd.concat(parts, ignore_index=True), iris_like)

    tail = [pd.read_csv(o) for o in outputs[3:]]
    assert [len(p) for p in tail] == [1, 1, 0]
    assert list(tail[2].columns) == ["x1", "x2", "label"]


def test_splitter_requires_num_parts_and_matching_outputs(tmp_path, iris_like, write_csv):
    train = str(write_csv(iris_like, "train.csv"))

    with pytest.raises(InvalidParametersError):
        DataSplitter(task_id="s", parameters={}, inputs=[train], outputs=["a"]).perform()
    with pytest.raises(WrongNumberOfOutputsError):
        DataSplitter(task_id="s", parameters={"num_parts": "2"}, inputs=[train], outputs=["a"]).perform()


def test_merger_concatenates_groups(tmp_path, iris_like, write_csv):
    inputs = [
        str(write_csv(iris_like.iloc[:5], "a0.csv")),
        str(write_csv(iris_like.iloc[5:], "a1.csv")),
        str(write_csv(iris_like.iloc[:1], "b0.csv")),
        str(write_csv(iris_like.iloc[1:3], "b1.csv")),
    ]
    outputs = [str(tmp_path / "a.csv"), str(tmp_path / "b.csv")]

    DataMerger(task_id="m", parameters={}, inputs=inputs, outputs=outputs).perform()

    pd.testing.assert_frame_equal(pd.read_csv(outputs[0]), iris_like)
    assert len(pd.read_csv(outputs[1])) == 3


def test_merger_inputs_must_divide_outputs(tmp_path, iris_like, write_csv):
    inputs = [str(write_csv(iris_like, f"x{i}.csv")) for i in range(3)]

    with pytest.raises(WrongNumberOfInputsError):
        DataMerger(task_id="m", parameters={}, inputs=inputs, outputs=["a", "b"]).perform()


def test_merger_missing_input(tmp_path):
    with pytest.raises(TaskIOError):
        DataMerger(
            task_id="m", parameters={}, inputs=[str(tmp_path / "none.csv")], outputs=[str(tmp_path / "o.csv")]
        ).perform()


def test_copy_input_selected_indices(tmp_path):
    src = [tmp_path / f"in{i}.txt" for i in range(3)]
    for i, p in enumerate(src):
        p.write_text(f"content {i}", encoding="utf-8")
    out = tmp_path / "nested" / "copy.txt"

    CopyInput(
        task_id="cp",
        parameters={"input_no": "2"},
        inputs=[str(p) for p in src],
        outputs=[str(out)],
    ).perform()

    assert out.read_text(encoding="utf-8") == "content 2"


def test_copy_input_validation(tmp_path):
    src = tmp_path / "in.txt"
    src.write_text("x", encoding="utf-8")

    with pytest.raises(InvalidParametersError):
        CopyInput(task_id="cp", parameters={"input_no": "5"}, inputs=[str(src)], outputs=["o"]).perform()
    with pytest.raises(InvalidParametersError):
        CopyInput(task_id="cp", parameters={"input_no": "a"}, inputs=[str(src)], outputs=["o"]).perform()
    with pytest.raises(WrongNumberOfOutputsError):
        CopyInput(task_id="cp", parameters={}, inputs=[str(src)], outputs=["o1", "o2"]).perform()
    with pytest.raises(TaskIOError):
        CopyInput(
            task_id="cp", parameters={}, inputs=[str(tmp_path / "missing")], outputs=[str(tmp_path / "o")]
        ).perform()
