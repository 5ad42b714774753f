# tests/core/tasks/test_algorithm_registry.py
"""
Testes do registro de algoritmos e do contrato de Task.

Invariantes:
    - nomes são únicos e não vazios
    - nomes desconhecidos levantam UnknownAlgorithmError com os nomes conhecidos
    - BaseTask valida cardinalidade e parâmetros com exceções TaskError
"""

import pytest

from mlprocess.core.exceptions import (
    InvalidParametersError,
    UnknownAlgorithmError,
    WrongNumberOfInputsError,
    WrongNumberOfOutputsError,
)
from mlprocess.core.tasks import AlgorithmRegistry, BaseTask, Task
from mlprocess.tasks import default_registry


class NoopTask(BaseTask):
    def perform(self):
        return None


def _task(**kw):
    args = dict(task_id="t", parameters={}, inputs=["a"], outputs=["b"])
    args.update(kw)
    return NoopTask(**args)


def test_register_and_create():
    registry = AlgorithmRegistry()
    registry.register("noop", NoopTask)

    task = registry.create("noop", task_id="t1", parameters={"x": "1"}, inputs=["i"], outputs=["o"])

    assert isinstance(task, Task)
    assert task.task_id == "t1"
    assert task.parameters == {"x": "1"}
    assert "noop" in registry
    assert registry.names() == ["noop"]


def test_register_rejects_duplicates_and_empty_names():
    registry = AlgorithmRegistry()
    registry.register("noop", NoopTask)

    with pytest.raises(ValueError):
        registry.register("noop", NoopTask)
    with pytest.raises(ValueError):
        registry.register(" ", NoopTask)


def test_unknown_algorithm():
    with pytest.raises(UnknownAlgorithmError) as exc:
        AlgorithmRegistry().create("nope", task_id="t", parameters={}, inputs=[], outputs=[])
    assert exc.value.details["algorithm"] == "nope"


def test_default_registry_names():
    assert default_registry().names() == [
        "classifier",
        "copy_input",
        "data_merger",
        "data_splitter",
        "eval_classification",
    ]


def test_cardinality_checks():
    with pytest.raises(WrongNumberOfInputsError):
        _task(inputs=[]).require_inputs(minimum=1)
    with pytest.raises(WrongNumberOfInputsError):
        _task(inputs=["a", "b", "c"]).require_inputs(minimum=1, maximum=2)
    with pytest.raises(WrongNumberOfOutputsError):
        _task().require_outputs(2)
    _task().require_outputs(1)


def test_parameter_helpers():
    task = _task(parameters={"n": "3", "bad": "x", "neg": "-1"})

    assert task.int_param("n") == 3
    assert task.int_param("missing", 5) == 5
    assert task.param("missing", "d") == "d"
    with pytest.raises(InvalidParametersError):
        task.param("missing")
    with pytest.raises(InvalidParametersError):
        task.int_param("bad")
    with pytest.raises(InvalidParametersError):
        task.int_param("neg", minimum=0)
