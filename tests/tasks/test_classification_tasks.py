# tests/tasks/test_classification_tasks.py
"""
Testes das Tasks de computação e avaliação de classificação.

Este módulo valida o `classifier` (treino + rotulação de devel/eval via
ModelRegistry) e o `eval_classification` (métricas sobre pares gold/teste).

Invariantes:
    - O classifier escreve uma saída por conjunto rotulado, preservando as linhas
    - Parâmetros desconhecidos do modelo são ignorados; inválidos falham com TaskError
    - O eval_classification grava accuracy, precision/recall/f1 macro e support em YAML
"""

import joblib
import pandas as pd
import pytest
import yaml

from mlprocess.core.exceptions import InvalidParametersError, WrongNumberOfInputsError, WrongNumberOfOutputsError
from mlprocess.tasks import Classifier, EvalClassification
from mlprocess.tasks.computation.model_registry import ModelRegistry, ModelSpec, ParamSpec


def _classifier(tmp_path, train, evals, parameters, outputs=None):
    outputs = outputs or [str(tmp_path / f"pred{i}.csv") for i in range(len(evals))]
    return Classifier(
        task_id="c",
        parameters=parameters,
        inputs=[str(train)] + [str(e) for e in evals],
        outputs=outputs,
    )


def test_classifier_labels_each_eval_set(tmp_path, iris_like, write_csv):
    train = write_csv(iris_like, "train.csv")
    dev = write_csv(iris_like.iloc[:4], "dev.csv")
    test = write_csv(iris_like.iloc[4:], "test.csv")
    model_file = tmp_path / "models" / "knn.joblib"

    _classifier(
        tmp_path,
        train,
        [dev, test],
        {"class_arg": "label", "model": "knn", "n_neighbors": "1", "model_file": str(model_file)},
    ).perform()

    pred_dev = pd.read_csv(tmp_path / "pred0.csv")
    pred_test = pd.read_csv(tmp_path / "pred1.csv")
    assert list(pred_dev["label"]) == list(iris_like.iloc[:4]["label"])
    assert list(pred_test["label"]) == list(iris_like.iloc[4:]["label"])
    assert model_file.exists()
    assert joblib.load(model_file).get_params()["n_neighbors"] == 1


def test_classifier_default_model_and_explicit_features(tmp_path, iris_like, write_csv):
    train = write_csv(iris_like, "train.csv")
    test = write_csv(iris_like.drop(columns=["x2"]), "test.csv")

    _classifier(tmp_path, train, [test], {"class_arg": "label", "features": "x1"}).perform()

    assert len(pd.read_csv(tmp_path / "pred0.csv")) == len(iris_like)


def test_classifier_parameter_errors(tmp_path, iris_like, write_csv):
    train = write_csv(iris_like, "train.csv")
    test = write_csv(iris_like, "test.csv")

    with pytest.raises(InvalidParametersError):
        _classifier(tmp_path, train, [test], {}).perform()
    with pytest.raises(InvalidParametersError):
        _classifier(tmp_path, train, [test], {"class_arg": "missing"}).perform()
    with pytest.raises(InvalidParametersError):
        _classifier(tmp_path, train, [test], {"class_arg": "label", "model": "svm"}).perform()
    with pytest.raises(InvalidParametersError):
        _classifier(tmp_path, train, [test], {"class_arg": "label", "model": "knn", "n_neighbors": "many"}).perform()
    with pytest.raises(InvalidParametersError):
        _classifier(tmp_path, train, [test], {"class_arg": "label", "features": "nope"}).perform()
    with pytest.raises(WrongNumberOfOutputsError):
        _classifier(tmp_path, train, [test], {"class_arg": "label"}, outputs=["a", "b"]).perform()


def test_classifier_with_custom_model_registry(tmp_path, iris_like, write_csv):
    from sklearn.dummy import DummyClassifier

    registry = ModelRegistry([
        ModelSpec("constant", DummyClassifier, {"strategy": "constant", "constant": "b"},
                  {"constant": ParamSpec(dtype="enum", choices=["a", "b"])}),
    ])
    train = write_csv(iris_like, "train.csv")
    test = write_csv(iris_like, "test.csv")

    Classifier(
        registry=registry,
        task_id="c",
        parameters={"class_arg": "label", "model": "constant", "constant": "a"},
        inputs=[str(train), str(test)],
        outputs=[str(tmp_path / "pred.csv")],
    ).perform()

    assert set(pd.read_csv(tmp_path / "pred.csv")["label"]) == {"a"}


def test_model_registry_v1():
    registry = ModelRegistry.v1()

    assert registry.list_ids() == ["dummy", "knn", "logistic_regression", "random_forest"]
    spec = registry.get("random_forest")
    assert spec.coerce({"max_depth": "None", "n_estimators": "10", "ignored": "x"}) == {
        "max_depth": None,
        "n_estimators": 10,
    }
    with pytest.raises(KeyError):
        registry.get("svm")
    with pytest.raises(ValueError):
        registry.register(spec)


def test_eval_classification_metrics(tmp_path):
    gold = tmp_path / "gold.csv"
    pred = tmp_path / "pred.csv"
    pd.DataFrame({"label": ["a", "a", "b", "b"]}).to_csv(gold, index=False)
    pd.DataFrame({"label": ["a", "b", "b", "b"]}).to_csv(pred, index=False)
    out = tmp_path / "stats" / "result.yaml"

    EvalClassification(
        task_id="e",
        parameters={"class_arg": "label"},
        inputs=[str(gold), str(pred)],
        outputs=[str(out)],
    ).perform()

    stats = yaml.safe_load(out.read_text(encoding="utf-8"))
    assert stats["accuracy"] == pytest.approx(0.75)
    assert stats["support"] == 4
    assert stats["recall_macro"] == pytest.approx(0.75)
    assert set(stats) == {"accuracy", "precision_macro", "recall_macro", "f1_macro", "support"}


def test_eval_classification_validation(tmp_path):
    gold = tmp_path / "gold.csv"
    pd.DataFrame({"label": ["a"]}).to_csv(gold, index=False)

    with pytest.raises(WrongNumberOfInputsError):
        EvalClassification(
            task_id="e", parameters={"class_arg": "label"}, inputs=[str(gold)] * 3, outputs=["o"]
        ).perform()
    with pytest.raises(InvalidParametersError):
        EvalClassification(
            task_id="e", parameters={"class_arg": "other"}, inputs=[str(gold)] * 2, outputs=["o"]
        ).metrics()
