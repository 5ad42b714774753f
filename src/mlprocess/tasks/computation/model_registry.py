# src/mlprocess/tasks/computation/model_registry.py
"""
ModelRegistry v1: catálogo determinístico de classificadores.

Modelos suportados, parâmetros padrão e parâmetros ajustáveis pelo
cenário são centralizados aqui, sem inferência dinâmica.

Este módulo fornece:
- ParamSpec: tipo de um parâmetro ajustável (strings do cenário → valores)
- ModelSpec: especificação de um modelo suportado
- ModelRegistry: ponto único de verdade para modelos (v1)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Literal, Optional, Type

from sklearn.dummy import DummyClassifier
from sklearn.ensemble import RandomForestClassifier
from sklearn.linear_model import LogisticRegression
from sklearn.neighbors import KNeighborsClassifier


ParamDType = Literal["int", "float", "bool", "enum"]

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class ParamSpec:
    """Parâmetro ajustável via string `nome=valor` do cenário."""

    dtype: ParamDType
    choices: Optional[List[Any]] = None
    allow_none: bool = False

    def coerce(self, raw: str) -> Any:
        """Converte o texto do cenário; ValueError se inválido."""
        text = raw.strip()
        if self.allow_none and text.lower() == "none":
            return None
        if self.dtype == "int":
            return int(text)
        if self.dtype == "float":
            return float(text)
        if self.dtype == "bool":
            if text.lower() in _TRUE:
                return True
            if text.lower() in _FALSE:
                return False
            raise ValueError(f"invalid bool: {raw!r}")
        if self.choices is not None and text not in self.choices:
            raise ValueError(f"invalid choice {raw!r}, expected one of {self.choices}")
        return text


@dataclass(frozen=True)
class ModelSpec:
    """Especificação canônica de um modelo suportado pelo registry."""

    model_id: str
    estimator_cls: Type[Any]
    default_params: Dict[str, Any] = field(default_factory=dict)
    tunable: Dict[str, ParamSpec] = field(default_factory=dict)
    version: str = "v1"

    def coerce(self, raw: Dict[str, str]) -> Dict[str, Any]:
        """Converte apenas os parâmetros ajustáveis presentes em `raw`."""
        return {name: spec.coerce(raw[name]) for name, spec in self.tunable.items() if name in raw}

    def build(self, overrides: Optional[Dict[str, Any]] = None) -> Any:
        """Instancia o estimador com default_params + overrides (sem treinar)."""
        params = dict(self.default_params)
        if overrides:
            params.update(overrides)
        return self.estimator_cls(**params)


class ModelRegistry:
    """Registry determinístico de ModelSpec; novos modelos via `register()`."""

    def __init__(self, specs: Optional[Iterable[ModelSpec]] = None):
        self._specs: Dict[str, ModelSpec] = {}
        if specs:
            for s in specs:
                self.register(s)

    @classmethod
    def v1(cls) -> "ModelRegistry":
        """Factory do catálogo v1 (dummy, LR, RF, KNN)."""
        return cls(specs=_default_specs_v1())

    def register(self, spec: ModelSpec) -> None:
        if not isinstance(spec, ModelSpec):
            raise TypeError("spec must be a ModelSpec")
        if not isinstance(spec.model_id, str) or not spec.model_id.strip():
            raise ValueError("model_id must be a non-empty string")
        if spec.model_id in self._specs:
            raise ValueError(f"model_id already registered: {spec.model_id}")
        self._specs[spec.model_id] = spec

    def list_ids(self) -> List[str]:
        return sorted(self._specs.keys())

    def get(self, model_id: str) -> ModelSpec:
        if model_id not in self._specs:
            raise KeyError(f"unknown model_id: {model_id}")
        return self._specs[model_id]

    def build(self, model_id: str, overrides: Optional[Dict[str, Any]] = None) -> Any:
        return self.get(model_id).build(overrides=overrides)


def _default_specs_v1() -> List[ModelSpec]:
    dummy = ModelSpec(
        model_id="dummy",
        estimator_cls=DummyClassifier,
        default_params={"strategy": "most_frequent"},
        tunable={
            "strategy": ParamSpec(dtype="enum", choices=["most_frequent", "prior", "stratified", "uniform"]),
        },
    )

    lr = ModelSpec(
        model_id="logistic_regression",
        estimator_cls=LogisticRegression,
        default_params={"C": 1.0, "max_iter": 1000, "solver": "lbfgs"},
        tunable={
            "C": ParamSpec(dtype="float"),
            "max_iter": ParamSpec(dtype="int"),
            "solver": ParamSpec(dtype="enum", choices=["lbfgs", "liblinear"]),
        },
    )

    rf = ModelSpec(
        model_id="random_forest",
        estimator_cls=RandomForestClassifier,
        default_params={"n_estimators": 200, "random_state": 42, "n_jobs": 1},
        tunable={
            "n_estimators": ParamSpec(dtype="int"),
            "max_depth": ParamSpec(dtype="int", allow_none=True),
            "min_samples_split": ParamSpec(dtype="int"),
            "min_samples_leaf": ParamSpec(dtype="int"),
            "random_state": ParamSpec(dtype="int"),
        },
    )

    knn = ModelSpec(
        model_id="knn",
        estimator_cls=KNeighborsClassifier,
        default_params={"n_neighbors": 5},
        tunable={
            "n_neighbors": ParamSpec(dtype="int"),
            "weights": ParamSpec(dtype="enum", choices=["uniform", "distance"]),
            "p": ParamSpec(dtype="int"),
        },
    )

    return [dummy, lr, rf, knn]
