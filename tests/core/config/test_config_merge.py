# tests/core/config/test_config_merge.py
"""
Testes do deep-merge canônico de configuração.

Invariantes verificadas:
    - Overrides escalares substituem o valor base
    - Dicionários são mesclados recursivamente
    - Listas são sobrescritas integralmente
    - int/float são intercambiáveis em chaves numéricas
    - Conflitos de tipo interrompem o merge
    - Nenhum input é mutado
"""

import pytest

try:
    from mlprocess.core.config.merge import deep_merge
    from mlprocess.core.config.errors import ConfigTypeConflictError
except Exception as e:  # noqa: BLE001
    deep_merge = None
    ConfigTypeConflictError = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def _require_imports():
    if _IMPORT_ERR is not None:
        pytest.fail(
            "Missing config merge modules. Implement:\n"
            "- src/mlprocess/core/config/merge.py (deep_merge)\n"
            "- src/mlprocess/core/config/errors.py (ConfigTypeConflictError)\n"
            f"Import error: {_IMPORT_ERR}"
        )


def test_merge_simple_override_does_not_mutate_inputs():
    _require_imports()

    base = {"a": 1, "b": 2}
    override = {"b": 99}

    out = deep_merge(base, override)

    assert out == {"a": 1, "b": 99}
    assert base == {"a": 1, "b": 2}
    assert override == {"b": 99}


def test_merge_nested_scheduler_section():
    _require_imports()

    base = {"scheduler": {"threads": 1, "instances": 1, "backoff": {"base_delay": 2.0, "jitter": 3.0}}}
    override = {"scheduler": {"threads": 4, "backoff": {"jitter": 0.5}}}

    out = deep_merge(base, override)

    assert out == {"scheduler": {"threads": 4, "instances": 1, "backoff": {"base_delay": 2.0, "jitter": 0.5}}}


def test_merge_list_is_replaced():
    _require_imports()

    out = deep_merge({"reset": ["a", "b"]}, {"reset": ["c"]})

    assert out == {"reset": ["c"]}


def test_merge_accepts_int_for_float_key():
    """
    Chaves numéricas aceitam int e float indistintamente.

    `base_delay: 0` num arquivo YAML chega como int; o default é float.
    """
    _require_imports()

    out = deep_merge({"backoff": {"base_delay": 2.0}}, {"backoff": {"base_delay": 0}})

    assert out["backoff"]["base_delay"] == 0


def test_merge_type_conflict_raises():
    _require_imports()

    with pytest.raises(ConfigTypeConflictError):
        deep_merge({"scheduler": {"threads": 1}}, {"scheduler": "fast"})


def test_merge_bool_is_not_numeric():
    _require_imports()

    with pytest.raises(ConfigTypeConflictError):
        deep_merge({"threads": 1}, {"threads": True})
