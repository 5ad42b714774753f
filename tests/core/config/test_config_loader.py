# tests/core/config/test_config_loader.py
"""
Testes da resolução da configuração efetiva (`resolve_config`).

Precedência: DEFAULT_CONFIG ⟵ arquivo do operador ⟵ overrides da CLI.
"""

import json

import pytest

from mlprocess.core.config import (
    DEFAULT_CONFIG,
    ConfigFileNotFoundError,
    InvalidConfigRootTypeError,
    UnsupportedConfigFormatError,
    compute_config_hash,
    resolve_config,
)


def test_resolve_without_sources_returns_defaults_copy():
    config = resolve_config()

    assert config == DEFAULT_CONFIG
    config["scheduler"]["threads"] = 99
    assert DEFAULT_CONFIG["scheduler"]["threads"] == 1


def test_file_then_overrides_precedence(tmp_path):
    path = tmp_path / "local.yaml"
    path.write_text(
        "scheduler:\n  threads: 3\n  instances: 2\nlogging:\n  verbosity: 4\n",
        encoding="utf-8",
    )

    config = resolve_config(config_path=path, overrides={"scheduler": {"threads": 8}})

    assert config["scheduler"]["threads"] == 8
    assert config["scheduler"]["instances"] == 2
    assert config["logging"]["verbosity"] == 4
    assert config["plan"]["todo_suffix"] == ".todo"


def test_json_config_is_supported(tmp_path):
    path = tmp_path / "local.json"
    path.write_text(json.dumps({"plan": {"lock_timeout": 5}}), encoding="utf-8")

    assert resolve_config(config_path=path)["plan"]["lock_timeout"] == 5


def test_empty_yaml_is_empty_mapping(tmp_path):
    path = tmp_path / "empty.yml"
    path.write_text("", encoding="utf-8")

    assert resolve_config(config_path=path) == DEFAULT_CONFIG


def test_missing_file_raises(tmp_path):
    with pytest.raises(ConfigFileNotFoundError):
        resolve_config(config_path=tmp_path / "nope.yaml")


def test_unsupported_format_raises(tmp_path):
    path = tmp_path / "config.toml"
    path.write_text("x = 1\n", encoding="utf-8")

    with pytest.raises(UnsupportedConfigFormatError):
        resolve_config(config_path=path)


def test_root_must_be_mapping(tmp_path):
    path = tmp_path / "list.yaml"
    path.write_text("- 1\n- 2\n", encoding="utf-8")

    with pytest.raises(InvalidConfigRootTypeError):
        resolve_config(config_path=path)


def test_hash_ignores_key_order():
    a = {"scheduler": {"threads": 1, "instances": 2}}
    b = {"scheduler": {"instances": 2, "threads": 1}}

    assert compute_config_hash(a) == compute_config_hash(b)
    assert len(compute_config_hash(a)) == 64
    assert compute_config_hash(a) != compute_config_hash({"scheduler": {"threads": 2, "instances": 2}})


def test_hash_rejects_non_dict():
    with pytest.raises(TypeError):
        compute_config_hash(["not", "a", "dict"])
