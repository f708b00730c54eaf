"""Unit tests for the YAML config store."""

import pytest
import yaml

from ec2iaas.config import CONFIG_ENV_VAR, Config, load_config, resolve_config_path
from ec2iaas.errors import ConfigMissing


def test_get_nested():
    config = Config({"iaas": {"ec2": {"key-id": "mykey"}}})
    assert config.get("iaas:ec2:key-id") == "mykey"
    assert config.get("iaas:ec2") == {"key-id": "mykey"}


@pytest.mark.parametrize("key", ["iaas:ec2:secret-key", "nope", "iaas:ec2:key-id:deeper"])
def test_get_missing(key):
    config = Config({"iaas": {"ec2": {"key-id": "mykey"}}})
    with pytest.raises(ConfigMissing, match=key) as exc_info:
        config.get(key)
    assert exc_info.value.key == key


def test_get_string_converts_scalars():
    config = Config({"timeout": 300, "flag": True, "empty": "", "name": "ec2"})
    assert config.get_string("timeout") == "300"
    assert config.get_string("flag") == "true"
    assert config.get_string("empty") == ""
    assert config.get_string("name") == "ec2"


def test_get_string_null_is_missing():
    config = Config(yaml.safe_load("iaas:\n  ec2:\n    key-id:\n"))
    with pytest.raises(ConfigMissing, match="iaas:ec2:key-id"):
        config.get_string("iaas:ec2:key-id")


def test_get_string_rejects_sections():
    config = Config({"iaas": {"ec2": {}}})
    with pytest.raises(ConfigMissing):
        config.get_string("iaas:ec2")


def test_set_and_unset():
    config = Config()
    config.set("iaas:ec2:wait-timeout", "1")
    assert config.get_string("iaas:ec2:wait-timeout") == "1"

    config.unset("iaas:ec2:wait-timeout")
    with pytest.raises(ConfigMissing):
        config.get("iaas:ec2:wait-timeout")


def test_set_replaces_scalar_with_section():
    config = Config({"iaas": "oops"})
    config.set("iaas:ec2:key-id", "k")
    assert config.get("iaas:ec2:key-id") == "k"


def test_unset_missing_is_noop():
    config = Config({"iaas": {"ec2": {}}})
    config.unset("iaas:custom:x:provider")
    config.unset("iaas:ec2:key-id")
    assert config.get("iaas:ec2") == {}


def test_load_config(make_config_file):
    path = make_config_file({"iaas": {"ec2": {"key-id": "mykey", "wait-timeout": 60}}})

    config = load_config(path)

    assert config.get_string("iaas:ec2:key-id") == "mykey"
    assert config.get_string("iaas:ec2:wait-timeout") == "60"


def test_load_config_missing_file(tmp_path):
    config = load_config(str(tmp_path / "absent.yaml"))
    with pytest.raises(ConfigMissing):
        config.get("iaas")


def test_load_config_empty_file(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("")
    with pytest.raises(ConfigMissing):
        load_config(str(path)).get("iaas")


def test_load_config_not_a_mapping(tmp_path):
    path = tmp_path / "list.yaml"
    path.write_text("- a\n- b\n")
    with pytest.raises(ValueError, match="mapping"):
        load_config(str(path))


def test_load_config_invalid_yaml(tmp_path):
    path = tmp_path / "bad.yaml"
    path.write_text("iaas: [unclosed\n")
    with pytest.raises(yaml.YAMLError):
        load_config(str(path))


def test_resolve_config_path(monkeypatch):
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
    assert resolve_config_path() == "ec2iaas.yaml"
    assert resolve_config_path("x.yaml") == "x.yaml"

    monkeypatch.setenv(CONFIG_ENV_VAR, "/etc/ec2iaas.yaml")
    assert resolve_config_path() == "/etc/ec2iaas.yaml"
    assert resolve_config_path("x.yaml") == "x.yaml"


def test_load_config_from_env(monkeypatch, make_config_file):
    path = make_config_file({"iaas": {"default": "ec2"}})
    monkeypatch.setenv(CONFIG_ENV_VAR, path)

    assert load_config().get_string("iaas:default") == "ec2"
