# FlexiSync Resolver Tests
# Tests for save operation registry and resolution precedence

import json
from pathlib import Path

import pytest

from flexisync.config.schema import DataConfig, ObjectConfig
from flexisync.errors import ConfigurationError
from flexisync.sync.operations import bulk_rest_save, standard_save
from flexisync.sync.resolver import (
    SaveOperationRegistry,
    resolve_save_operation,
    resolve_save_operation_key,
)


def custom_save(context):
    return []


def override_save(context):
    return []


class TestResolveKey:
    """Tests for resolution precedence."""

    def test_object_override_wins(self):
        object_config = ObjectConfig(object_type="Account", save_operation="object-key")
        config = DataConfig(save_operation="config-key")

        assert resolve_save_operation_key(object_config, config, "run-key") == "object-key"

    def test_run_override_before_config(self):
        object_config = ObjectConfig(object_type="Account")
        config = DataConfig(save_operation="config-key")

        assert resolve_save_operation_key(object_config, config, "run-key") == "run-key"

    def test_config_default(self):
        object_config = ObjectConfig(object_type="Account")
        config = DataConfig(save_operation="config-key")

        assert resolve_save_operation_key(object_config, config) == "config-key"

    def test_builtin_default(self):
        assert resolve_save_operation_key(ObjectConfig(object_type="Account"), DataConfig()) == "standard"

    def test_resolve_returns_object_override_operation(self):
        registry = SaveOperationRegistry()
        registry.register("object-key", custom_save)
        registry.register("run-key", override_save)
        object_config = ObjectConfig(object_type="Account", save_operation="object-key")
        config = DataConfig(save_operation="bulk")

        assert resolve_save_operation(object_config, config, "run-key", registry) is custom_save


class TestSaveOperationRegistry:
    """Tests for SaveOperationRegistry."""

    @pytest.mark.parametrize(
        "key,expected",
        [("standard", standard_save), ("default", standard_save), ("bulk", bulk_rest_save), ("bourne", bulk_rest_save)],
    )
    def test_builtins(self, key, expected):
        assert SaveOperationRegistry().get(key) is expected

    def test_unknown_key(self):
        with pytest.raises(ConfigurationError, match="Unknown save operation: turbo"):
            SaveOperationRegistry().get("turbo")

    def test_module_reference(self):
        assert SaveOperationRegistry().get("json:dumps") is json.dumps

    def test_script_reference_cached(self, temp_dir: Path):
        script = temp_dir / "handler.py"
        script.write_text("def save(context):\n    return ['saved']\n", encoding="utf-8")
        registry = SaveOperationRegistry(temp_dir)

        operation = registry.get("handler.py:save")

        assert operation(None) == ["saved"]
        assert registry.get("handler.py:save") is operation
        assert "handler.py:save" in registry.keys()

    def test_script_default_export(self, temp_dir: Path):
        script = temp_dir / "handler.py"
        script.write_text("def run(context):\n    return []\n", encoding="utf-8")

        operation = SaveOperationRegistry(temp_dir).get("handler.py")
        assert operation.__name__ == "run"

    def test_unresolvable_reference(self, temp_dir: Path):
        with pytest.raises(ConfigurationError, match="Unable to resolve save operation missing.py:save"):
            SaveOperationRegistry(temp_dir).get("missing.py:save")
