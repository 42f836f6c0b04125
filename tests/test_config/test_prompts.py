"""Tests for prompt loading and the prompt registry."""

import pytest

from packsmith.config.loader import load_builtin_prompt, load_prompt_yaml, load_yaml
from packsmith.prompts.registry import PromptRegistry
from packsmith.types import ToolPrompt

_BUILTIN_TOOLS = {
    "verify",
    "generate",
    "generate_from_plan",
    "combine",
    "fix",
    "summarize",
    "refactor",
    "function",
}


class TestLoadPromptYaml:
    def test_loads_tool_prompt(self, sample_prompt_yaml):
        prompt = load_prompt_yaml(sample_prompt_yaml)
        assert prompt.name == "test_tool"
        assert prompt.temperature == 0.4
        assert "{{ request }}" in prompt.user

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_prompt_yaml(tmp_path / "missing.yaml")

    def test_missing_tool_key(self, tmp_path):
        path = tmp_path / "x.yaml"
        path.write_text("name: x\n")
        with pytest.raises(ValueError, match="missing top-level 'tool' key"):
            load_prompt_yaml(path)

    def test_load_yaml_rejects_non_mapping(self, tmp_path):
        path = tmp_path / "x.yaml"
        path.write_text("just a string\n")
        with pytest.raises(ValueError, match="Expected YAML mapping"):
            load_yaml(path)

    @pytest.mark.parametrize("name", sorted(_BUILTIN_TOOLS))
    def test_builtin_prompts_valid(self, name):
        prompt = load_builtin_prompt(name)
        assert prompt.name == name
        assert prompt.system.strip()
        assert prompt.user.strip()


class TestPromptRegistry:
    def test_builtins_registered(self):
        registry = PromptRegistry()
        assert {p.name for p in registry.list_prompts()} >= _BUILTIN_TOOLS
        assert all(p.builtin for p in registry.list_prompts())

    def test_get_missing(self):
        with pytest.raises(KeyError):
            PromptRegistry().get("nonexistent")

    def test_user_dir_adds_prompt(self, sample_prompt_yaml):
        registry = PromptRegistry(user_dirs=[sample_prompt_yaml.parent])
        assert registry.has("test_tool")
        info = {p.name: p for p in registry.list_prompts()}["test_tool"]
        assert info.builtin is False

    def test_user_dir_overrides_builtin(self, tmp_path):
        (tmp_path / "fix.yaml").write_text(
            "tool:\n  name: fix\n  system: custom\n  user: '{{ problem }}'\n"
        )
        registry = PromptRegistry(user_dirs=[tmp_path])
        assert registry.get("fix").system == "custom"

    def test_invalid_files_skipped(self, tmp_path):
        (tmp_path / "notes.yaml").write_text("title: not a prompt\n")
        (tmp_path / "broken.yaml").write_text("tool:\n  name: broken\n")
        registry = PromptRegistry(user_dirs=[tmp_path])
        assert not registry.has("broken")

    def test_missing_user_dir_ignored(self, tmp_path):
        registry = PromptRegistry(user_dirs=[tmp_path / "missing"])
        assert registry.has("verify")

    def test_register(self):
        registry = PromptRegistry()
        registry.register(ToolPrompt(name="custom", system="s", user="u"))
        assert registry.get("custom").system == "s"
