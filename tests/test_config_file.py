import pytest
from ruamel.yaml import YAML

from canaryreview.config_file import write_config


def _load(path):
    return YAML(typ="safe").load(path.read_text(encoding="utf-8"))


def test_fresh_write(tmp_path):
    path = tmp_path / "cfg" / "config.yml"
    assert write_config("anthropic", "claude-sonnet-4-6", "claude-haiku-4-5-20251001", path) is True
    assert path.read_text(encoding="utf-8") == (
        "version: 1\n\nprovider: anthropic\n"
        "review_model: claude-sonnet-4-6\n"
        "triage_model: claude-haiku-4-5-20251001\n"
    )


def test_unchanged_config_is_not_rewritten(tmp_path):
    path = tmp_path / "config.yml"
    write_config("openai", "gpt-5.4", "gpt-5.4-mini", path)
    before = path.read_text(encoding="utf-8")
    assert write_config("openai", "gpt-5.4", "gpt-5.4-mini", path) is False
    assert path.read_text(encoding="utf-8") == before


def test_update_preserves_comments_and_extra_keys(tmp_path):
    path = tmp_path / "config.yml"
    path.write_text(
        "# my settings\nversion: 1\nprovider: openai\nreview_model: gpt-5.4\n"
        "triage_model: gpt-5.4-mini\nmax_budget_usd: 2\n",
        encoding="utf-8",
    )
    assert write_config("grok", "grok-4-1-fast-reasoning", "grok-4-1-fast-non-reasoning", path)
    text = path.read_text(encoding="utf-8")
    assert "# my settings" in text
    data = _load(path)
    assert data["provider"] == "grok"
    assert data["review_model"] == "grok-4-1-fast-reasoning"
    assert data["triage_model"] == "grok-4-1-fast-non-reasoning"
    assert data["max_budget_usd"] == 2
    assert data["version"] == 1


def test_missing_keys_are_added(tmp_path):
    path = tmp_path / "config.yml"
    path.write_text("timeout: 5\n", encoding="utf-8")
    assert write_config("claude", "sonnet", "haiku", path) is True
    data = _load(path)
    assert data == {
        "timeout": 5,
        "version": 1,
        "provider": "claude",
        "review_model": "sonnet",
        "triage_model": "haiku",
    }


@pytest.mark.parametrize(
    "args",
    [("", "m", "t"), ("p", "", "t"), ("p", "m", "")],
)
def test_required_fields(tmp_path, args):
    with pytest.raises(ValueError):
        write_config(*args, tmp_path / "config.yml")
    assert not (tmp_path / "config.yml").exists()


def test_non_mapping_file_is_rejected(tmp_path):
    path = tmp_path / "config.yml"
    path.write_text("- a\n- b\n", encoding="utf-8")
    with pytest.raises(ValueError, match="not a valid YAML mapping"):
        write_config("openai", "gpt-5.4", "gpt-5.4-mini", path)


def test_invalid_yaml_is_rejected(tmp_path):
    path = tmp_path / "config.yml"
    path.write_text("key: [unclosed\n", encoding="utf-8")
    with pytest.raises(ValueError, match="parsing existing"):
        write_config("openai", "gpt-5.4", "gpt-5.4-mini", path)