"""appliers のテスト。"""

import json
from pathlib import Path

import pytest

from keyswitch.appliers import (
    CodexFileApplier,
    EnvVarApplier,
    applier_for,
    render_codex_config,
)
from keyswitch.envvars import UnsupportedEnvironmentWriter
from keyswitch.errors import UnsupportedPlatformError
from keyswitch.models import Profile, ProviderType
from keyswitch.settings import Settings

try:
    import tomllib
except ModuleNotFoundError:
    import tomli as tomllib  # type: ignore[no-redef]


def test_env_applier_sets_and_clears_url(env) -> None:
    a = EnvVarApplier(env=env, key_var="ANTHROPIC_AUTH_TOKEN", url_var="ANTHROPIC_BASE_URL")
    env.vars["ANTHROPIC_BASE_URL"] = "https://stale"

    a.apply(Profile(name="w", provider=ProviderType.CLAUDE, api_key="sk-1"))
    assert env.vars == {"ANTHROPIC_AUTH_TOKEN": "sk-1"}

    a.apply(Profile(name="w", provider=ProviderType.CLAUDE, api_key="sk-2", base_url="https://x"))
    assert env.vars == {"ANTHROPIC_AUTH_TOKEN": "sk-2", "ANTHROPIC_BASE_URL": "https://x"}

    a.clear()
    a.clear()
    assert env.vars == {}


def test_env_applier_unsupported_platform() -> None:
    a = EnvVarApplier(env=UnsupportedEnvironmentWriter(), key_var="A", url_var="B")
    with pytest.raises(UnsupportedPlatformError):
        a.apply(Profile(name="w", provider=ProviderType.GEMINI, api_key="g"))


def test_applier_for_env_types(env, settings: Settings) -> None:
    a = applier_for(ProviderType.GEMINI, env=env, settings=settings)
    assert isinstance(a, EnvVarApplier)
    assert (a.key_var, a.url_var) == ("GEMINI_API_KEY", "GOOGLE_GEMINI_BASE_URL")
    assert isinstance(applier_for(ProviderType.CODEX, env=env, settings=settings), CodexFileApplier)


def test_codex_apply_writes_files(settings: Settings) -> None:
    a = CodexFileApplier(codex_dir=settings.codex_dir, default_base_url="https://api.openai.com/v1")
    a.apply(Profile(name="c", provider=ProviderType.CODEX, api_key="sk-c"))

    auth = json.loads((settings.codex_dir / "auth.json").read_text(encoding="utf-8"))
    assert auth == {"OPENAI_API_KEY": "sk-c"}

    text = (settings.codex_dir / "config.toml").read_text(encoding="utf-8")
    assert text == render_codex_config("https://api.openai.com/v1")
    cfg = tomllib.loads(text)
    assert cfg["model_providers"]["keyswitch"]["base_url"] == "https://api.openai.com/v1"


def test_codex_custom_base_url_only_changes_one_line(settings: Settings) -> None:
    default = render_codex_config("https://api.openai.com/v1").splitlines()
    custom = render_codex_config("https://proxy.example/v1").splitlines()
    diff = [(a, b) for a, b in zip(default, custom) if a != b]
    assert diff == [('base_url = "https://api.openai.com/v1"', 'base_url = "https://proxy.example/v1"')]


def test_codex_base_url_is_toml_escaped() -> None:
    cfg = tomllib.loads(render_codex_config('https://x/"q"'))
    assert cfg["model_providers"]["keyswitch"]["base_url"] == 'https://x/"q"'


def test_codex_clear(tmp_path: Path) -> None:
    a = CodexFileApplier(codex_dir=tmp_path / ".codex", default_base_url="https://d")
    a.clear()  # 無くてもエラーにならない
    a.apply(Profile(name="c", provider=ProviderType.CODEX, api_key="k"))
    a.clear()
    assert not a.auth_path.exists()
    assert not a.config_path.exists()
    assert a.codex_dir.exists()
