"""プロファイル種別ごとの反映（apply）と解除（clear）。

- claude / gemini: ユーザー環境変数
- codex: `~/.codex/auth.json` と `~/.codex/config.toml`

種別を増やすときは apply/clear を持つクラスを1つ足して `applier_for` に登録する。
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from keyswitch.envvars import EnvironmentWriter
from keyswitch.models import Profile, ProviderType
from keyswitch.settings import Settings

logger = logging.getLogger(__name__)

# Codex CLI が読む設定。base_url 以外の行は Codex 側との取り決めなので変えない。
CODEX_CONFIG_TEMPLATE = """\
model_provider = "keyswitch"
model = "gpt-5-codex"
model_reasoning_effort = "high"
disable_response_storage = true
preferred_auth_method = "apikey"

[model_providers.keyswitch]
name = "keyswitch"
base_url = "{base_url}"
wire_api = "responses"
requires_openai_auth = true

[profiles.fast]
model = "gpt-5-codex-mini"
model_provider = "keyswitch"
model_reasoning_effort = "low"
"""

CODEX_AUTH_FILENAME = "auth.json"
CODEX_CONFIG_FILENAME = "config.toml"


class Applier(Protocol):
    def apply(self, profile: Profile) -> None: ...

    def clear(self) -> None: ...


@dataclass(frozen=True)
class EnvVarApplier:
    """認証情報とエンドポイントを永続ユーザー環境変数に書く。"""

    env: EnvironmentWriter
    key_var: str
    url_var: str

    def apply(self, profile: Profile) -> None:
        self.env.set(self.key_var, profile.api_key)
        # 空なら削除して、古い上書き値が残らないようにする
        if profile.base_url:
            self.env.set(self.url_var, profile.base_url)
        else:
            self.env.delete(self.url_var)

    def clear(self) -> None:
        self.env.delete(self.key_var)
        self.env.delete(self.url_var)


@dataclass(frozen=True)
class CodexFileApplier:
    codex_dir: Path
    default_base_url: str

    @property
    def auth_path(self) -> Path:
        return self.codex_dir / CODEX_AUTH_FILENAME

    @property
    def config_path(self) -> Path:
        return self.codex_dir / CODEX_CONFIG_FILENAME

    def apply(self, profile: Profile) -> None:
        self.codex_dir.mkdir(parents=True, exist_ok=True)

        auth = {"OPENAI_API_KEY": profile.api_key}
        self.auth_path.write_text(json.dumps(auth, indent=2), encoding="utf-8")

        base_url = profile.base_url or self.default_base_url
        self.config_path.write_text(render_codex_config(base_url), encoding="utf-8")
        logger.info("wrote codex files under %s", self.codex_dir)

    def clear(self) -> None:
        for p in (self.auth_path, self.config_path):
            p.unlink(missing_ok=True)
        logger.info("removed codex files under %s", self.codex_dir)


def render_codex_config(base_url: str) -> str:
    escaped = base_url.replace("\\", "\\\\").replace('"', '\\"')
    return CODEX_CONFIG_TEMPLATE.format(base_url=escaped)


ENV_VARS: dict[ProviderType, tuple[str, str]] = {
    ProviderType.CLAUDE: ("ANTHROPIC_AUTH_TOKEN", "ANTHROPIC_BASE_URL"),
    ProviderType.GEMINI: ("GEMINI_API_KEY", "GOOGLE_GEMINI_BASE_URL"),
}


def applier_for(provider: ProviderType, *, env: EnvironmentWriter, settings: Settings) -> Applier:
    if provider in ENV_VARS:
        key_var, url_var = ENV_VARS[provider]
        return EnvVarApplier(env=env, key_var=key_var, url_var=url_var)
    if provider == ProviderType.CODEX:
        return CodexFileApplier(
            codex_dir=settings.codex_dir,
            default_base_url=settings.codex_default_base_url,
        )
    raise ValueError(f"no applier for config type: {provider.value}")
