"""プロファイルのデータモデル。

1プロファイル = 1つのCLI（claude / gemini / codex）向けの認証情報 + 任意のエンドポイント。
永続化フォーマット（configs.json の1要素）:

```json
{
  "id": "5b0c...",
  "name": "work",
  "config_type": "claude",
  "api_key": "sk-...",
  "base_url": "",
  "is_active": false
}
```
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ProviderType(str, Enum):
    CLAUDE = "claude"
    GEMINI = "gemini"
    CODEX = "codex"

    @property
    def label(self) -> str:
        return _LABELS[self]


_LABELS = {
    ProviderType.CLAUDE: "Claude",
    ProviderType.GEMINI: "Gemini",
    ProviderType.CODEX: "Codex",
}

# 画面表示用: 認証情報/エンドポイントがどこへ反映されるか
_KEY_LABELS = {
    ProviderType.CLAUDE: "ANTHROPIC_AUTH_TOKEN",
    ProviderType.GEMINI: "GEMINI_API_KEY",
    ProviderType.CODEX: "API Key",
}

_URL_LABELS = {
    ProviderType.CLAUDE: "ANTHROPIC_BASE_URL",
    ProviderType.GEMINI: "GOOGLE_GEMINI_BASE_URL",
    ProviderType.CODEX: "Base URL",
}


def key_label(provider: ProviderType) -> str:
    return _KEY_LABELS[provider]


def url_label(provider: ProviderType) -> str:
    return _URL_LABELS[provider]


def parse_provider(value: str) -> ProviderType:
    """'Claude' / 'claude' などを ProviderType に変換する。未知なら ValueError。"""
    try:
        return ProviderType(value.strip().lower())
    except ValueError:
        names = ", ".join(p.value for p in ProviderType)
        raise ValueError(f"unknown config type: {value!r} (expected one of: {names})") from None


def new_profile_id() -> str:
    return str(uuid.uuid4())


@dataclass
class Profile:
    """1つの認証プロファイル。"""

    name: str
    provider: ProviderType
    api_key: str = field(default="", repr=False)
    base_url: str = ""  # 空文字 = デフォルトを使う
    is_active: bool = False
    id: str = field(default_factory=new_profile_id)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "config_type": self.provider.value,
            "api_key": self.api_key,
            "base_url": self.base_url,
            "is_active": self.is_active,
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> Profile:
        """configs.json の1要素から復元する。

        旧フォーマット（Claude専用時代）の `auth_token` / config_type 無しも読む。
        id が無い・config_type が未知の場合は ValueError。
        """
        profile_id = str(raw.get("id", "") or "")
        if not profile_id:
            raise ValueError("profile without id")
        provider = parse_provider(str(raw.get("config_type", ProviderType.CLAUDE.value)))
        api_key = raw.get("api_key")
        if api_key is None:
            api_key = raw.get("auth_token", "")
        return cls(
            id=profile_id,
            name=str(raw.get("name") or ""),
            provider=provider,
            api_key=str(api_key or ""),
            base_url=str(raw.get("base_url", "") or ""),
            is_active=raw.get("is_active") is True,
        )


def mask_key(token: str) -> str:
    """一覧表示用に認証情報を伏せる。"""
    if not token or len(token) < 10:
        return "****"
    return token[:7] + "..." + token[-4:]
