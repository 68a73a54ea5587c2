"""OpenCode の設定（`~/.config/opencode/opencode.json`）への反映。

OpenCode は複数プロバイダの認証情報を1ファイルで持つ。このファイルは OpenCode 側が
所有しているので、こちらが触るのは `provider.<slot>.options` の apiKey / baseURL だけ。
それ以外（models, $schema, tui, plugin, ユーザーが足した項目）はそのまま書き戻す。

- ファイルが無い/壊れている場合は DEFAULT_OPENCODE_CONFIG から始める
- endpoint が空なら baseURL は触らない（環境変数の反映とは逆。OpenCode 側の既定値を残す）
- id が見つからない・種別が違う場合は黙ってスキップ
"""

from __future__ import annotations

import copy
import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from keyswitch.errors import KeyswitchError, SchemaError
from keyswitch.models import ProviderType
from keyswitch.store import ProfileStore

logger = logging.getLogger(__name__)

PROVIDER_SLOTS: dict[ProviderType, str] = {
    ProviderType.CLAUDE: "anthropic",
    ProviderType.GEMINI: "google",
    ProviderType.CODEX: "openai",
}

DEFAULT_OPENCODE_CONFIG: dict[str, Any] = {
    "$schema": "https://opencode.ai/config.json",
    "provider": {
        "anthropic": {
            "options": {"baseURL": "https://api.anthropic.com/v1"},
            "models": {
                "claude-sonnet-4-5": {"name": "Claude Sonnet 4.5"},
                "claude-opus-4-1": {"name": "Claude Opus 4.1"},
            },
        },
        "google": {
            "options": {"baseURL": "https://generativelanguage.googleapis.com/v1beta"},
            "models": {
                "gemini-2.5-pro": {"name": "Gemini 2.5 Pro"},
                "gemini-2.5-flash": {"name": "Gemini 2.5 Flash"},
            },
        },
        "openai": {
            "options": {"baseURL": "https://api.openai.com/v1"},
            "models": {
                "gpt-5": {"name": "GPT-5"},
                "gpt-5-codex": {"name": "GPT-5 Codex"},
            },
        },
    },
    "tui": {"scroll_speed": 3},
    "plugin": [],
}


@dataclass(frozen=True)
class OpenCodeSelection:
    """slot ごとに反映するプロファイルid（None は触らない）。"""

    claude_id: str | None = None
    gemini_id: str | None = None
    codex_id: str | None = None

    def items(self) -> list[tuple[ProviderType, str | None]]:
        return [
            (ProviderType.CLAUDE, self.claude_id),
            (ProviderType.GEMINI, self.gemini_id),
            (ProviderType.CODEX, self.codex_id),
        ]

    @property
    def empty(self) -> bool:
        return not any(pid for _, pid in self.items())


def load_document(path: Path) -> dict[str, Any]:
    if path.exists():
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.warning("opencode config unreadable; starting from default (%s)", type(e).__name__)
        else:
            if isinstance(raw, dict):
                return raw
            logger.warning("opencode config is not a JSON object; starting from default")
    return copy.deepcopy(DEFAULT_OPENCODE_CONFIG)


def merge_selection(doc: dict[str, Any], store: ProfileStore, selection: OpenCodeSelection) -> list[str]:
    """doc を書き換える。反映した slot 名を返す。"""
    providers = doc.get("provider")
    if not isinstance(providers, dict):
        raise SchemaError("opencode config has no 'provider' section")

    applied: list[str] = []
    for provider, profile_id in selection.items():
        if not profile_id:
            continue
        profile = store.get(profile_id)
        if profile is None or profile.provider != provider:
            logger.info("opencode: skip %s (profile %s not found for this type)", provider.value, profile_id)
            continue

        slot_name = PROVIDER_SLOTS[provider]
        slot = providers.setdefault(slot_name, {})
        if not isinstance(slot, dict):
            raise SchemaError(f"opencode config 'provider.{slot_name}' is not an object")
        options = slot.setdefault("options", {})
        if not isinstance(options, dict):
            raise SchemaError(f"opencode config 'provider.{slot_name}.options' is not an object")

        options["apiKey"] = profile.api_key
        if profile.base_url:
            options["baseURL"] = profile.base_url
        applied.append(slot_name)
    return applied


def apply_opencode_config(path: Path, store: ProfileStore, selection: OpenCodeSelection) -> list[str]:
    if selection.empty:
        raise KeyswitchError("select at least one profile to apply to OpenCode")

    doc = load_document(path)
    applied = merge_selection(doc, store, selection)

    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(doc, ensure_ascii=False, indent=2), encoding="utf-8")
    logger.info("wrote opencode config %s (slots: %s)", path, ", ".join(applied) or "none")
    return applied
