"""プロファイルの永続化（configs.json）。

- 1コマンドごとに読み込み→変更→書き戻し（メモリ上のキャッシュは持たない）
- 読み込み失敗（無い/壊れている）は空のストアとして扱う
- 書き込みは一時ファイル + rename で行う
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path

from keyswitch.models import Profile, ProviderType

logger = logging.getLogger(__name__)


@dataclass
class ProfileStore:
    profiles: list[Profile] = field(default_factory=list)

    def get(self, profile_id: str) -> Profile | None:
        for p in self.profiles:
            if p.id == profile_id:
                return p
        return None

    def of_type(self, provider: ProviderType) -> list[Profile]:
        return [p for p in self.profiles if p.provider == provider]

    def active_for(self, provider: ProviderType) -> list[Profile]:
        """provider の有効プロファイル。

        正常時は0件か1件。ファイルを直接いじられた場合は複数あり得るので
        そのまま返す（先頭が実質的な有効プロファイル）。
        """
        return [p for p in self.of_type(provider) if p.is_active]

    def remove(self, profile_id: str) -> Profile | None:
        target = self.get(profile_id)
        if target is not None:
            self.profiles = [p for p in self.profiles if p.id != profile_id]
        return target


def load_store(path: Path) -> ProfileStore:
    if not path.exists():
        return ProfileStore()

    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        logger.warning("store is unreadable; using empty store (%s: %s)", path, type(e).__name__)
        return ProfileStore()

    if not isinstance(raw, dict):
        logger.warning("store is not a JSON object; using empty store (%s)", path)
        return ProfileStore()

    items = raw.get("configs")
    if items is None:
        items = []
    if not isinstance(items, list):
        logger.warning("store 'configs' is not a list; using empty store (%s)", path)
        return ProfileStore()

    profiles: list[Profile] = []
    for item in items:
        if not isinstance(item, dict):
            continue
        try:
            profiles.append(Profile.from_dict(item))
        except ValueError as e:
            logger.warning("skipping invalid profile entry: %s", e)
    return ProfileStore(profiles=profiles)


def save_store(path: Path, store: ProfileStore) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    raw = {"configs": [p.to_dict() for p in store.profiles]}
    text = json.dumps(raw, ensure_ascii=False, indent=2)

    fd, tmp = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(text)
        os.replace(tmp, path)
    except BaseException:
        Path(tmp).unlink(missing_ok=True)
        raise
