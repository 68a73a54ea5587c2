"""プロファイル操作（追加/更新/削除/有効化/無効化）。

- 毎回ストアを読み込み、変更して書き戻す
- 有効プロファイルは種別ごとに最大1つ（有効化のときに同種別の他を無効化する）
- ストアへの保存を先に行い、その後に外部状態へ反映する。
  反映に失敗してもストアは巻き戻さない（再度 activate すれば揃う）
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from keyswitch.appliers import Applier, applier_for
from keyswitch.envvars import EnvironmentWriter
from keyswitch.errors import ProfileNotFoundError
from keyswitch.models import Profile, ProviderType
from keyswitch.opencode import OpenCodeSelection, apply_opencode_config
from keyswitch.settings import Settings
from keyswitch.store import ProfileStore, load_store, save_store

logger = logging.getLogger(__name__)


@dataclass
class ProfileManager:
    settings: Settings
    env: EnvironmentWriter

    def _load(self) -> ProfileStore:
        return load_store(self.settings.store_path)

    def _save(self, store: ProfileStore) -> None:
        save_store(self.settings.store_path, store)

    def _applier(self, provider: ProviderType) -> Applier:
        return applier_for(provider, env=self.env, settings=self.settings)

    def list_profiles(self) -> list[Profile]:
        return list(self._load().profiles)

    def add(self, name: str, provider: ProviderType, api_key: str, base_url: str = "") -> Profile:
        store = self._load()
        profile = Profile(name=name, provider=provider, api_key=api_key, base_url=base_url)
        store.profiles.append(profile)
        self._save(store)
        logger.info("added profile %s (%s, %s)", profile.id, provider.value, name)
        return profile

    def update(self, profile_id: str, name: str, api_key: str, base_url: str) -> None:
        """名前/認証情報/エンドポイントを更新する。

        id が見つからない場合は何もしない（エラーにしない）。
        有効なプロファイルなら保存後に反映し直す。
        """
        store = self._load()
        profile = store.get(profile_id)
        if profile is None:
            logger.info("update: profile %s not found; ignored", profile_id)
            self._save(store)
            return

        profile.name = name
        profile.api_key = api_key
        profile.base_url = base_url
        self._save(store)
        logger.info("updated profile %s", profile_id)

        if profile.is_active:
            self._applier(profile.provider).apply(profile)
            logger.info("re-applied active profile %s", profile_id)

    def delete(self, profile_id: str) -> None:
        """削除する。有効なプロファイルなら先に外部状態を解除する。

        解除に失敗しても削除は保存し、その後で解除のエラーを投げる。
        """
        store = self._load()
        target = store.remove(profile_id)

        clear_error: Exception | None = None
        if target is not None and target.is_active:
            try:
                self._applier(target.provider).clear()
            except Exception as e:
                clear_error = e

        self._save(store)
        if target is not None:
            logger.info("deleted profile %s", profile_id)
        if clear_error is not None:
            raise clear_error

    def activate(self, profile_id: str) -> Profile:
        store = self._load()
        target = store.get(profile_id)
        if target is None:
            raise ProfileNotFoundError(profile_id)

        # 同じ種別だけを無効化する（他の種別の有効プロファイルはそのまま）
        for p in store.of_type(target.provider):
            p.is_active = False
        target.is_active = True

        self._save(store)
        logger.info("activated profile %s (%s)", target.id, target.provider.value)

        self._applier(target.provider).apply(target)
        return target

    def deactivate(self, profile_id: str) -> None:
        store = self._load()
        target = store.get(profile_id)
        if target is None or not target.is_active:
            return

        target.is_active = False
        self._save(store)
        logger.info("deactivated profile %s (%s)", target.id, target.provider.value)

        self._applier(target.provider).clear()

    def status(self) -> dict[ProviderType, list[Profile]]:
        store = self._load()
        return {provider: store.active_for(provider) for provider in ProviderType}

    def apply_opencode(self, selection: OpenCodeSelection) -> list[str]:
        """選択したプロファイルを OpenCode の設定ファイルにマージする。"""
        return apply_opencode_config(self.settings.opencode_path, self._load(), selection)
