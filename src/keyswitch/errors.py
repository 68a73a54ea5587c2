"""keyswitch の例外。

呼び出し側（CLI）はメッセージをそのままユーザーに表示する。
I/O 失敗は OSError のまま伝播させる。
"""

from __future__ import annotations


class KeyswitchError(RuntimeError):
    pass


class ProfileNotFoundError(KeyswitchError):
    def __init__(self, profile_id: str) -> None:
        super().__init__(f"Config not found: {profile_id}")
        self.profile_id = profile_id


class UnsupportedPlatformError(KeyswitchError):
    def __init__(self) -> None:
        super().__init__("Environment variable modification is only supported on Windows")


class SchemaError(KeyswitchError):
    pass
