"""ユーザー環境変数（永続）の書き換え。

Windows のみ対応:
- HKEY_CURRENT_USER\\Environment に書き込む（プロセスの一時的な環境ではない）
- 書き換え後に WM_SETTINGCHANGE をブロードキャストする
  - 新しく開いたターミナルは必ず拾う。既に開いているものは拾わないことがある

それ以外の OS では set/delete が UnsupportedPlatformError になる。
"""

from __future__ import annotations

import logging
import sys
from typing import Protocol

from keyswitch.errors import UnsupportedPlatformError

logger = logging.getLogger(__name__)

HWND_BROADCAST = 0xFFFF
WM_SETTINGCHANGE = 0x001A
SMTO_ABORTIFHUNG = 0x0002
BROADCAST_TIMEOUT_MS = 5000


class EnvironmentWriter(Protocol):
    def set(self, name: str, value: str) -> None: ...

    def delete(self, name: str) -> None: ...


class WindowsEnvironmentWriter:
    """HKCU\\Environment への書き込み。"""

    subkey = "Environment"

    def set(self, name: str, value: str) -> None:
        import winreg

        with winreg.OpenKey(winreg.HKEY_CURRENT_USER, self.subkey, 0, winreg.KEY_SET_VALUE) as key:
            winreg.SetValueEx(key, name, 0, winreg.REG_SZ, value)
        logger.info("set user env var %s", name)
        broadcast_settings_change()

    def delete(self, name: str) -> None:
        import winreg

        with winreg.OpenKey(winreg.HKEY_CURRENT_USER, self.subkey, 0, winreg.KEY_SET_VALUE) as key:
            try:
                winreg.DeleteValue(key, name)
            except FileNotFoundError:
                # 存在しない変数の削除はエラーにしない
                return
        logger.info("deleted user env var %s", name)
        broadcast_settings_change()


class UnsupportedEnvironmentWriter:
    def set(self, name: str, value: str) -> None:
        raise UnsupportedPlatformError()

    def delete(self, name: str) -> None:
        raise UnsupportedPlatformError()


def broadcast_settings_change() -> None:
    """実行中のプロセスへ環境変数の変更を通知する（タイムアウトしても失敗扱いにしない）。"""
    import ctypes
    from ctypes import wintypes

    result = wintypes.DWORD()
    try:
        ok = ctypes.windll.user32.SendMessageTimeoutW(  # type: ignore[attr-defined]
            HWND_BROADCAST,
            WM_SETTINGCHANGE,
            0,
            "Environment",
            SMTO_ABORTIFHUNG,
            BROADCAST_TIMEOUT_MS,
            ctypes.byref(result),
        )
    except OSError as e:
        logger.debug("WM_SETTINGCHANGE broadcast failed: %s", e)
        return
    if not ok:
        logger.debug("WM_SETTINGCHANGE broadcast timed out")


def default_env_writer() -> EnvironmentWriter:
    if sys.platform == "win32":
        return WindowsEnvironmentWriter()
    return UnsupportedEnvironmentWriter()
