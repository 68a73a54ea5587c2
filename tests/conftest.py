from __future__ import annotations

from pathlib import Path

import pytest

from keyswitch.settings import Settings


class MemoryEnvWriter:
    """永続環境変数の代わり（テスト用）。"""

    def __init__(self) -> None:
        self.vars: dict[str, str] = {}
        self.calls: list[tuple[str, str]] = []

    def set(self, name: str, value: str) -> None:
        self.calls.append(("set", name))
        self.vars[name] = value

    def delete(self, name: str) -> None:
        self.calls.append(("delete", name))
        self.vars.pop(name, None)


@pytest.fixture()
def env() -> MemoryEnvWriter:
    return MemoryEnvWriter()


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    return Settings(store_dir=tmp_path / "store", home=tmp_path / "home")
