"""設定とファイル配置。

- プロファイル保存先: `<config dir>/claude-config-manager/configs.json`
  - config dir: Windows は %APPDATA%、それ以外は $XDG_CONFIG_HOME か ~/.config
- 任意の設定ファイル: 保存先と同じディレクトリの `keyswitch.toml`

```toml
[paths]
home = "/alt/home"
opencode_config = "/alt/opencode.json"

[codex]
default_base_url = "https://api.openai.com/v1"

[logging]
level = "INFO"
```

環境変数 KEYSWITCH_CONFIG_DIR / KEYSWITCH_HOME で保存先とホームを差し替えられる。
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from pathlib import Path

try:
    import tomllib
except ModuleNotFoundError:  # Python < 3.11
    import tomli as tomllib  # type: ignore[no-redef]

from keyswitch.errors import KeyswitchError

APP_DIRNAME = "claude-config-manager"
STORE_FILENAME = "configs.json"
SETTINGS_FILENAME = "keyswitch.toml"

DEFAULT_CODEX_BASE_URL = "https://api.openai.com/v1"


def user_config_dir() -> Path:
    if sys.platform == "win32":
        appdata = os.environ.get("APPDATA")
        if appdata:
            return Path(appdata)
    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg)
    return Path.home() / ".config"


def default_store_dir() -> Path:
    override = os.environ.get("KEYSWITCH_CONFIG_DIR")
    if override:
        return Path(override)
    return user_config_dir() / APP_DIRNAME


def default_home() -> Path:
    override = os.environ.get("KEYSWITCH_HOME")
    if override:
        return Path(override)
    return Path.home()


@dataclass
class Settings:
    store_dir: Path
    home: Path
    opencode_config: Path | None = None
    codex_default_base_url: str = DEFAULT_CODEX_BASE_URL
    log_level: str = "INFO"

    @property
    def store_path(self) -> Path:
        return self.store_dir / STORE_FILENAME

    @property
    def codex_dir(self) -> Path:
        return self.home / ".codex"

    @property
    def opencode_path(self) -> Path:
        if self.opencode_config is not None:
            return self.opencode_config
        return self.home / ".config" / "opencode" / "opencode.json"


def _table(raw: dict, name: str, path: Path) -> dict:
    section = raw.get(name, {})
    if not isinstance(section, dict):
        raise KeyswitchError(f"{path}: [{name}] must be a table")
    return section


def load_settings(store_dir: Path | None = None) -> Settings:
    if store_dir is None:
        store_dir = default_store_dir()

    path = store_dir / SETTINGS_FILENAME
    raw = {}
    if path.exists():
        raw = tomllib.loads(path.read_text(encoding="utf-8"))

    paths = _table(raw, "paths", path)
    codex = _table(raw, "codex", path)
    logging_cfg = _table(raw, "logging", path)

    home = paths.get("home")
    opencode = paths.get("opencode_config")

    return Settings(
        store_dir=store_dir,
        home=Path(home).expanduser() if home else default_home(),
        opencode_config=Path(opencode).expanduser() if opencode else None,
        codex_default_base_url=str(codex.get("default_base_url", DEFAULT_CODEX_BASE_URL)),
        log_level=str(logging_cfg.get("level", "INFO")),
    )
