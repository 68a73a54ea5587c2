"""logging の初期化。

- 詳細ログ: `<保存先>/logs/keyswitch.log`
- ログに認証情報が混ざっても、ファイルには伏せた形（sk-ant-...abcd）で残す
"""

from __future__ import annotations

import logging
import re
from logging.handlers import RotatingFileHandler
from pathlib import Path

from keyswitch.models import mask_key

LOG_FILENAME = "keyswitch.log"

# Anthropic / OpenAI (sk-...) と Google (AIza...) のキー
_SECRET_RE = re.compile(r"\b(?:sk-[A-Za-z0-9_\-]{6,}|AIza[0-9A-Za-z_\-]{10,})")


class RedactSecretsFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        msg = record.getMessage()
        redacted = _SECRET_RE.sub(lambda m: mask_key(m.group(0)), msg)
        if redacted != msg:
            record.msg = redacted
            record.args = None
        return True


def log_path(store_dir: Path) -> Path:
    return store_dir / "logs" / LOG_FILENAME


def setup_logging(*, root: Path, level: str = "INFO") -> None:
    if getattr(setup_logging, "_configured", False):
        return

    path = log_path(root)
    path.parent.mkdir(parents=True, exist_ok=True)

    handler = RotatingFileHandler(path, maxBytes=1_000_000, backupCount=2, encoding="utf-8")
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
    handler.addFilter(RedactSecretsFilter())

    # keyswitch 配下だけを記録する（typer/rich など他のログは拾わない）
    pkg_logger = logging.getLogger("keyswitch")
    pkg_logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    pkg_logger.addHandler(handler)

    setup_logging._configured = True  # type: ignore[attr-defined]
