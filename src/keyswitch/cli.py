"""keyswitch CLI エントリポイント。"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

import typer
from rich.console import Console
from rich.table import Table

from keyswitch.envvars import default_env_writer
from keyswitch.errors import KeyswitchError
from keyswitch.logging_setup import setup_logging
from keyswitch.manager import ProfileManager
from keyswitch.models import ProviderType, key_label, mask_key, parse_provider, url_label
from keyswitch.opencode import OpenCodeSelection
from keyswitch.settings import load_settings

APP_HELP = "🔑 keyswitch: Claude / Gemini / Codex の認証プロファイル切替"

app = typer.Typer(add_completion=False, help=APP_HELP)
console = Console()


def _manager() -> ProfileManager:
    settings = load_settings()
    setup_logging(root=settings.store_dir, level=settings.log_level)
    return ProfileManager(settings=settings, env=default_env_writer())


@contextmanager
def _errors() -> Iterator[None]:
    try:
        yield
    except (KeyswitchError, OSError, ValueError) as e:
        console.print(f"❌ {e}", style="red")
        raise typer.Exit(code=1) from e


def _parse_type(value: str) -> ProviderType:
    try:
        return parse_provider(value)
    except ValueError as e:
        raise typer.BadParameter(str(e)) from e


@app.command("list")
def list_cmd(
    config_type: str | None = typer.Option(None, "--type", "-t", help="claude / gemini / codex"),
) -> None:
    """プロファイル一覧を表示する。"""
    provider = _parse_type(config_type) if config_type is not None else None
    with _errors():
        profiles = _manager().list_profiles()
    if provider is not None:
        profiles = [p for p in profiles if p.provider == provider]

    if not profiles:
        console.print("(no profiles)")
        return

    table = Table()
    table.add_column("")
    table.add_column("id", style="dim")
    table.add_column("name")
    table.add_column("type")
    table.add_column("key")
    table.add_column("base url")
    for p in profiles:
        table.add_row(
            "●" if p.is_active else "",
            p.id,
            p.name,
            p.provider.label,
            mask_key(p.api_key),
            p.base_url or "(default)",
        )
    console.print(table)


@app.command()
def add(
    name: str = typer.Argument(..., help="プロファイル名"),
    config_type: str = typer.Option(..., "--type", "-t", help="claude / gemini / codex"),
    api_key: str = typer.Option(..., "--key", "-k", help="API key / auth token"),
    base_url: str = typer.Option("", "--url", "-u", help="エンドポイント（空ならデフォルト）"),
) -> None:
    """プロファイルを追加する。"""
    provider = _parse_type(config_type)
    with _errors():
        profile = _manager().add(name, provider, api_key, base_url)
    console.print(f"✅ added: {profile.name} ({profile.id})", style="green")
    console.print(f"  {key_label(provider)} / {url_label(provider)}", style="dim")


@app.command()
def update(
    profile_id: str = typer.Argument(..., help="プロファイルid"),
    name: str | None = typer.Option(None, "--name", "-n", help="プロファイル名"),
    api_key: str | None = typer.Option(None, "--key", "-k", help="API key / auth token"),
    base_url: str | None = typer.Option(None, "--url", "-u", help="エンドポイント（\"\" で解除）"),
) -> None:
    """プロファイルを更新する（有効なら反映し直す）。指定しない項目は現在の値のまま。"""
    with _errors():
        mgr = _manager()
        current = next((p for p in mgr.list_profiles() if p.id == profile_id), None)
        if current is None:
            console.print(f"⚠️  profile not found (nothing changed): {profile_id}", style="yellow")
            return
        mgr.update(
            profile_id,
            name if name is not None else current.name,
            api_key if api_key is not None else current.api_key,
            base_url if base_url is not None else current.base_url,
        )
    console.print(f"✅ updated: {profile_id}", style="green")


@app.command()
def delete(profile_id: str = typer.Argument(..., help="プロファイルid")) -> None:
    """プロファイルを削除する（有効なら反映を解除する）。"""
    with _errors():
        _manager().delete(profile_id)
    console.print(f"✅ deleted: {profile_id}", style="green")


@app.command()
def activate(profile_id: str = typer.Argument(..., help="プロファイルid")) -> None:
    """プロファイルを有効化し、環境変数/設定ファイルに反映する。"""
    with _errors():
        profile = _manager().activate(profile_id)
    console.print(f"✅ activated: {profile.name} ({profile.provider.label})", style="green")
    if profile.provider != ProviderType.CODEX:
        console.print("  新しく開いたターミナルから反映されます。", style="dim")


@app.command()
def deactivate(profile_id: str = typer.Argument(..., help="プロファイルid")) -> None:
    """プロファイルを無効化し、反映を解除する。"""
    with _errors():
        _manager().deactivate(profile_id)
    console.print(f"✅ deactivated: {profile_id}", style="green")


@app.command()
def status() -> None:
    """種別ごとの有効プロファイルを表示する。"""
    with _errors():
        active = _manager().status()
    for provider, profiles in active.items():
        if not profiles:
            console.print(f"- {provider.label}: (none)")
            continue
        head, *rest = profiles
        console.print(f"- {provider.label}: {head.name} ({head.id})")
        for extra in rest:
            console.print(f"  ⚠️  also marked active: {extra.name} ({extra.id})", style="yellow")


@app.command()
def opencode(
    claude_id: str | None = typer.Option(None, "--claude", help="Claude プロファイルid"),
    gemini_id: str | None = typer.Option(None, "--gemini", help="Gemini プロファイルid"),
    codex_id: str | None = typer.Option(None, "--codex", help="Codex/OpenAI プロファイルid"),
) -> None:
    """選択したプロファイルを OpenCode の設定ファイルにマージする。"""
    selection = OpenCodeSelection(claude_id=claude_id, gemini_id=gemini_id, codex_id=codex_id)
    with _errors():
        mgr = _manager()
        applied = mgr.apply_opencode(selection)
    console.print(f"✅ OpenCode: {', '.join(applied) or '(nothing matched)'}", style="green")
    console.print(f"  {mgr.settings.opencode_path}", style="dim")
