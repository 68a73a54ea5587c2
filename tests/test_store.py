"""store のテスト。"""

import json
from pathlib import Path

from keyswitch.models import Profile, ProviderType
from keyswitch.store import ProfileStore, load_store, save_store


def test_missing_file_is_empty(tmp_path: Path) -> None:
    assert load_store(tmp_path / "configs.json").profiles == []


def test_roundtrip_preserves_order(tmp_path: Path) -> None:
    p = tmp_path / "nested" / "configs.json"
    st = ProfileStore(
        profiles=[
            Profile(name="b", provider=ProviderType.CODEX, api_key="k2"),
            Profile(name="a", provider=ProviderType.CLAUDE, api_key="k1", base_url="https://x", is_active=True),
        ]
    )
    save_store(p, st)

    st2 = load_store(p)
    assert st2 == st
    assert [x.name for x in st2.profiles] == ["b", "a"]


def test_saved_format(tmp_path: Path) -> None:
    p = tmp_path / "configs.json"
    profile = Profile(name="w", provider=ProviderType.GEMINI, api_key="g")
    save_store(p, ProfileStore(profiles=[profile]))

    text = p.read_text(encoding="utf-8")
    assert "\n  " in text
    raw = json.loads(text)
    assert raw == {"configs": [profile.to_dict()]}
    assert list(tmp_path.iterdir()) == [p]


def test_corrupt_file_is_empty(tmp_path: Path) -> None:
    p = tmp_path / "configs.json"
    p.write_text("{not json", encoding="utf-8")
    assert load_store(p).profiles == []

    p.write_text("[1, 2]", encoding="utf-8")
    assert load_store(p).profiles == []

    for bad in (5, True, 1.5, "x", {"a": 1}):
        p.write_text(json.dumps({"configs": bad}), encoding="utf-8")
        assert load_store(p).profiles == []

    p.write_text("{}", encoding="utf-8")
    assert load_store(p).profiles == []


def test_invalid_entries_are_skipped(tmp_path: Path) -> None:
    p = tmp_path / "configs.json"
    p.write_text(
        json.dumps(
            {
                "configs": [
                    {"id": "1", "name": "ok", "config_type": "codex", "api_key": "k"},
                    {"id": "2", "name": "bad", "config_type": "mistral", "api_key": "k"},
                    "garbage",
                ]
            }
        ),
        encoding="utf-8",
    )
    st = load_store(p)
    assert [x.id for x in st.profiles] == ["1"]


def test_multiple_actives_are_tolerated(tmp_path: Path) -> None:
    p = tmp_path / "configs.json"
    p.write_text(
        json.dumps(
            {
                "configs": [
                    {"id": "1", "name": "a", "config_type": "claude", "api_key": "k", "is_active": True},
                    {"id": "2", "name": "b", "config_type": "claude", "api_key": "k", "is_active": True},
                ]
            }
        ),
        encoding="utf-8",
    )
    st = load_store(p)
    assert [x.id for x in st.active_for(ProviderType.CLAUDE)] == ["1", "2"]
    assert st.active_for(ProviderType.GEMINI) == []


def test_remove(tmp_path: Path) -> None:
    a = Profile(name="a", provider=ProviderType.CLAUDE)
    st = ProfileStore(profiles=[a])
    assert st.remove("nope") is None
    assert st.remove(a.id) is a
    assert st.profiles == []
