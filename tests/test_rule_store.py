import json

import pytest


def test_authority_slug() -> None:
    from drawcheck.services.rule_store import authority_slug

    assert authority_slug("dlf") == "DLF"
    assert authority_slug("dlf  west\tzone") == "DLF_WEST_ZONE"
    assert authority_slug(None) == "UNKNOWN"
    assert authority_slug("") == "UNKNOWN"


def test_save_and_load_rule_set(tmp_path) -> None:
    from drawcheck.services.rule_store import RuleStore

    store = RuleStore(tmp_path / "rules")
    rules = [
        {"id": "DLF-1", "technical_check": {"type": "presence", "example_text_matches": ["title block"]}},
        {"id": "DLF-2", "technical_check": {"type": "numeric", "value": 900, "units": "mm"}},
    ]

    path = store.save("dlf", rules)

    assert path == tmp_path / "rules" / "DLF.json"
    assert store.exists("DLF")
    assert store.load("Dlf") == rules
    assert store.list_authorities() == ["DLF"]


def test_save_keeps_first_rule_per_id(tmp_path) -> None:
    from drawcheck.services.rule_store import RuleStore

    store = RuleStore(tmp_path)
    store.save("DLF", [{"id": "A", "v": 1}, {"id": "B"}, {"id": "A", "v": 2}, {"v": 3}, {"v": 4}])

    assert store.load("DLF") == [{"id": "A", "v": 1}, {"id": "B"}, {"v": 3}, {"v": 4}]


def test_save_replaces_previous_rule_set_without_leftovers(tmp_path) -> None:
    from drawcheck.services.rule_store import RuleStore

    store = RuleStore(tmp_path)
    store.save("DLF", [{"id": "OLD"}])
    store.save("DLF", [{"id": "NEW"}])

    assert store.load("DLF") == [{"id": "NEW"}]
    assert sorted(p.name for p in tmp_path.iterdir()) == ["DLF.json"]


def test_missing_rule_set_raises(tmp_path) -> None:
    from drawcheck.services.rule_store import RuleSetNotFoundError, RuleStore

    store = RuleStore(tmp_path)

    with pytest.raises(RuleSetNotFoundError) as excinfo:
        store.load("nowhere")

    assert excinfo.value.authority == "NOWHERE"
    assert isinstance(excinfo.value, FileNotFoundError)
    assert store.list_authorities() == []


def test_invalid_rule_set_files_raise_value_error(tmp_path) -> None:
    from drawcheck.services.rule_store import RuleStore

    (tmp_path / "BROKEN.json").write_text("{not json", encoding="utf-8")
    (tmp_path / "OBJECT.json").write_text(json.dumps({"id": "X"}), encoding="utf-8")
    store = RuleStore(tmp_path)

    with pytest.raises(ValueError, match="Invalid rule set file"):
        store.load("broken")
    with pytest.raises(ValueError, match="JSON array"):
        store.load("object")


@pytest.mark.asyncio
async def test_health_check_creates_rules_dir(tmp_path) -> None:
    from drawcheck.services.rule_store import RuleStore

    store = RuleStore(tmp_path / "missing" / "rules")

    assert await store.health_check() is True
    assert (tmp_path / "missing" / "rules").is_dir()
