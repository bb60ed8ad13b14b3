import importlib.util
import json
import logging
import sys
from pathlib import Path

SCRIPT = Path(__file__).resolve().parents[1] / "scripts" / "run_check.py"


def _load_script():
    spec = importlib.util.spec_from_file_location("run_check", SCRIPT)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def test_sample_report_is_the_only_output_on_stdout(monkeypatch, capsys) -> None:
    root = logging.getLogger()
    monkeypatch.setattr(root, "handlers", list(root.handlers))
    monkeypatch.setattr(root, "level", root.level)
    monkeypatch.setattr(sys, "argv", ["run_check.py", "--sample"])

    exit_code = _load_script().main()

    captured = capsys.readouterr()
    report = json.loads(captured.out)
    assert exit_code == 0
    assert report["summary"]["total_checks"] == 2
    assert report["summary"]["passed_checks"] == 2
    assert [r["id"] for r in report["results"]] == ["DLF-EX-1", "DLF-EX-2"]


def test_rules_file_with_failing_rule_exits_non_zero(monkeypatch, capsys, tmp_path) -> None:
    rules_file = tmp_path / "rules.json"
    rules_file.write_text(
        json.dumps([{"id": "WIDE", "technical_check": {"type": "numeric", "value": 1.2, "units": "m"}}]),
        encoding="utf-8",
    )
    text_file = tmp_path / "drawing.txt"
    text_file.write_text("Corridor width 900 mm", encoding="utf-8")

    root = logging.getLogger()
    monkeypatch.setattr(root, "handlers", list(root.handlers))
    monkeypatch.setattr(root, "level", root.level)
    monkeypatch.setattr(
        sys, "argv", ["run_check.py", "--rules", str(rules_file), "--text-file", str(text_file)]
    )

    exit_code = _load_script().main()

    report = json.loads(capsys.readouterr().out)
    assert exit_code == 1
    assert report["results"][0]["ok"] is False
    assert report["results"][0]["required"] == 1200.0
