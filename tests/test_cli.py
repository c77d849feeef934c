from __future__ import annotations

import json
from pathlib import Path

import pytest

from obfuscated_sample import build_sample
from proxydeob import main as cli_main


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in ("PROXYDEOB_SCHEMA", "PROXYDEOB_VERBOSE", "PROXYDEOB_LOG_FILE", "PROXYDEOB_REPORT"):
        monkeypatch.delenv(name, raising=False)


def test_cli_writes_output_and_confirms(tmp_path: Path, sample_source: str, capsys) -> None:
    source = tmp_path / "in.js"
    target = tmp_path / "out" / "result.js"
    source.write_text(sample_source, encoding="utf-8")

    rc = cli_main.main([str(source), str(target)])

    assert rc == 0
    assert target.exists()
    assert capsys.readouterr().out == f"Wrote {target}\n"


def test_cli_uses_default_paths(tmp_path: Path, sample_source: str, monkeypatch, capsys) -> None:
    monkeypatch.chdir(tmp_path)
    (tmp_path / "input.js").write_text(sample_source, encoding="utf-8")

    rc = cli_main.main([])

    assert rc == 0
    assert (tmp_path / "output.js").exists()
    assert capsys.readouterr().out == "Wrote output.js\n"


def test_cli_reports_missing_input(tmp_path: Path, capsys) -> None:
    target = tmp_path / "out.js"

    rc = cli_main.main([str(tmp_path / "nope.js"), str(target)])

    assert rc == 1
    assert not target.exists()
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "error:" in captured.err


def test_cli_reports_parse_errors(tmp_path: Path) -> None:
    source = tmp_path / "in.js"
    source.write_text("var = ;", encoding="utf-8")

    assert cli_main.main([str(source), str(tmp_path / "out.js")]) == 1
    assert not (tmp_path / "out.js").exists()


def test_cli_honours_schema_and_report_env(tmp_path: Path, monkeypatch) -> None:
    schema_path = tmp_path / "schema.json"
    schema_path.write_text(
        json.dumps(
            {
                "root": "_o",
                "array_namespace": "arr",
                "proxy_namespace": "lit",
                "alias_namespace": "ref",
                "config_table": "t",
                "key_positions": {"z": 4},
            }
        ),
        encoding="utf-8",
    )
    code = build_sample({"z": {"v": 7}}, "_o.ref.k = run();\nuse(_o.lit.z.v, _o.ref.k);", keys={"z": b"key"})
    code = code.replace("a.i.", "_o.arr.")
    source = tmp_path / "in.js"
    source.write_text(code, encoding="utf-8")
    report_path = tmp_path / "report.json"
    monkeypatch.setenv("PROXYDEOB_SCHEMA", str(schema_path))
    monkeypatch.setenv("PROXYDEOB_REPORT", str(report_path))

    rc = cli_main.main([str(source), str(tmp_path / "out.js")])

    assert rc == 0
    output = "".join((tmp_path / "out.js").read_text(encoding="utf-8").split())
    assert "use(7,run());" in output
    report = json.loads(report_path.read_text(encoding="utf-8"))
    assert report["schema"] == "default"
    assert report["properties_resolved"] == 1
    assert report["aliases_inlined"] == 1


def test_cli_log_file(tmp_path: Path, sample_source: str, monkeypatch) -> None:
    source = tmp_path / "in.js"
    source.write_text(sample_source, encoding="utf-8")
    log_file = tmp_path / "logs" / "run.log"
    monkeypatch.setenv("PROXYDEOB_LOG_FILE", str(log_file))

    assert cli_main.main([str(source), str(tmp_path / "out.js")]) == 0
    assert "pass resolve completed" in log_file.read_text(encoding="utf-8")


def test_options_from_env() -> None:
    options = cli_main.options_from_env({"PROXYDEOB_VERBOSE": "Yes", "PROXYDEOB_REPORT": " r.json "})
    assert options.verbose is True
    assert options.report_path == Path("r.json")
    assert options.schema_path is None
    assert cli_main.options_from_env({}).verbose is False
