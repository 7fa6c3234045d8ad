import json
import logging
import sys
from unittest.mock import patch

import pytest

from parallel_harness.cli import main
from parallel_harness.units.registry import _REGISTRY

UNITS_MODULE = '''
from parallel_harness.units import register


@register(suite="demo")
def opens_home(session):
    session.navigate("https://example.org")


@register(suite="demo")
def broken_checkout(session):
    raise AssertionError("cart empty")
'''


@pytest.fixture
def units_module(tmp_path, monkeypatch):
    (tmp_path / "cli_demo_units.py").write_text(UNITS_MODULE)
    monkeypatch.chdir(tmp_path)
    root = logging.getLogger()
    saved = list(root.handlers), root.level
    _REGISTRY.clear()
    yield "cli_demo_units"
    _REGISTRY.clear()
    sys.modules.pop("cli_demo_units", None)
    root.handlers[:] = saved[0]
    root.setLevel(saved[1])


class TestCli:
    def test_run_writes_results_and_artifacts(
        self, units_module, tmp_path, session_factory, capsys
    ):
        out = tmp_path / "runs"
        with patch(
            "parallel_harness.cli.PlaywrightSessionFactory", return_value=session_factory
        ) as factory_cls:
            code = main(
                [
                    "run",
                    "--module", units_module,
                    "--suite", "demo",
                    "--workers", "2",
                    "--run-id", "r1",
                    "--out", str(out),
                    "--browser", "firefox",
                    "--no-log-file",
                ]
            )

        assert code == 1
        session_config = factory_cls.call_args.args[0]
        assert session_config.browser_kind == "firefox"
        summary = json.loads((out / "r1" / "summary.json").read_text())
        assert summary["counts"] == {"Succeeded": 1, "Failed": 1}
        artifacts = list((out / "r1" / "artifacts").iterdir())
        assert len(artifacts) == 1
        assert artifacts[0].name.startswith("failure_ctx-")
        printed = capsys.readouterr().out
        assert "Suite 'demo': Failed=1, Succeeded=1" in printed

    def test_report_prints_counts(self, units_module, tmp_path, session_factory, capsys):
        out = tmp_path / "runs"
        with patch(
            "parallel_harness.cli.PlaywrightSessionFactory", return_value=session_factory
        ):
            main(["run", "--module", units_module, "--suite", "demo",
                  "--run-id", "r2", "--out", str(out), "--no-log-file"])
        capsys.readouterr()

        code = main(["report", "--run-id", "r2", "--out", str(out)])

        assert code == 0
        lines = capsys.readouterr().out.splitlines()
        assert lines == ["Failed: 1", "Succeeded: 1"]

    def test_report_missing_run(self, tmp_path, capsys):
        code = main(["report", "--run-id", "nope", "--out", str(tmp_path)])

        assert code == 1
        assert "No results stored" in capsys.readouterr().out

    def test_unknown_suite_exits(self, units_module, tmp_path):
        with pytest.raises(SystemExit, match="No units registered"):
            main(["run", "--module", units_module, "--suite", "missing",
                  "--out", str(tmp_path), "--no-log-file"])

    def test_invalid_workers_exits(self, units_module, tmp_path):
        with pytest.raises(SystemExit, match="--workers"):
            main(["run", "--module", units_module, "--suite", "demo",
                  "--workers", "0", "--out", str(tmp_path), "--no-log-file"])

    def test_reused_run_id_exits_before_running(
        self, units_module, tmp_path, session_factory
    ):
        out = tmp_path / "runs"
        argv = ["run", "--module", units_module, "--suite", "demo",
                "--run-id", "r1", "--out", str(out), "--no-log-file"]
        with patch(
            "parallel_harness.cli.PlaywrightSessionFactory", return_value=session_factory
        ):
            main(argv)
            opened = len(session_factory.sessions)
            summary_before = (out / "r1" / "summary.json").read_text()

            with pytest.raises(SystemExit, match="already exists"):
                main(argv)

        assert len(session_factory.sessions) == opened
        assert len(list((out / "r1" / "artifacts").iterdir())) == 1
        assert (out / "r1" / "summary.json").read_text() == summary_before

    def test_workers_from_environment(
        self, units_module, tmp_path, session_factory, monkeypatch
    ):
        monkeypatch.setenv("HARNESS_WORKERS", "1")
        with patch(
            "parallel_harness.cli.PlaywrightSessionFactory", return_value=session_factory
        ), patch("parallel_harness.cli.SuiteRunner.run", autospec=True) as run:
            run.side_effect = RuntimeError("stop")
            with pytest.raises(RuntimeError):
                main(["run", "--module", units_module, "--suite", "demo",
                      "--out", str(tmp_path), "--no-log-file"])

        assert run.call_args.args[2] == 1

    def test_non_integer_workers_env_exits(self, units_module, tmp_path, monkeypatch):
        monkeypatch.setenv("HARNESS_WORKERS", "many")

        with pytest.raises(SystemExit, match="HARNESS_WORKERS must be an integer"):
            main(["run", "--module", units_module, "--suite", "demo",
                  "--out", str(tmp_path), "--no-log-file"])

    def test_report_ignores_workers_env(self, tmp_path, monkeypatch, capsys):
        monkeypatch.setenv("HARNESS_WORKERS", "many")

        code = main(["report", "--run-id", "nope", "--out", str(tmp_path)])

        assert code == 1
        assert "No results stored" in capsys.readouterr().out
