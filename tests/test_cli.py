"""
Tests for the check-versions and update-versions entry points.
"""

import json
import os
from unittest.mock import patch

import pytest

import check_versions
import update_versions
from container_versions.git import GitError
from container_versions.report import build_report, dumps_report
from container_versions.tools import ToolRecord


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path):
    """No user config files, no token, plain output."""
    env = {k: v for k, v in os.environ.items() if k not in ("GITHUB_TOKEN", "CONTAINER_VERSIONS_PROJECT_ROOT", "PROJECT_ROOT_OVERRIDE")}
    env["XDG_CACHE_HOME"] = str(tmp_path / "cache")
    with patch.dict(os.environ, env, clear=True), \
            patch("container_versions.config.USER_CONFIG_LOCATIONS", []), \
            patch("container_versions.render.USE_COLOR", False):
        yield


def checked(name, current, latest, file="Dockerfile"):
    record = ToolRecord(name=name, current_version=current, source_file=file)
    record.set_latest(latest)
    return record


def outdated_records():
    return [
        checked("Python", "3.13.7", "3.13.7"),
        checked("k9s", "0.50.9", "0.50.10"),
        checked("uv", "0.8.4", "", file="python.sh"),
    ]


class TestCheckVersions:
    """Tests for check_versions.main()."""

    def test_json_output(self, project_root, capsys):
        with patch("check_versions.run_check", return_value=outdated_records()):
            code = check_versions.main(["--json", "--project-root", str(project_root)])
        out = capsys.readouterr().out
        report = json.loads(out)
        assert code == 1
        assert report["exit_code"] == 1
        assert report["summary"] == {"total": 3, "current": 1, "outdated": 1, "errors": 1, "manual_check": 0}

    def test_table_output(self, project_root, capsys):
        with patch("check_versions.run_check", return_value=outdated_records()):
            code = check_versions.main(["--project-root", str(project_root)])
        captured = capsys.readouterr()
        assert code == 1
        assert "=== Version Check Results ===" in captured.out
        assert "Note: 1 tool(s) have newer versions available" in captured.out
        assert "GITHUB_TOKEN not set" in captured.err

    def test_all_current_exits_zero(self, project_root):
        with patch("check_versions.run_check", return_value=[checked("Go", "1.25", "1.25.0")]):
            assert check_versions.main(["--project-root", str(project_root)]) == 0

    def test_no_pins(self, tmp_path, capsys):
        code = check_versions.main(["--project-root", str(tmp_path)])
        assert code == 0
        assert "No version pins found" in capsys.readouterr().out

    def test_no_pins_json(self, tmp_path, capsys):
        code = check_versions.main(["--json", "--project-root", str(tmp_path)])
        report = json.loads(capsys.readouterr().out)
        assert code == 0
        assert report["tools"] == []

    def test_cache_flags_reach_fetcher(self, project_root):
        with patch("check_versions.run_check", return_value=[]) as mock_run:
            check_versions.main([
                "--no-cache", "--cache-duration", "60", "--timeout", "3",
                "--project-root", str(project_root),
            ])
        fetcher = mock_run.call_args[0][2]
        assert not fetcher.cache.enabled
        assert fetcher.cache.ttl == 60
        assert fetcher.timeout == 3

    def test_negative_cache_duration_is_usage_error(self):
        with pytest.raises(SystemExit) as exc_info:
            check_versions.main(["--cache-duration", "-1"])
        assert exc_info.value.code == 2

    def test_missing_config_file(self, project_root, tmp_path):
        code = check_versions.main(["--project-root", str(project_root), "--config", str(tmp_path / "nope.yml")])
        assert code == 1

    def test_non_mapping_tool_config_exits_one(self, project_root):
        (project_root / ".container-versions.yml").write_text("tools:\n  Python: true\n")
        with patch("check_versions.run_check") as mock_run:
            code = check_versions.main(["--project-root", str(project_root)])
        assert code == 1
        mock_run.assert_not_called()

    def test_color_setting_from_env_file(self, project_root, capsys):
        (project_root / ".env").write_text("CONTAINER_VERSIONS_COLOR=0\n")
        with patch("check_versions.run_check", return_value=outdated_records()), \
                patch("container_versions.render.USE_COLOR", None):
            check_versions.main(["--project-root", str(project_root)])
        assert "\033[" not in capsys.readouterr().out

    def test_project_config_skips_tool(self, project_root):
        (project_root / ".container-versions.yml").write_text("tools:\n  Python:\n    skip: true\n")
        with patch("container_versions.catalog.ToolDefinition.fetch_latest", return_value=""):
            with patch("check_versions.render_table") as mock_table:
                check_versions.main(["--project-root", str(project_root)])
        names = [r.name for r in mock_table.call_args[0][0]]
        assert "Python" not in names
        assert "k9s" in names


class TestUpdateVersions:
    """Tests for update_versions.main()."""

    @pytest.fixture
    def report_file(self, tmp_path):
        path = tmp_path / "report.json"
        path.write_text(dumps_report(build_report(outdated_records())))
        return path

    def test_missing_input(self, project_root, tmp_path):
        code = update_versions.main(["--input", str(tmp_path / "missing.json"), "--project-root", str(project_root)])
        assert code == 1

    def test_dry_run_no_commit_never_runs_git(self, project_root, report_file, capsys):
        before = (project_root / "Dockerfile").read_text()
        with patch("container_versions.git.subprocess.run") as mock_run:
            code = update_versions.main([
                "--dry-run", "--no-commit",
                "--input", str(report_file),
                "--project-root", str(project_root),
            ])
        assert code == 0
        mock_run.assert_not_called()
        assert (project_root / "Dockerfile").read_text() == before
        assert "k9s: 0.50.9 → 0.50.10" in capsys.readouterr().out

    def test_no_commit_leaves_changes(self, project_root, report_file):
        with patch("container_versions.git.run_git") as mock_git:
            code = update_versions.main(["--no-commit", "--input", str(report_file), "--project-root", str(project_root)])
        assert code == 0
        mock_git.assert_not_called()
        assert "ARG K9S_VERSION=0.50.10" in (project_root / "Dockerfile").read_text()

    def test_commit_and_release(self, project_root, report_file, capsys):
        with patch("container_versions.git.run_git", return_value="") as mock_git:
            code = update_versions.main(["--input", str(report_file), "--project-root", str(project_root)])
        assert code == 0
        assert mock_git.call_count == 4
        assert (project_root / "VERSION").read_text() == "4.3.2\n"
        assert "Released version 4.3.2" in capsys.readouterr().out

    def test_no_bump(self, project_root, report_file):
        with patch("container_versions.git.run_git", return_value="") as mock_git:
            update_versions.main(["--no-bump", "--input", str(report_file), "--project-root", str(project_root)])
        assert mock_git.call_count == 2
        assert (project_root / "VERSION").read_text() == "4.3.1\n"

    def test_git_failure_exits_one(self, project_root, report_file):
        with patch("container_versions.git.run_git", side_effect=GitError(["add", "-A"], 128, "not a git repository")):
            code = update_versions.main(["--input", str(report_file), "--project-root", str(project_root)])
        assert code == 1
        assert "ARG K9S_VERSION=0.50.10" in (project_root / "Dockerfile").read_text()

    def test_nothing_outdated(self, project_root, capsys):
        with patch("update_versions.run_check", return_value=[checked("Go", "1.25", "1.25.0")]):
            code = update_versions.main(["--project-root", str(project_root)])
        assert code == 0
        assert "All tools are up to date!" in capsys.readouterr().out

    def test_runs_check_without_input(self, project_root):
        with patch("update_versions.run_check", return_value=outdated_records()) as mock_run, \
                patch("container_versions.git.run_git", return_value=""):
            code = update_versions.main(["--no-commit", "--project-root", str(project_root)])
        assert code == 0
        mock_run.assert_called_once()
        assert "ARG K9S_VERSION=0.50.10" in (project_root / "Dockerfile").read_text()
