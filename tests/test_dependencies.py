"""Tests for front-end and backend dependency installation."""

import subprocess
from unittest.mock import patch

import pytest

from conftest import make_result
from devsetup import dependencies
from devsetup.exceptions import DependencyInstallError


def _commands(mock_run) -> list[list[str]]:
    return [c.args[0] for c in mock_run.call_args_list]


class TestInstallFrontend:

    def test_runs_npm_install_in_project_root(self, settings):
        with patch("devsetup.dependencies.subprocess.run", return_value=make_result()) as mock_run:
            dependencies.install_frontend(settings)
        assert _commands(mock_run) == [["npm", "install"]]
        assert mock_run.call_args.kwargs["cwd"] == str(settings.project_root)

    def test_failure_is_fatal(self, settings):
        with patch("devsetup.dependencies.subprocess.run", return_value=make_result(returncode=1)):
            with pytest.raises(DependencyInstallError, match="npm install"):
                dependencies.install_frontend(settings)

    def test_missing_npm_is_fatal(self, settings):
        with patch("devsetup.dependencies.subprocess.run", side_effect=FileNotFoundError("npm")):
            with pytest.raises(DependencyInstallError):
                dependencies.install_frontend(settings)


class TestInstallBackend:

    def test_creates_venv_when_absent(self, settings):
        with patch("devsetup.dependencies.subprocess.run", return_value=make_result()) as mock_run:
            dependencies.install_backend(settings, "python3")
        commands = _commands(mock_run)
        assert commands[0] == ["python3", "-m", "venv", "venv"]
        assert commands[1][1:] == ["-m", "pip", "install", "-r", "requirements.txt"]
        assert commands[1][0].endswith("venv/bin/python")
        for call in mock_run.call_args_list:
            assert call.kwargs["cwd"] == str(settings.backend_path)

    def test_existing_venv_is_reused(self, settings):
        (settings.venv_path / "bin").mkdir(parents=True)
        with patch("devsetup.dependencies.subprocess.run", return_value=make_result()) as mock_run:
            dependencies.install_backend(settings, "python3")
        commands = _commands(mock_run)
        assert len(commands) == 1
        assert commands[0][1:3] == ["-m", "pip"]

    def test_venv_failure_stops_before_pip(self, settings):
        with patch("devsetup.dependencies.subprocess.run", return_value=make_result(returncode=1)) as mock_run:
            with pytest.raises(DependencyInstallError):
                dependencies.install_backend(settings, "python3")
        assert mock_run.call_count == 1

    def test_pip_failure_is_fatal(self, settings):
        results = [make_result(), make_result(returncode=1)]
        with patch("devsetup.dependencies.subprocess.run", side_effect=results):
            with pytest.raises(DependencyInstallError, match="pip install"):
                dependencies.install_backend(settings, "python3")

    def test_pip_timeout_is_fatal(self, settings):
        (settings.venv_path).mkdir()
        with patch("devsetup.dependencies.subprocess.run", side_effect=subprocess.TimeoutExpired("pip", 1)):
            with pytest.raises(DependencyInstallError, match="timed out"):
                dependencies.install_backend(settings, "python3")

    def test_missing_backend_dir(self, settings):
        (settings.backend_path / "requirements.txt").unlink()
        settings.backend_path.rmdir()
        with pytest.raises(DependencyInstallError, match="Backend directory"):
            dependencies.install_backend(settings, "python3")


class TestInstallAll:

    def test_frontend_failure_skips_backend(self, state, settings):
        with patch("devsetup.dependencies.subprocess.run", return_value=make_result(returncode=1)) as mock_run:
            with pytest.raises(DependencyInstallError):
                dependencies.install_all(state, settings)
        assert _commands(mock_run) == [["npm", "install"]]

    def test_uses_detected_interpreter(self, state, settings):
        with patch("devsetup.dependencies.subprocess.run", return_value=make_result()) as mock_run:
            dependencies.install_all(state, settings)
        assert _commands(mock_run)[1][0] == "python3"


class TestVenvPython:

    def test_windows_layout(self, tmp_path):
        (tmp_path / "Scripts").mkdir()
        (tmp_path / "Scripts" / "python.exe").touch()
        assert dependencies.venv_python(tmp_path) == tmp_path / "Scripts" / "python.exe"

    def test_defaults_to_unix_layout(self, tmp_path):
        assert dependencies.venv_python(tmp_path) == tmp_path / "bin" / "python"
