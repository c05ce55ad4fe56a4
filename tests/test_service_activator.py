"""Tests for bringing up the Ollama service."""

import subprocess
from unittest.mock import patch

import httpx
import pytest

from conftest import ScriptedPrompter, http_client, make_result
from devsetup import service_activator


def _counting_client(status: int):
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(status)

    return http_client(handler), calls


class TestEnsureRunning:

    def test_reachable_takes_no_action(self, state, settings, reachable_client):
        prompter = ScriptedPrompter()
        with patch("devsetup.service_activator.subprocess.run") as mock_run:
            result = service_activator.ensure_running(state, settings, prompter, client=reachable_client)
        mock_run.assert_not_called()
        assert prompter.confirm_prompts == []
        assert result.service_running is True

    def test_probe_hits_tags_endpoint(self, state, settings):
        client, calls = _counting_client(200)
        service_activator.ensure_running(state, settings, ScriptedPrompter(), client=client)
        assert len(calls) == 1
        assert str(calls[0].url) == "http://localhost:11434/api/tags"

    def test_service_manager_single_start_no_polling(self, state, settings):
        client, calls = _counting_client(503)
        prompter = ScriptedPrompter()
        with patch("devsetup.service_activator.shutil.which", return_value="/bin/systemctl"), \
             patch("devsetup.installer.IS_ROOT", False), \
             patch("devsetup.service_activator.subprocess.run", return_value=make_result()) as mock_run:
            result = service_activator.ensure_running(state, settings, prompter, client=client)
        mock_run.assert_called_once()
        assert mock_run.call_args[0][0] == ["sudo", "systemctl", "start", "ollama"]
        assert len(calls) == 1
        assert prompter.confirm_prompts == []
        assert result.service_running is True

    def test_root_runs_systemctl_without_sudo(self, state, settings, unreachable_client):
        with patch("devsetup.service_activator.shutil.which", return_value="/bin/systemctl"), \
             patch("devsetup.installer.IS_ROOT", True), \
             patch("devsetup.service_activator.subprocess.run", return_value=make_result()) as mock_run:
            service_activator.ensure_running(state, settings, ScriptedPrompter(), client=unreachable_client)
        assert mock_run.call_args[0][0] == ["systemctl", "start", "ollama"]

    def test_no_service_manager_waits_for_confirmation(self, state, settings, unreachable_client):
        prompter = ScriptedPrompter()
        with patch("devsetup.service_activator.shutil.which", return_value=None), \
             patch("devsetup.service_activator.subprocess.run") as mock_run:
            result = service_activator.ensure_running(state, settings, prompter, client=unreachable_client)
        mock_run.assert_not_called()
        assert prompter.confirm_prompts == ["Press Enter when Ollama is running..."]
        assert result.service_running is True

    @pytest.mark.parametrize("outcome", [
        make_result(returncode=5),
        subprocess.TimeoutExpired("systemctl", 60),
        FileNotFoundError("sudo"),
    ])
    def test_failed_start_degrades_to_manual(self, state, settings, unreachable_client, outcome):
        prompter = ScriptedPrompter()
        kwargs = {"side_effect": outcome} if isinstance(outcome, Exception) else {"return_value": outcome}
        with patch("devsetup.service_activator.shutil.which", return_value="/bin/systemctl"), \
             patch("devsetup.service_activator.subprocess.run", **kwargs) as mock_run:
            result = service_activator.ensure_running(state, settings, prompter, client=unreachable_client)
        mock_run.assert_called_once()
        assert len(prompter.confirm_prompts) == 1
        assert any("service start failed" in w for w in result.warnings)

    def test_non_interactive_manual_branch_warns(self, state, settings, unreachable_client):
        prompter = ScriptedPrompter(interactive=False)
        with patch("devsetup.service_activator.shutil.which", return_value=None):
            result = service_activator.ensure_running(state, settings, prompter, client=unreachable_client)
        assert prompter.confirm_prompts == []
        assert result.service_running is False
        assert any("ollama serve" in w for w in result.warnings)
