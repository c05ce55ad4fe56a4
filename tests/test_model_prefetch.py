"""Tests for development model downloads."""

import subprocess
from unittest.mock import patch

from conftest import make_result
from devsetup import model_prefetch
from devsetup.state import JobStatus


class TestPullModel:

    @patch("devsetup.model_prefetch.subprocess.run")
    def test_success_is_exit_status_zero(self, mock_run):
        mock_run.return_value = make_result(0)
        assert model_prefetch.pull_model("phi3:mini", timeout=10) is True
        assert mock_run.call_args[0][0] == ["ollama", "pull", "phi3:mini"]

    @patch("devsetup.model_prefetch.subprocess.run")
    def test_nonzero_exit_fails(self, mock_run):
        mock_run.return_value = make_result(1)
        assert model_prefetch.pull_model("phi3:mini", timeout=10) is False

    @patch("devsetup.model_prefetch.subprocess.run")
    def test_timeout_fails(self, mock_run):
        mock_run.side_effect = subprocess.TimeoutExpired(cmd="ollama", timeout=10)
        assert model_prefetch.pull_model("phi3:mini", timeout=10) is False

    @patch("devsetup.model_prefetch.subprocess.run")
    def test_missing_binary_fails(self, mock_run):
        mock_run.side_effect = FileNotFoundError("ollama")
        assert model_prefetch.pull_model("phi3:mini", timeout=10) is False


class TestPrefetch:

    @patch("devsetup.model_prefetch.pull_model")
    def test_every_model_attempted_after_failure(self, mock_pull):
        mock_pull.side_effect = [False, True, False]
        jobs = model_prefetch.prefetch(["a", "b", "c"], timeout=10)
        assert mock_pull.call_count == 3
        assert [job.name for job in jobs] == ["a", "b", "c"]
        assert [job.status for job in jobs] == [JobStatus.FAILED, JobStatus.SUCCEEDED, JobStatus.FAILED]

    @patch("devsetup.model_prefetch.pull_model")
    def test_no_models(self, mock_pull):
        assert model_prefetch.prefetch([], timeout=10) == ()
        mock_pull.assert_not_called()


class TestPrefetchModels:

    @patch("devsetup.model_prefetch.pull_model")
    def test_failures_become_warnings(self, mock_pull, state):
        mock_pull.side_effect = [True, False]
        result = model_prefetch.prefetch_models(state, ["llama3.2:1b", "phi3:mini"], timeout=10)
        assert len(result.model_jobs) == 2
        assert len(result.warnings) == 1
        assert "phi3:mini" in result.warnings[0]

    @patch("devsetup.model_prefetch.pull_model")
    def test_skipped_without_runtime(self, mock_pull, state):
        state = state.evolve(runtime_installed=False)
        result = model_prefetch.prefetch_models(state, ["llama3.2:1b"], timeout=10)
        mock_pull.assert_not_called()
        assert result.model_jobs == ()
        assert any("skipped" in w for w in result.warnings)


class TestListInstalledModels:

    @patch("devsetup.model_prefetch.subprocess.run")
    def test_returns_cli_output(self, mock_run):
        mock_run.return_value = make_result(0, stdout="NAME        ID\nphi3:mini   abc\n")
        assert model_prefetch.list_installed_models() == "NAME        ID\nphi3:mini   abc"

    @patch("devsetup.model_prefetch.subprocess.run")
    def test_hint_when_cli_missing(self, mock_run):
        mock_run.side_effect = FileNotFoundError("ollama")
        assert "ollama list" in model_prefetch.list_installed_models()
