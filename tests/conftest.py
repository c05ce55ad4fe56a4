"""Shared fixtures for provisioner tests.

Provides a settings factory rooted in a temporary project, a scripted
prompter, subprocess result helpers and fake HTTP clients.
"""

import sys
from pathlib import Path
from unittest.mock import MagicMock

import httpx
import pytest

# Ensure project root is importable
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from devsetup.config import Settings
from devsetup.state import (
    CredentialSource,
    HostPlatform,
    PipelineState,
    PrerequisiteReport,
    ProviderCredential,
    ToolStatus,
)


def make_result(returncode: int = 0, stdout: str = "", stderr: str = "") -> MagicMock:
    result = MagicMock()
    result.returncode = returncode
    result.stdout = stdout
    result.stderr = stderr
    return result


class ScriptedPrompter:
    """Prompter double returning canned answers and recording every call."""

    def __init__(self, secret: str = "", interactive: bool = True):
        self.secret = secret
        self.interactive = interactive
        self.secret_prompts: list[str] = []
        self.confirm_prompts: list[str] = []

    def is_interactive(self) -> bool:
        return self.interactive

    def read_secret(self, prompt: str) -> str:
        self.secret_prompts.append(prompt)
        return self.secret

    def confirm(self, prompt: str) -> None:
        self.confirm_prompts.append(prompt)


def full_report(ollama: bool = True) -> PrerequisiteReport:
    return PrerequisiteReport({
        "node": ToolStatus("node", True, "v20.11.0", "node"),
        "npm": ToolStatus("npm", True, "v10.2.4", "npm"),
        "python": ToolStatus("python", True, "Python 3.11.7", "python3"),
        "ollama": ToolStatus(
            "ollama", ollama, "ollama version is 0.1.32" if ollama else None,
            "ollama" if ollama else None, mandatory=False,
        ),
    })


def http_client(handler) -> httpx.Client:
    """httpx client whose requests are answered by ``handler(request)``."""
    return httpx.Client(transport=httpx.MockTransport(handler))


@pytest.fixture
def project_root(tmp_path: Path) -> Path:
    (tmp_path / "backend").mkdir()
    (tmp_path / "backend" / "requirements.txt").write_text("fastapi\n")
    return tmp_path


@pytest.fixture
def settings(project_root: Path) -> Settings:
    return Settings(project_root=project_root, startup_delay=0.2, shutdown_timeout=2.0)


@pytest.fixture
def credential() -> ProviderCredential:
    return ProviderCredential(key="sk-test-123", source=CredentialSource.ENVIRONMENT)


@pytest.fixture
def state(credential) -> PipelineState:
    return PipelineState(
        platform=HostPlatform.LINUX,
        report=full_report(),
        credential=credential,
        runtime_installed=True,
    )


@pytest.fixture
def prompter() -> ScriptedPrompter:
    return ScriptedPrompter(secret="sk-typed-456")


@pytest.fixture
def reachable_client():
    client = http_client(lambda request: httpx.Response(200, json={"models": []}))
    yield client
    client.close()


@pytest.fixture
def unreachable_client():
    def _refuse(request):
        raise httpx.ConnectError("Connection refused", request=request)

    client = http_client(_refuse)
    yield client
    client.close()
