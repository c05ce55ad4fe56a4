"""Front-end and backend library installation."""

import logging
import subprocess
from pathlib import Path

from devsetup.config import Settings
from devsetup.console import print_header
from devsetup.exceptions import DependencyInstallError
from devsetup.state import PipelineState

logger = logging.getLogger(__name__)

NPM_INSTALL_TIMEOUT = 900
PIP_INSTALL_TIMEOUT = 1800
VENV_CREATE_TIMEOUT = 120


def _run(cmd: list[str], cwd: Path, timeout: int, description: str) -> None:
    """Run ``cmd`` in ``cwd``; any failure becomes a DependencyInstallError."""
    try:
        result = subprocess.run(cmd, cwd=str(cwd), timeout=timeout)
    except subprocess.TimeoutExpired:
        raise DependencyInstallError(f"{description} timed out after {timeout}s")
    except OSError as e:
        raise DependencyInstallError(f"{description} could not be started: {e}")
    if result.returncode != 0:
        raise DependencyInstallError(
            f"{description} failed with exit code {result.returncode}",
            hint=f"Fix the error above and re-run, or run manually in {cwd}: {' '.join(cmd)}",
        )


def venv_python(venv_dir: Path) -> Path:
    """Return the interpreter inside ``venv_dir`` (Unix or Windows layout)."""
    unix = venv_dir / 'bin' / 'python'
    if unix.exists():
        return unix
    windows = venv_dir / 'Scripts' / 'python.exe'
    if windows.exists():
        return windows
    return unix


def install_frontend(settings: Settings) -> None:
    print_header("📦 Installing Node.js dependencies...")
    _run(['npm', 'install'], settings.project_root, NPM_INSTALL_TIMEOUT, 'npm install')


def ensure_venv(settings: Settings, python_cmd: str) -> Path:
    """Create the backend venv unless it already exists."""
    venv_dir = settings.venv_path
    if venv_dir.is_dir():
        logger.debug("Virtual environment already exists at %s", venv_dir)
        return venv_dir
    logger.info("Creating Python virtual environment...")
    _run(
        [python_cmd, '-m', 'venv', settings.venv_name],
        settings.backend_path, VENV_CREATE_TIMEOUT, 'virtual environment creation',
    )
    return venv_dir


def install_backend(settings: Settings, python_cmd: str) -> None:
    print_header("🐍 Setting up Python environment...")
    if not settings.backend_path.is_dir():
        raise DependencyInstallError(f"Backend directory not found: {settings.backend_path}")
    venv_dir = ensure_venv(settings, python_cmd)
    logger.info("Installing Python dependencies...")
    _run(
        [str(venv_python(venv_dir.absolute())), '-m', 'pip', 'install', '-r', settings.requirements_file],
        settings.backend_path, PIP_INSTALL_TIMEOUT, 'pip install',
    )


def install_all(state: PipelineState, settings: Settings) -> PipelineState:
    python_cmd = state.report["python"].command or 'python3'
    install_frontend(settings)
    install_backend(settings, python_cmd)
    return state
