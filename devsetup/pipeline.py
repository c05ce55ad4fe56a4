"""The provisioning pipeline.

Steps run strictly one after another, each taking the current
:class:`PipelineState` and returning an updated copy:

    detect → install runtime → credential → service → dependencies
    → env file → models → launchers → connectivity

Fatal conditions raise a SetupError and stop the run before any later
step touches the filesystem.
"""

import logging
import platform
import sys
from typing import Optional

import httpx

from devsetup import connectivity, credentials, dependencies, detector, env_file, installer, launchers
from devsetup import model_prefetch, service_activator
from devsetup.config import Settings
from devsetup.console import Color, colorize, print_header
from devsetup.prompts import Prompter
from devsetup.state import HostPlatform, PipelineState

logger = logging.getLogger(__name__)


def detect_prerequisites(state: PipelineState, settings: Settings) -> PipelineState:
    print_header("Checking prerequisites...")
    report = detector.detect(timeout=settings.version_timeout)
    detector.print_summary(report)
    detector.require_mandatory(report)
    state = state.evolve(report=report, runtime_installed=report.is_present("ollama"))
    for note in detector.version_warnings(report):
        logger.warning(note)
        state = state.warn(note)
    return state


def ensure_runtime(state: PipelineState, settings: Settings) -> PipelineState:
    """Install Ollama when absent, then re-detect it into a fresh report."""
    if state.report.is_present("ollama"):
        return state.evolve(runtime_installed=True)

    print_header("📦 Installing Ollama...")
    state = installer.install_runtime(state, settings)
    fresh = detector.detect_tool(detector.OLLAMA, timeout=settings.version_timeout)
    state = state.evolve(report=state.report.with_tool(fresh), runtime_installed=fresh.present)
    if not fresh.present:
        logger.warning("Ollama install finished but the binary is not on PATH yet")
        state = state.warn("Ollama was installed but is not on PATH; open a new shell and re-run")
    return state


def run_pipeline(
    settings: Settings,
    prompter: Prompter,
    host: Optional[HostPlatform] = None,
    python_executable: Optional[str] = None,
    skip_models: bool = False,
    skip_verify: bool = False,
    client: Optional[httpx.Client] = None,
) -> PipelineState:
    state = PipelineState(platform=host or HostPlatform.from_system(platform.system()))

    state = detect_prerequisites(state, settings)
    state = ensure_runtime(state, settings)
    state = credentials.acquire(state, settings.credential_env_var, prompter)
    state = service_activator.ensure_running(state, settings, prompter, client=client)
    state = dependencies.install_all(state, settings)
    state = env_file.write_env_file(state, settings)

    if skip_models:
        logger.info("Skipping model downloads (--skip-models)")
    else:
        state = model_prefetch.prefetch_models(state, settings.models, settings.model_pull_timeout)

    state = launchers.write_launchers(state, settings, python_executable or sys.executable)

    if not skip_verify:
        print_header("🔍 Testing connections...")
        state = connectivity.verify(state, settings, client=client)
    return state


def print_completion(state: PipelineState, settings: Settings) -> None:
    """Final instructions, installed models and collected warnings."""
    green = lambda text: colorize(text, Color.GREEN)  # noqa: E731

    print_header("✅ Setup Complete!")
    print()
    logger.info("Your development environment is ready!")
    print()
    print(colorize("Next steps:", Color.BLUE))
    print("1. Start development servers:")
    print(f"   {green('./' + settings.combined_launcher)}")
    print()
    print("2. Or start them separately:")
    print(f"   Terminal 1: {green('./' + settings.backend_launcher)}")
    print(f"   Terminal 2: {green('./' + settings.frontend_launcher)}")
    print()
    print("3. Open your browser:")
    print(f"   Frontend: {green(f'http://localhost:{settings.frontend_port}')}")
    print(f"   Backend API: {green(f'http://localhost:{settings.backend_port}')}")
    print()
    print("4. Create an account (first user becomes admin)")
    print("5. Check Admin Panel → Settings → Connections")
    print()

    if state.runtime_installed:
        logger.info("Available Ollama models:")
        print(model_prefetch.list_installed_models())
        print()

    if state.warnings:
        print(colorize(f"{len(state.warnings)} warning(s):", Color.YELLOW))
        for warning in state.warnings:
            print(f"  - {warning}")
        print()
