"""Make sure the Ollama background service is up.

One probe, then at most one recovery attempt: a service-manager start when
``systemctl`` exists, otherwise (or if that start fails) a manual-start
instruction and a blocking confirmation. There is no polling loop.
"""

import logging
import shutil
import subprocess
from typing import Optional

import httpx

from devsetup.config import Settings
from devsetup.connectivity import local_tags_url, probe
from devsetup.installer import _sudo
from devsetup.prompts import Prompter
from devsetup.state import PipelineState

logger = logging.getLogger(__name__)

SERVICE_START_TIMEOUT = 60


def start_command(settings: Settings) -> list[str]:
    return [*_sudo(), 'systemctl', 'start', settings.ollama_service_name]


def _start_via_service_manager(settings: Settings) -> tuple[bool, str]:
    cmd = start_command(settings)
    logger.info("Running: %s", ' '.join(cmd))
    try:
        result = subprocess.run(cmd, timeout=SERVICE_START_TIMEOUT)
    except subprocess.TimeoutExpired:
        return False, f"'{' '.join(cmd)}' timed out"
    except OSError as e:
        return False, str(e)
    if result.returncode != 0:
        return False, f"'{' '.join(cmd)}' exited with status {result.returncode}"
    return True, ""


def _manual_start(state: PipelineState, prompter: Prompter) -> PipelineState:
    logger.warning("Please start Ollama manually: ollama serve")
    if not prompter.is_interactive():
        return state.warn("Ollama is not running and no terminal is available to wait on; start it with 'ollama serve'")
    prompter.confirm("Press Enter when Ollama is running...")
    return state.evolve(service_running=True)


def ensure_running(
    state: PipelineState,
    settings: Settings,
    prompter: Prompter,
    client: Optional[httpx.Client] = None,
) -> PipelineState:
    logger.info("Checking if Ollama is running...")
    reachable, _ = probe(local_tags_url(settings), settings.probe_timeout, client=client)
    if reachable:
        logger.info("Ollama is running")
        return state.evolve(service_running=True)

    logger.warning("Ollama is not running. Starting Ollama...")
    if shutil.which('systemctl') is None:
        return _manual_start(state, prompter)

    started, reason = _start_via_service_manager(settings)
    if started:
        return state.evolve(service_running=True)
    logger.warning("Could not start Ollama service: %s", reason)
    state = state.warn(f"Ollama service start failed: {reason}")
    return _manual_start(state, prompter)
