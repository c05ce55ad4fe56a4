"""Pull the development models into the local Ollama runtime."""

import logging
import subprocess
from typing import Sequence

from devsetup.console import print_header
from devsetup.state import JobStatus, ModelDownloadJob, PipelineState

logger = logging.getLogger(__name__)


def pull_model(name: str, timeout: int) -> bool:
    """Run ``ollama pull``; success is the CLI's exit status."""
    try:
        result = subprocess.run(['ollama', 'pull', name], timeout=timeout)
    except subprocess.TimeoutExpired:
        logger.debug("ollama pull %s timed out after %ss", name, timeout)
        return False
    except OSError as e:
        logger.debug("ollama pull %s could not start: %s", name, e)
        return False
    return result.returncode == 0


def prefetch(models: Sequence[str], timeout: int) -> tuple[ModelDownloadJob, ...]:
    """Pull every model in order; a failed pull never stops the next one."""
    jobs = []
    for name in models:
        logger.info("Downloading %s...", name)
        if pull_model(name, timeout):
            logger.info("✓ Downloaded %s", name)
            jobs.append(ModelDownloadJob(name, JobStatus.SUCCEEDED))
        else:
            logger.warning("Failed to download %s (you can download it later)", name)
            jobs.append(ModelDownloadJob(name, JobStatus.FAILED))
    return tuple(jobs)


def prefetch_models(state: PipelineState, models: Sequence[str], timeout: int) -> PipelineState:
    if not state.runtime_installed:
        logger.warning("Ollama is not installed; skipping model downloads")
        return state.warn("Model downloads skipped: Ollama is not installed")

    print_header("🤖 Downloading development models...")
    jobs = prefetch(models, timeout)
    for job in jobs:
        if job.status is JobStatus.FAILED:
            state = state.warn(f"Model {job.name} was not downloaded; run 'ollama pull {job.name}' later")
    return state.evolve(model_jobs=jobs)


def list_installed_models() -> str:
    """Output of ``ollama list``, or a hint when it cannot be run."""
    try:
        result = subprocess.run(['ollama', 'list'], capture_output=True, text=True, timeout=15)
    except (OSError, subprocess.TimeoutExpired):
        return "  Run 'ollama list' to see models"
    if result.returncode != 0:
        return "  Run 'ollama list' to see models"
    return result.stdout.rstrip()
