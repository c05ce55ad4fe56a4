"""Installation of the local inference runtime (Ollama).

Only invoked when detection reported the runtime absent. The strategy is
chosen from the host platform:

  LINUX: fetch and run the vendor install script
  MACOS: no automation; stop with manual download instructions
  OTHER: stop with a generic manual-install message
"""

import logging
import os
import subprocess

from devsetup.config import Settings
from devsetup.exceptions import InstallFailedError, UnsupportedPlatformError
from devsetup.state import HostPlatform, PipelineState

logger = logging.getLogger(__name__)

# When running as root (e.g., in containers), sudo is unnecessary and may not be installed.
IS_ROOT = (os.getuid() == 0) if hasattr(os, 'getuid') else False


def _sudo() -> list[str]:
    """Return ['sudo'] prefix, or [] if already running as root."""
    return [] if IS_ROOT else ['sudo']


class InstallStrategy:
    """Base class; ``install`` either succeeds or raises a SetupError."""

    action = "abstract"

    def install(self, settings: Settings) -> None:
        raise NotImplementedError


class ScriptInstallStrategy(InstallStrategy):
    """Pipe the vendor install script into ``sh``."""

    action = "automated-install"

    def command(self, settings: Settings) -> list[str]:
        return ['bash', '-c', f'curl -fsSL {settings.ollama_install_script_url} | sh']

    def install(self, settings: Settings) -> None:
        logger.info("Installing Ollama for Linux...")
        try:
            result = subprocess.run(self.command(settings), timeout=settings.install_timeout)
        except subprocess.TimeoutExpired:
            raise InstallFailedError(
                f"Ollama install script did not finish within {settings.install_timeout}s",
                hint="Install Ollama manually from https://ollama.ai/ and run this script again",
            )
        except OSError as e:
            raise InstallFailedError(f"Could not run the Ollama install script: {e}")
        if result.returncode != 0:
            raise InstallFailedError(
                f"Ollama install script exited with status {result.returncode}",
                hint="Install Ollama manually from https://ollama.ai/ and run this script again",
            )
        logger.info("Ollama installed")


class ManualInstallStrategy(InstallStrategy):
    """Platforms with a vendor installer but no unattended path."""

    action = "manual-instructions"

    def install(self, settings: Settings) -> None:
        logger.info("Detected macOS. Please install Ollama manually:")
        raise UnsupportedPlatformError(
            "Ollama must be installed manually on macOS",
            hint=(
                "1. Visit https://ollama.ai/download\n"
                "    2. Download and install Ollama for macOS\n"
                "    3. Run this script again"
            ),
        )


class UnsupportedInstallStrategy(InstallStrategy):
    action = "unsupported"

    def install(self, settings: Settings) -> None:
        raise UnsupportedPlatformError(
            "Unsupported OS for automatic Ollama installation",
            hint="Please install Ollama manually from https://ollama.ai/",
        )


STRATEGIES: dict[HostPlatform, InstallStrategy] = {
    HostPlatform.LINUX: ScriptInstallStrategy(),
    HostPlatform.MACOS: ManualInstallStrategy(),
}


def strategy_for(host: HostPlatform) -> InstallStrategy:
    """Pick the install strategy for ``host``; unlisted platforms get the unsupported one."""
    return STRATEGIES.get(host, UnsupportedInstallStrategy())


def install_runtime(state: PipelineState, settings: Settings) -> PipelineState:
    """Run the install strategy for the host platform.

    Callers decide whether the runtime is missing. The captured report is left
    untouched; the caller re-detects to observe the newly installed binary.
    """
    strategy_for(state.platform).install(settings)
    return state
