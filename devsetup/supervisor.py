"""Process supervisor for the backend and front-end dev servers.

Three states:
  STARTING: signal handlers installed, backend spawned, fixed delay,
    front-end spawned
  RUNNING: blocked until an interrupt arrives or both jobs have exited
  TERMINATING: every tracked child group gets SIGTERM; exit status is 0

The delay between the two jobs is a heuristic, not a readiness check.
Cleanup is best-effort: no restarts, no escalation to SIGKILL.
"""

import argparse
import asyncio
import logging
import os
import shlex
import signal
import sys
from enum import Enum
from pathlib import Path
from typing import Optional, Sequence

from devsetup.config import Settings
from devsetup.console import setup_logging

logger = logging.getLogger(__name__)


class SupervisorState(str, Enum):
    STARTING = "starting"
    RUNNING = "running"
    TERMINATING = "terminating"


class SupervisedProcess:
    """Handle for one background job running in its own process group."""

    def __init__(self, name: str, process: asyncio.subprocess.Process):
        self.name = name
        self._process = process

    @property
    def pid(self) -> int:
        return self._process.pid

    @property
    def returncode(self) -> Optional[int]:
        return self._process.returncode

    async def wait(self) -> int:
        return await self._process.wait()

    def terminate(self) -> None:
        """Send SIGTERM to the whole process group; already-gone processes are ignored."""
        if self._process.returncode is not None:
            return
        try:
            if hasattr(os, 'killpg'):
                os.killpg(self._process.pid, signal.SIGTERM)
            else:
                self._process.terminate()
        except ProcessLookupError:
            pass
        except (PermissionError, OSError):
            try:
                self._process.terminate()
            except ProcessLookupError:
                pass


async def spawn(name: str, command: Sequence[str], cwd: Optional[Path] = None) -> SupervisedProcess:
    """Start ``command`` detached in a new session and return its handle."""
    process = await asyncio.create_subprocess_exec(
        *command,
        cwd=str(cwd) if cwd else None,
        start_new_session=True,
    )
    logger.info("Started %s (pid %d)", name, process.pid)
    return SupervisedProcess(name, process)


class ProcessSupervisor:
    """Runs the backend and front-end jobs as one group for a foreground session."""

    def __init__(
        self,
        backend_command: Sequence[str],
        frontend_command: Sequence[str],
        startup_delay: float = 3.0,
        shutdown_timeout: float = 5.0,
        cwd: Optional[Path] = None,
    ):
        self.backend_command = list(backend_command)
        self.frontend_command = list(frontend_command)
        self.startup_delay = startup_delay
        self.shutdown_timeout = shutdown_timeout
        self.cwd = cwd
        self.state = SupervisorState.STARTING
        self.children: list[SupervisedProcess] = []
        self._shutdown: Optional[asyncio.Event] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._previous_handlers: dict[int, object] = {}

    # ------------------------------------------------------------------
    # Cancellation
    # ------------------------------------------------------------------

    def request_shutdown(self) -> None:
        """Trip the cancellation token. Must be called on the event loop thread."""
        if self._shutdown is not None:
            self._shutdown.set()

    @property
    def shutdown_requested(self) -> bool:
        return self._shutdown is not None and self._shutdown.is_set()

    def _handle_signal(self, signum, frame):
        if self._loop is not None:
            self._loop.call_soon_threadsafe(self.request_shutdown)

    def _install_signal_handlers(self) -> None:
        for sig in (signal.SIGINT, signal.SIGTERM):
            self._previous_handlers[sig] = signal.signal(sig, self._handle_signal)

    def _restore_signal_handlers(self) -> None:
        for sig, handler in self._previous_handlers.items():
            signal.signal(sig, handler)
        self._previous_handlers.clear()

    async def _shutdown_within(self, timeout: float) -> bool:
        """Wait up to ``timeout`` seconds for a shutdown request."""
        try:
            await asyncio.wait_for(self._shutdown.wait(), timeout=timeout)
            return True
        except asyncio.TimeoutError:
            return False

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self) -> bool:
        """STARTING phase. Returns False if shutdown was requested before RUNNING."""
        logger.info("Starting backend...")
        self.children.append(await spawn('backend', self.backend_command, self.cwd))

        if await self._shutdown_within(self.startup_delay):
            return False

        logger.info("Starting frontend...")
        self.children.append(await spawn('frontend', self.frontend_command, self.cwd))
        self.state = SupervisorState.RUNNING
        return True

    async def wait(self) -> None:
        """RUNNING phase: block until interrupted or every child has exited."""
        all_exited = asyncio.ensure_future(asyncio.gather(*(c.wait() for c in self.children)))
        cancelled = asyncio.ensure_future(self._shutdown.wait())
        done, pending = await asyncio.wait({all_exited, cancelled}, return_when=asyncio.FIRST_COMPLETED)
        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)
        if cancelled not in done:
            codes = ', '.join(f"{c.name}={c.returncode}" for c in self.children)
            logger.warning("All development servers exited on their own (%s)", codes)

    async def terminate(self) -> None:
        """TERMINATING phase: signal every tracked child group and reap what exits in time."""
        self.state = SupervisorState.TERMINATING
        if not self.children:
            return
        logger.info("Shutting down development servers...")
        for child in self.children:
            child.terminate()
        try:
            await asyncio.wait_for(
                asyncio.gather(*(c.wait() for c in self.children)),
                timeout=self.shutdown_timeout,
            )
        except asyncio.TimeoutError:
            alive = ', '.join(f"{c.name} (pid {c.pid})" for c in self.children if c.returncode is None)
            logger.warning("Still running after %ss: %s", self.shutdown_timeout, alive)

    async def run(self) -> int:
        """Full session. Exit status is 0 once teardown ran, 1 if a job could not be spawned."""
        self._loop = asyncio.get_running_loop()
        self._shutdown = asyncio.Event()
        self._install_signal_handlers()
        status = 0
        try:
            if await self.start():
                await self.wait()
        except OSError as e:
            logger.error("Could not start development server: %s", e)
            status = 1
        finally:
            await self.terminate()
            self._restore_signal_handlers()
        return status


def from_settings(settings: Settings) -> ProcessSupervisor:
    """Supervisor running the generated launchers in the project root."""
    return ProcessSupervisor(
        backend_command=[f'./{settings.backend_launcher}'],
        frontend_command=[f'./{settings.frontend_launcher}'],
        startup_delay=settings.startup_delay,
        shutdown_timeout=settings.shutdown_timeout,
        cwd=settings.project_root,
    )


def create_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='python -m devsetup.supervisor',
        description='Run the backend and front-end dev servers as one process group',
    )
    parser.add_argument('--backend', required=True, help='Backend launcher command')
    parser.add_argument('--frontend', required=True, help='Front-end launcher command')
    parser.add_argument('--delay', type=float, default=3.0,
                        help='Seconds to wait after starting the backend (default: 3)')
    parser.add_argument('--shutdown-timeout', type=float, default=5.0,
                        help='Seconds to wait for children after SIGTERM (default: 5)')
    parser.add_argument('--cwd', type=Path, default=None, help='Working directory for both jobs')
    parser.add_argument('--no-color', action='store_true', help='Disable colored output')
    parser.add_argument('--verbose', '-v', action='store_true', help='Enable verbose output')
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = create_argument_parser().parse_args(argv)
    setup_logging(color_enabled=not args.no_color and sys.stdout.isatty(), verbose=args.verbose)
    supervisor = ProcessSupervisor(
        backend_command=shlex.split(args.backend),
        frontend_command=shlex.split(args.frontend),
        startup_delay=args.delay,
        shutdown_timeout=args.shutdown_timeout,
        cwd=args.cwd,
    )
    return asyncio.run(supervisor.run())


if __name__ == '__main__':
    sys.exit(main())
