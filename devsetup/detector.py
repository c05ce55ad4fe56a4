"""Prerequisite detection.

Resolves each required tool on PATH and captures its version string. The
resulting :class:`PrerequisiteReport` is built once and never mutated; a
fresh detection pass is needed to observe a tool installed afterwards.
"""

import logging
import re
import shutil
import subprocess
from dataclasses import dataclass
from typing import Optional

from devsetup.console import Color, colorize
from devsetup.exceptions import MissingToolError
from devsetup.state import PrerequisiteReport, ToolStatus

logger = logging.getLogger(__name__)

NODE_VERSION_RANGE = ((18, 13), (22, 999))
PYTHON_MIN_VERSION = (3, 11)


@dataclass(frozen=True)
class ToolSpec:
    """How to find one tool and what to tell the user when it is missing."""

    name: str
    candidates: tuple[str, ...]
    mandatory: bool
    hint: str
    version_prefix: str = ""


NODE = ToolSpec("node", ("node",), True, "Please install Node.js 18.13.0 - 22.x.x")
NPM = ToolSpec("npm", ("npm",), True, "Please install npm 6.0.0+", version_prefix="v")
PYTHON = ToolSpec("python", ("python3", "python"), True, "Please install Python 3.11+")
OLLAMA = ToolSpec("ollama", ("ollama",), False, "Will install Ollama automatically where supported")

REQUIRED_TOOLS = (NODE, NPM, PYTHON, OLLAMA)


def _query_version(command: str, timeout: float) -> Optional[str]:
    try:
        result = subprocess.run(
            [command, '--version'],
            capture_output=True, text=True, timeout=timeout,
        )
    except (OSError, subprocess.TimeoutExpired) as e:
        logger.debug("Version query for %s failed: %s", command, e)
        return None
    output = (result.stdout or result.stderr or '').strip()
    return output.splitlines()[0] if output else None


def detect_tool(spec: ToolSpec, timeout: float = 5.0) -> ToolStatus:
    """Resolve one tool, trying each candidate command in order."""
    for candidate in spec.candidates:
        if shutil.which(candidate) is None:
            continue
        version = _query_version(candidate, timeout)
        if version and spec.version_prefix and not version.startswith(spec.version_prefix):
            version = f"{spec.version_prefix}{version}"
        return ToolStatus(
            name=spec.name, present=True, version=version, command=candidate,
            mandatory=spec.mandatory, hint=spec.hint,
        )
    return ToolStatus(name=spec.name, present=False, mandatory=spec.mandatory, hint=spec.hint)


def detect(tools: tuple[ToolSpec, ...] = REQUIRED_TOOLS, timeout: float = 5.0) -> PrerequisiteReport:
    """Build a PrerequisiteReport for ``tools``."""
    report = PrerequisiteReport({spec.name: detect_tool(spec, timeout) for spec in tools})
    for status in report.tools.values():
        if status.present:
            logger.info("%s found: %s", status.name, status.version or status.command)
        elif status.mandatory:
            logger.error("%s not found. %s", status.name, status.hint)
        else:
            logger.warning("%s not found. %s", status.name, status.hint)
    return report


def require_mandatory(report: PrerequisiteReport) -> None:
    """Raise for the first missing mandatory tool."""
    missing = report.missing_mandatory()
    if missing:
        first = missing[0]
        raise MissingToolError(first.name, hint=first.hint)


def _parse_version(text: Optional[str]) -> Optional[tuple[int, ...]]:
    if not text:
        return None
    match = re.search(r'(\d+)\.(\d+)(?:\.(\d+))?', text)
    if not match:
        return None
    return tuple(int(part) for part in match.groups() if part is not None)


def version_warnings(report: PrerequisiteReport) -> list[str]:
    """Non-fatal notes about tools present in an unsupported version."""
    notes = []
    if report.is_present("node"):
        version = _parse_version(report["node"].version)
        low, high = NODE_VERSION_RANGE
        if version and not (low <= version[:2] <= high):
            notes.append(f"Node.js {report['node'].version} is outside the supported range 18.13.0 - 22.x.x")
    if report.is_present("python"):
        version = _parse_version(report["python"].version)
        if version and version[:2] < PYTHON_MIN_VERSION:
            notes.append(f"{report['python'].version} is older than Python 3.11")
    return notes


def print_summary(report: PrerequisiteReport) -> None:
    """Print a color-coded table of the detection results."""
    if not report.tools:
        return
    max_name = max(len(name) for name in report.tools)
    print()
    for status in report.tools.values():
        dots = '.' * (max_name + 4 - len(status.name))
        version = f'{(status.version or "-"):<24}'
        if status.present:
            state = colorize('installed', Color.GREEN)
        elif status.mandatory:
            state = colorize('MISSING', Color.RED) + f' -> {status.hint}'
        else:
            state = colorize('MISSING', Color.YELLOW) + ' (optional)'
        print(f'    {status.name} {dots} {version}{state}')
    print()
