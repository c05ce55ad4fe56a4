"""Launcher scripts written into the project root.

Three executables: the backend launcher, the front-end launcher and the
combined launcher, which hands both to the process supervisor. Contents
depend only on settings, the interpreter path and the location of the
devsetup package, so re-running rewrites identical bytes.
"""

import logging
import shlex
from pathlib import Path

from devsetup.config import Settings
from devsetup.console import print_header
from devsetup.fileutil import atomic_write
from devsetup.state import PipelineState

logger = logging.getLogger(__name__)

LAUNCHER_MODE = 0o755

# Directory holding the devsetup package; the combined launcher puts it on PYTHONPATH
PACKAGE_ROOT = Path(__file__).resolve().parent.parent


def _fmt_delay(seconds: float) -> str:
    return f"{seconds:g}"


def render_backend_launcher(settings: Settings) -> str:
    return f"""#!/bin/bash
# Start the backend API with the development environment loaded.
cd "$(dirname "$0")/{settings.backend_dir}" || exit 1
source {settings.venv_name}/bin/activate

# Load {settings.env_file_name}; variables already exported in the shell take precedence.
while IFS='=' read -r key value || [ -n "$key" ]; do
    case "$key" in
        ''|\\#*) continue ;;
    esac
    if [ -z "${{!key+x}}" ]; then
        export "$key=$value"
    fi
done < {settings.env_file_name}

exec ./{settings.backend_start_script}
"""


def render_frontend_launcher(settings: Settings) -> str:
    return """#!/bin/bash
# Start the front-end dev server.
cd "$(dirname "$0")" || exit 1
exec npm run dev
"""


def render_combined_launcher(
    settings: Settings,
    python_executable: str,
    package_root: Path = PACKAGE_ROOT,
) -> str:
    cmd = [
        python_executable, '-m', 'devsetup.supervisor',
        '--backend', f'./{settings.backend_launcher}',
        '--frontend', f'./{settings.frontend_launcher}',
        '--delay', _fmt_delay(settings.startup_delay),
        '--shutdown-timeout', _fmt_delay(settings.shutdown_timeout),
    ]
    return f"""#!/bin/bash
# Start backend and front-end together; Ctrl+C stops both.
cd "$(dirname "$0")" || exit 1

echo "🚀 Starting Open WebUI Development Servers..."
echo "Backend: http://localhost:{settings.backend_port}"
echo "Frontend: http://localhost:{settings.frontend_port}"
echo ""
echo "Press Ctrl+C to stop both servers"
echo ""

export PYTHONPATH={shlex.quote(str(package_root))}${{PYTHONPATH:+:$PYTHONPATH}}
exec {shlex.join(cmd)}
"""


def materialize(
    settings: Settings,
    python_executable: str,
    package_root: Path = PACKAGE_ROOT,
) -> tuple[Path, ...]:
    """Write all three launchers, overwriting existing files."""
    root = settings.project_root
    artifacts = (
        (root / settings.backend_launcher, render_backend_launcher(settings)),
        (root / settings.frontend_launcher, render_frontend_launcher(settings)),
        (root / settings.combined_launcher, render_combined_launcher(settings, python_executable, package_root)),
    )
    for path, content in artifacts:
        atomic_write(path, content, mode=LAUNCHER_MODE)
        logger.info("Created %s", path.name)
    return tuple(path for path, _ in artifacts)


def write_launchers(state: PipelineState, settings: Settings, python_executable: str) -> PipelineState:
    print_header("📝 Creating startup scripts...")
    return state.evolve(launchers=materialize(settings, python_executable))
