#!/usr/bin/env python3
"""Run the provisioner test suite.

Usage: python3 run_tests.py [pytest args...]
"""

import subprocess
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent
TESTS_DIR = ROOT / "tests"


def main() -> int:
    extra_args = sys.argv[1:]

    print("Running provisioner tests...\n")
    result = subprocess.run(
        [sys.executable, "-m", "pytest", str(TESTS_DIR), "-v", *extra_args],
        cwd=str(ROOT),
    )
    if result.returncode != 0:
        print("\nSome tests failed.")
        return 1

    print("\nAll tests passed.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
