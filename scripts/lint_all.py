#!/usr/bin/env python3
"""Run the formatters and the test suite.

Runs isort and black over the package, scripts and tests, then pytest.
Run from anywhere; commands execute in the project root.

Usage:
    python scripts/lint_all.py [--check] [--skip-tests]
"""

import argparse
import subprocess
import sys
from pathlib import Path
from typing import List

# Project root directory
PROJECT_ROOT = Path(__file__).parent.parent

SOURCE_DIRS = ["sizerec", "tests", "scripts"]

# Formatter name -> extra flags in check mode
FORMATTERS = {
    "isort": ["--check-only", "--diff"],
    "black": ["--check"],
}


def run_command(cmd: List[str], description: str) -> bool:
    """Run a command in the project root.

    Returns:
        True if the command exited with status 0.
    """
    print(f"\n{'=' * 60}")
    print(f"Running: {description}")
    print(f"Command: {' '.join(cmd)}")
    print(f"{'=' * 60}\n")

    try:
        result = subprocess.run(cmd, cwd=PROJECT_ROOT, check=False)
    except FileNotFoundError as e:
        print(f"\n✗ Error: {e}")
        print("  Install the dev extra: pip install -e '.[dev,test]'\n")
        return False

    if result.returncode != 0:
        print(f"\n✗ {description} failed (exit code: {result.returncode})\n")
        return False

    print(f"\n✓ {description} passed\n")
    return True


def main() -> int:
    parser = argparse.ArgumentParser(description="Run formatting and test checks")
    parser.add_argument(
        "--check",
        action="store_true",
        help="Only report formatting problems instead of rewriting files",
    )
    parser.add_argument("--skip-tests", action="store_true", help="Skip running pytest")
    args = parser.parse_args()

    print("\n" + "=" * 60)
    print("SizeRec Code Quality Checks")
    print("=" * 60)

    failures = []
    for tool, check_flags in FORMATTERS.items():
        cmd = [tool, *SOURCE_DIRS]
        if args.check:
            cmd.extend(check_flags)
        if not run_command(cmd, tool):
            failures.append(tool)

    if not args.skip_tests and not run_command(["pytest", "tests/", "-v"], "pytest"):
        failures.append("pytest")

    print("\n" + "=" * 60)
    if failures:
        print(f"✗ Failed: {', '.join(failures)}")
        print("=" * 60 + "\n")
        return 1

    print("✓ All checks passed!")
    print("=" * 60 + "\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
