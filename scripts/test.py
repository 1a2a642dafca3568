#!/usr/bin/env python3
"""Test runner script for Plumbline.

Wraps pytest and the code quality tools with the options used in CI.
"""

import argparse
import subprocess
import sys
from pathlib import Path
from typing import List, Optional

PROJECT_ROOT = Path(__file__).parent.parent


def run_command(cmd: List[str], *, cwd: Optional[Path] = None) -> int:
    """Run command and return exit code."""
    print(f"Running: {' '.join(cmd)}")
    result = subprocess.run(cmd, cwd=cwd or PROJECT_ROOT)
    return result.returncode


def run_tests(
    test_type: str = "all",
    *,
    coverage: bool = False,
    verbose: bool = False,
    fail_fast: bool = False,
    html_report: bool = False,
) -> int:
    """Run tests with specified configuration.

    Args:
        test_type: Marker to select (all, unit, integration, slow)
        coverage: Enable coverage reporting
        verbose: Enable verbose output
        fail_fast: Stop on first failure
        html_report: Generate HTML coverage report

    Returns:
        Exit code from pytest
    """
    cmd = [sys.executable, "-m", "pytest"]

    if test_type != "all":
        cmd.extend(["-m", test_type])

    if coverage:
        cmd.extend([
            "--cov=src/plumbline",
            "--cov-report=term-missing:skip-covered",
            "--cov-report=xml:coverage.xml",
            "--cov-fail-under=90",
        ])

        if html_report:
            cmd.append("--cov-report=html:htmlcov")

    if verbose:
        cmd.append("-v")

    if fail_fast:
        cmd.append("-x")

    cmd.append("--durations=10")

    return run_command(cmd)


def run_quality_checks() -> int:
    """Run formatting, lint and type checks; returns 0 if all pass."""
    checks = [
        (["black", "--check", "src", "tests"], "Code formatting (black)"),
        (["isort", "--check-only", "src", "tests"], "Import sorting (isort)"),
        (["flake8", "src", "tests"], "Code linting (flake8)"),
        (["mypy", "src"], "Type checking (mypy)"),
    ]

    failed_checks = []

    for cmd, description in checks:
        print(f"\n{'=' * 60}")
        print(f"Running {description}")
        print(f"{'=' * 60}")

        if run_command(cmd) != 0:
            failed_checks.append(description)

    print(f"\n{'=' * 60}")
    if failed_checks:
        print("Quality checks failed:")
        for check in failed_checks:
            print(f"  - {check}")
        print(f"{'=' * 60}")
        return 1

    print("All quality checks passed")
    print(f"{'=' * 60}")
    return 0


def run_format() -> int:
    """Run code formatting tools."""
    format_commands = [
        (["black", "src", "tests"], "Code formatting (black)"),
        (["isort", "src", "tests"], "Import sorting (isort)"),
    ]

    for cmd, description in format_commands:
        print(f"\nRunning {description}")
        exit_code = run_command(cmd)
        if exit_code != 0:
            print(f"{description} failed")
            return exit_code

    print("Code formatting completed")
    return 0


def main():
    """Main test runner function."""
    parser = argparse.ArgumentParser(
        description="Plumbline test runner",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s                          # Run all tests
  %(prog)s --type unit              # Run unit tests only
  %(prog)s --coverage --html        # Run with coverage and HTML report
  %(prog)s --quality                # Run quality checks only
  %(prog)s --format                 # Format code
        """
    )

    parser.add_argument(
        "--type", "-t",
        choices=["all", "unit", "integration", "slow"],
        default="all",
        help="Type of tests to run (default: all)"
    )
    parser.add_argument("--coverage", "-c", action="store_true", help="Enable coverage reporting")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose output")
    parser.add_argument("--fail-fast", "-x", action="store_true", help="Stop on first failure")
    parser.add_argument("--html", action="store_true", help="Generate HTML coverage report")
    parser.add_argument(
        "--quality", "-q",
        action="store_true",
        help="Run code quality checks (format, lint, type check)"
    )
    parser.add_argument("--format", "-f", action="store_true", help="Format code with black and isort")
    parser.add_argument(
        "--full",
        action="store_true",
        help="Run full test suite (format, quality, tests with coverage)"
    )

    args = parser.parse_args()

    if args.format:
        return run_format()

    if args.quality:
        return run_quality_checks()

    if args.full:
        for step in (run_format, run_quality_checks):
            exit_code = step()
            if exit_code != 0:
                return exit_code
        return run_tests(coverage=True, html_report=True, verbose=args.verbose)

    return run_tests(
        test_type=args.type,
        coverage=args.coverage,
        verbose=args.verbose,
        fail_fast=args.fail_fast,
        html_report=args.html,
    )


if __name__ == "__main__":
    sys.exit(main())
