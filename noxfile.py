"""noxfile.py - Nox sessions for Quote Manager.

Updates:
  v0.1.1 - 2026-10-09 - Run pytest across xdist workers with a coverage gate on core.
  v0.1.0 - 2026-09-20 - Initial format/lint/typecheck/test sessions.

Install the project with `pip install -e .[dev]` inside `.venv` before running these sessions.
This file defines automation sessions:
- format: format code with ruff
- lint: run ruff lint checks
- typecheck: run pyright
- test: run pytest with coverage
- all: run the full quality gate suite
"""

from __future__ import annotations

import sys
from pathlib import Path

import nox

CODE_LOCATIONS: tuple[str, ...] = (
    "main.py",
    "cli",
    "config",
    "core",
    "models",
    "tests",
)

PYTEST_ARGS: tuple[str, ...] = (
    "-n",
    "auto",
    "--cov=core",
    "--cov=models",
    "--cov-report=term-missing",
    "--cov-fail-under=80",
    "tests",
)


def _venv_executable(command: str) -> Path:
    """Return the path to *command* inside the project virtual environment."""
    venv_dir = Path(".venv")
    if sys.platform == "win32":
        return venv_dir / "Scripts" / f"{command}.exe"
    return venv_dir / "bin" / command


def _require_venv_tool(session: nox.Session, command: str) -> str:
    """Return the `.venv` tool path, failing with guidance when missing."""
    candidate = _venv_executable(command)
    if candidate.exists():
        return str(candidate)
    session.error(
        "Project virtual environment tool is missing: "
        f"{candidate}. Create `.venv` and install dev tools with "
        "`python -m venv .venv && . .venv/bin/activate && pip install -e .[dev]`."
    )
    raise RuntimeError("unreachable")  # pragma: no cover


@nox.session(venv_backend="none")
def format(session: nox.Session) -> None:
    """Format code using ruff.

    Usage: `nox -s format`
    """
    ruff = _require_venv_tool(session, "ruff")
    session.run(ruff, "format", *CODE_LOCATIONS, external=True)


@nox.session(venv_backend="none")
def lint(session: nox.Session) -> None:
    """Lint code using ruff."""
    ruff = _require_venv_tool(session, "ruff")
    session.run(ruff, "check", *CODE_LOCATIONS, external=True)


@nox.session(venv_backend="none")
def typecheck(session: nox.Session) -> None:
    """Run pyright using the settings in pyproject.toml."""
    pyright = _require_venv_tool(session, "pyright")
    session.run(pyright, external=True)


@nox.session(venv_backend="none")
def test(session: nox.Session) -> None:
    """Run pytest with coverage.

    Usage: `nox -s test`
    """
    pytest = _require_venv_tool(session, "pytest")
    session.run(pytest, *PYTEST_ARGS, external=True)


@nox.session(venv_backend="none")
def all(session: nox.Session) -> None:
    """Run the full Ruff/Pyright/Pytest quality gate suite."""
    ruff = _require_venv_tool(session, "ruff")
    pyright = _require_venv_tool(session, "pyright")
    pytest = _require_venv_tool(session, "pytest")

    session.run(ruff, "check", *CODE_LOCATIONS, external=True)
    session.run(ruff, "format", "--check", *CODE_LOCATIONS, external=True)
    session.run(pyright, external=True)
    session.run(pytest, *PYTEST_ARGS, external=True)
