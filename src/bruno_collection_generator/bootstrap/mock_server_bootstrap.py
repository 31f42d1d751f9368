"""Prepare a virtual environment for a generated mock server."""

from __future__ import annotations

import logging
import shlex
import subprocess
import sys
from collections.abc import Callable
from pathlib import Path

from bruno_collection_generator.output_packaging import REQUIREMENTS_FILENAME

logger = logging.getLogger(__name__)

CommandRunner = Callable[[tuple[str, ...], Path], None]


class BootstrapError(Exception):
    """Raised when the mock server environment cannot be prepared."""


def bootstrap_mock_server_environment(
    *, output_dir: Path, run_command: CommandRunner | None = None
) -> Path:
    """Create `.venv` next to the generated `app.py` and install its requirements.

    Returns:
      The interpreter path inside the virtual environment.

    Raises:
      BootstrapError: If the requirements file is missing or a command fails.
    """
    command_runner = run_command or _run_checked_command
    resolved_dir = output_dir.resolve()
    requirements = resolved_dir / REQUIREMENTS_FILENAME
    if not requirements.is_file():
        raise BootstrapError(f"{REQUIREMENTS_FILENAME} not found in {resolved_dir}")

    venv_python = _find_existing_venv_python(resolved_dir)
    if venv_python is None:
        logger.info("Creating virtual environment in %s", resolved_dir / ".venv")
        command_runner((sys.executable, "-m", "venv", ".venv"), resolved_dir)
        venv_python = _default_venv_python_path(resolved_dir)

    logger.info("Installing %s", requirements)
    command_runner(
        (str(venv_python), "-m", "pip", "install", "-r", REQUIREMENTS_FILENAME),
        resolved_dir,
    )
    return venv_python


def _run_checked_command(command: tuple[str, ...], cwd: Path) -> None:
    try:
        subprocess.run(list(command), cwd=cwd, check=True)
    except FileNotFoundError as exc:
        raise BootstrapError(f"Bootstrap command not found: {shlex.join(command)}") from exc
    except subprocess.CalledProcessError as exc:
        raise BootstrapError(
            f"Bootstrap command failed with exit code {exc.returncode}: {shlex.join(command)}"
        ) from exc


def _find_existing_venv_python(directory: Path) -> Path | None:
    for candidate in (
        directory / ".venv" / "bin" / "python",
        directory / ".venv" / "Scripts" / "python.exe",
    ):
        if candidate.exists():
            return candidate
    return None


def _default_venv_python_path(directory: Path) -> Path:
    if sys.platform.startswith("win"):
        return directory / ".venv" / "Scripts" / "python.exe"
    return directory / ".venv" / "bin" / "python"
