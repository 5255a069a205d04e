"""Open folders in the user's editor."""

import logging
import shlex
import shutil
import subprocess  # nosec

from glpeek.exceptions import MissingDependencyError
from glpeek.typing import PathType

__all__ = ["editor_command", "launch_editor"]

logger = logging.getLogger(__name__)


def editor_command(editor: str) -> list[str]:
    """Split an ``EDITOR`` value (like ``"code --new-window"``) into a command.

    Raises
    ------
    MissingDependencyError
        If ``editor`` is empty, can't be split, or its executable isn't on ``PATH``.
    """
    try:
        command = shlex.split(editor)
    except ValueError as e:
        raise MissingDependencyError(f'Invalid EDITOR "{editor}": {e}') from e
    if not command:
        raise MissingDependencyError('No editor configured. Define EDITOR in "~/.gl-peek", e.g. EDITOR="subl".')

    executable = shutil.which(command[0])
    if executable is None:
        raise MissingDependencyError(f'Editor "{command[0]}" not found. Install it or update EDITOR in "~/.gl-peek".')

    command[0] = executable
    return command


def launch_editor(command: list[str], folder: PathType) -> int:
    """Run ``command`` with ``folder`` as its last argument.

    Blocks until the editor process exits; GUI editors typically return immediately.

    Returns
    -------
    int
        Editor's exit code.
    """
    full_command = [*command, str(folder)]
    logger.debug(f"Launching editor: {full_command}")
    return subprocess.run(full_command).returncode  # nosec
