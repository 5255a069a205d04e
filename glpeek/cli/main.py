import re
import sys

from cyclopts import App

import glpeek
from glpeek.cli.archive import archive
from glpeek.cli.config import config
from glpeek.cli.peek import peek

app = App(
    name="gl-peek",
    help="Take a quick look at a repository from GitLab.",
    version=glpeek.__version__,
    version_flags=("--version", "-v"),
    help_format="markdown",
)
app.default(peek)
app.command(archive)
app.command(config)

# "h", "help", "-h", "--help", ...
_HELP_PATTERN = re.compile(r"^-*h(elp)?$")


def _get(indexable, index, default=None):
    try:
        return indexable[index]
    except IndexError:
        return default


def run_app(*args, **kwargs):
    """Add CLI hacks that are not Cyclopts-friendly here."""
    command = _get(sys.argv, 1)
    if command is None or _HELP_PATTERN.match(command):
        app.help_print()
        return

    result = app(*args, **kwargs)
    # Propagate the editor's exit code.
    if isinstance(result, int) and result:
        sys.exit(result)
