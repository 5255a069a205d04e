import logging
import os
import sys
from contextlib import contextmanager
from typing import Annotated

from cyclopts import Parameter

from glpeek.exceptions import GlPeekException

# Custom annotated types for consistent CLI parameter help
VerboseFlag = Annotated[
    bool,
    Parameter(alias="-V", help="Print debug logs. Also enabled by setting TRACE=1."),
]


def configure_logging(verbose: bool = False):
    level = logging.DEBUG if verbose or os.environ.get("TRACE") == "1" else logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


@contextmanager
def remove_stacktrace():
    """Context manager that suppresses GlPeekException stack traces, prints only the error message, and exits."""
    try:
        yield
    except GlPeekException as e:
        print(e)
        sys.exit(1)
