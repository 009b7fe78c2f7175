"""
Argshell process handoff: the single, terminal side effect of a run.

handoff() overlays the bindings on the current environment and replaces the
process with the target executable (PATH lookup applies, argv is just the
executable). It returns only when the exec itself failed, which is surfaced
as a HandoffError.
"""
import logging
import os

from .faults import *
from .utils import *

logger = logging.getLogger(__name__)


def environment(bindings, /, environ=Unset, extra=Unset):
    """
    Merge the base environment (os.environ by default), the bindings and any extra
    variables, later sources winning.
    """
    return dict(coalesce(environ, os.environ)) | dict(bindings) | dict(coalesce(extra, {}))


def handoff(executable, bindings, /, *, environ=Unset, extra=Unset):
    """
    Replace the current process with 'executable', exporting 'bindings'.

    Raises
    - HandoffError when the executable cannot be started (missing, not executable, ...).
    """
    env = environment(bindings, environ, extra)
    logger.info("handing off to %s with %d bindings", executable, len(bindings))
    try:
        os.execvpe(executable, [executable], env)
    except OSError as exception:
        raise HandoffError(
            "cannot run %r: %s" % (executable, exception.strerror or exception),
            title="handoff failed",
            code=FaultCode.HANDOFF_FAILED,
            key=executable,
            errno=exception.errno,
            hint="check that %r exists and is executable" % executable,
        ) from exception


__all__ = (
    "environment",
    "handoff",
)
