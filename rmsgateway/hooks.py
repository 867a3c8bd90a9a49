"""Running optional sysop hook scripts."""

from __future__ import annotations

import logging
import os
import signal
import subprocess
from typing import Optional, Union

from rmsgateway.rms import HOOKSHELL, MAXHOOKARGS
from rmsgateway.util import file_exists

log = logging.getLogger(__name__)

_UNRUNNABLE = 127


def _ignore_interrupts() -> None:
    signal.signal(signal.SIGINT, signal.SIG_IGN)
    signal.signal(signal.SIGQUIT, signal.SIG_IGN)


def run_hook(hookdir: Optional[Union[str, os.PathLike]], hook_name: Optional[str], *args: str) -> bool:
    """Run the hook script hookdir/hook_name through the shell.

    A missing hook script is not an error. Returns True when the hook is
    absent or exits with status 0, False when the hook directory does not
    exist or the hook fails. Raises ValueError for an empty hook name or
    directory, or too many arguments.
    """
    if not hook_name:
        log.error("run_hook: hook_name is None or empty!")
        raise ValueError("hook name is empty")
    if hookdir is None or os.fspath(hookdir) == "":
        log.error("run_hook: %s: hookdir is None or empty", hook_name)
        raise ValueError("hook directory is empty")
    if len(args) > MAXHOOKARGS - 3:
        raise ValueError(f"too many hook arguments ({len(args)})")

    directory = os.fspath(hookdir)
    if not file_exists(directory):
        log.warning("run_hook: hookdir '%s' does not exist", directory)
        return False

    hook_path = f"{directory}/{hook_name}"
    log.debug("running hook: %s", hook_path)
    if not file_exists(hook_path):
        log.debug("run_hook: skipping non-existent hook '%s'", hook_path)
        return True

    try:
        result = subprocess.run(
            [HOOKSHELL, "-c", hook_path, *args],
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            preexec_fn=_ignore_interrupts,
            check=False,
        )
    except OSError as exc:
        log.error("run_hook: can't run %s (errno = %d -- %s)", hook_path, exc.errno or 0, exc.strerror)
        return False

    status = result.returncode
    if status != 0:
        if status < 0:
            log.error("ERROR: failed to run hook %s", hook_name)
        elif status == _UNRUNNABLE:
            log.error("ERROR: unable to execute hook %s", hook_name)
        log.error("hook script %s failed: status %d", hook_path, status)
        return False

    log.debug("hook %s succeeded", hook_name)
    return True