import logging
import shlex
import shutil
import subprocess
import sys
from functools import cache
from pathlib import Path
from subprocess import DEVNULL, PIPE

from moondash.exceptions import (
    CommandDecodeError,
    CommandFailedError,
    CommandSpawnError,
    ConfigurationError,
)
from moondash.schemas import OS

logger = logging.getLogger(__name__)


@cache
def get_bin(name: str) -> str:
    return shutil.which(name) or name


def current_os() -> OS:
    if sys.platform.startswith('linux'):
        return OS.linux
    if sys.platform == 'darwin':
        return OS.macos
    if sys.platform in ('win32', 'cygwin'):
        return OS.windows
    raise ConfigurationError(f'Unsupported platform {sys.platform}')


def format_cmd(*args: str | Path) -> str:
    return shlex.join(str(x) for x in args)


def check_output(
    *args: str | Path,
    cwd: Path | str | None = None,
    env: dict[str, str] | None = None,
    input: bytes | None = None,
) -> str:
    cmd = format_cmd(*args)
    logger.debug(f'Running {cmd}')
    try:
        p = subprocess.run(
            [str(x) for x in args],
            cwd=cwd,
            env=env,
            input=input,
            stdin=None if input is not None else DEVNULL,
            stdout=PIPE,
        )
    except OSError as e:
        raise CommandSpawnError(cmd, str(e)) from e
    if p.returncode:
        logger.error(f'Process exited with code {p.returncode}')
        raise CommandFailedError(cmd, p.returncode)
    try:
        return p.stdout.decode()
    except UnicodeDecodeError as e:
        raise CommandDecodeError(cmd, str(e)) from e
