import logging
import subprocess
import time
from enum import Enum
from pathlib import Path
from subprocess import DEVNULL, PIPE
from typing import NamedTuple

from pydantic import BaseModel

from moondash.exceptions import CommandSpawnError
from moondash.schemas import Backend
from moondash.utils import format_cmd

logger = logging.getLogger(__name__)


class CommandKind(Enum):
    check = 'check'
    build = 'build'
    test = 'test'


class MoonCommand(NamedTuple):
    kind: CommandKind
    backend: Backend

    def args(self, first_party: bool) -> list[str]:
        target = ['--target', self.backend.flag]
        if self.kind == CommandKind.test and not first_party:
            # third-party tests are only compiled, never executed
            return ['test', '-q', '--build-only', *target]
        return [self.kind.value, '-q', *target]


class CommandOutput(BaseModel):
    elapsed: int
    stdout: str
    stderr: str
    success: bool


def run_command(binary: str, args: list[str], cwd: Path | str) -> CommandOutput:
    """
    Runs ``binary`` with ``args`` in ``cwd`` and waits for it to exit.

    A non-zero exit is reported through ``CommandOutput.success``;
    only a process that cannot be started raises ``CommandSpawnError``.
    Output is decoded lossily.
    """
    cmd = format_cmd(binary, *args)
    logger.info(f'RUN {cmd} in {cwd}')
    start = time.monotonic()
    try:
        p = subprocess.run(
            [binary, *args], cwd=cwd, stdin=DEVNULL, stdout=PIPE, stderr=PIPE
        )
    except OSError as e:
        raise CommandSpawnError(cmd, str(e)) from e
    elapsed = int((time.monotonic() - start) * 1000)
    success = p.returncode == 0
    logger.info(
        f'{cmd}, elapsed: {elapsed}ms, {"success" if success else "failed"}'
    )
    return CommandOutput(
        elapsed=elapsed,
        stdout=p.stdout.decode(errors='replace'),
        stderr=p.stderr.decode(errors='replace'),
        success=success,
    )
