import logging
from datetime import datetime, timedelta, timezone
from itertools import product
from pathlib import Path
from typing import Callable, Protocol

from moondash.exceptions import CommandError
from moondash.runner.command import CommandKind, CommandOutput, MoonCommand
from moondash.schemas import (
    CBT,
    OS,
    Backend,
    BackendState,
    ExecuteResult,
    Source,
    Status,
)

logger = logging.getLogger(__name__)


class CommandRunner(Protocol):
    host_os: OS

    def run(self, workdir: Path, args: list[str]) -> CommandOutput: ...


class MatrixRunner:
    """
    Runs check, build and test for every selected (OS, backend) pair
    whose OS is the host OS.

    Pairs are visited in allow-set order. When two OS entries both match
    the host, the backend runs again and the last run wins.
    """

    toolchain: CommandRunner
    is_first_party: Callable[[Source], bool]
    tz: timezone

    def __init__(
        self,
        toolchain: CommandRunner,
        is_first_party: Callable[[Source], bool],
        utc_offset_hours: int = 8,
    ):
        self.toolchain = toolchain
        self.is_first_party = is_first_party
        self.tz = timezone(timedelta(hours=utc_offset_hours))

    def now(self) -> str:
        return datetime.now(self.tz).strftime('%Y-%m-%d %H:%M:%S.%f')[:-3]

    def clean(self, workdir: Path):
        try:
            self.toolchain.run(workdir, ['clean'])
        except CommandError as e:
            logger.warning(f'Ignoring failed clean in {workdir}: {e}')

    def execute(
        self, workdir: Path, source: Source, command: MoonCommand
    ) -> ExecuteResult:
        start_time = self.now()
        output = self.toolchain.run(workdir, command.args(self.is_first_party(source)))
        return ExecuteResult(
            status=Status.success if output.success else Status.failure,
            start_time=start_time,
            elapsed=output.elapsed,
            stdout=output.stdout,
            stderr=output.stderr,
        )

    def run(
        self,
        workdir: Path,
        source: Source,
        running_os: list[OS],
        running_backend: list[Backend],
    ) -> CBT:
        """
        Raises ``CommandSpawnError`` if the toolchain cannot be started;
        failing commands are recorded as ``Status.failure``.
        """
        results = {
            kind: {backend: ExecuteResult.skipped() for backend in Backend}
            for kind in CommandKind
        }
        for os_, backend in product(running_os, running_backend):
            if os_ != self.toolchain.host_os:
                continue
            self.clean(workdir)
            for kind in CommandKind:
                results[kind][backend] = self.execute(
                    workdir, source, MoonCommand(kind, backend)
                )
        return CBT(
            **{
                kind.value: BackendState.from_results(by_backend)
                for kind, by_backend in results.items()
            }
        )
