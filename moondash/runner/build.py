import logging
from pathlib import Path
from tempfile import TemporaryDirectory
from typing import Callable, Protocol

from moondash.exceptions import CommandError, FetchError
from moondash.runner.matrix import MatrixRunner
from moondash.schemas import CBT, BuildState, Source

logger = logging.getLogger(__name__)


class SourceFetcher(Protocol):
    def fetch(self, source: Source, version: str) -> Path: ...


class BuildRunner:
    matrix: MatrixRunner
    fetcher_factory: Callable[[Path], SourceFetcher]

    def __init__(
        self,
        matrix: MatrixRunner,
        fetcher_factory: Callable[[Path], SourceFetcher],
    ):
        self.matrix = matrix
        self.fetcher_factory = fetcher_factory

    def run(self, source: Source) -> BuildState:
        cbts: list[CBT | None] = []
        with TemporaryDirectory(prefix='moondash-') as path:
            fetcher = self.fetcher_factory(Path(path))
            for version in source.revisions:
                try:
                    workdir = fetcher.fetch(source, version)
                except FetchError as e:
                    logger.error(f'Skipping {source.display_name} {version}: {e}')
                    cbts.append(None)
                    continue
                try:
                    cbt = self.matrix.run(
                        workdir, source, source.running_os, source.running_backend
                    )
                except CommandError as e:
                    logger.error(
                        f'Matrix aborted for {source.display_name} {version}: {e}'
                    )
                    cbt = None
                cbts.append(cbt)
        return BuildState(source=source.index, cbts=cbts)
