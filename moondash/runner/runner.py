import logging
from datetime import datetime
from typing import Protocol

from moondash.runner.build import BuildRunner
from moondash.schemas import (
    BuildState,
    Dashboard,
    Source,
    ToolChainLabel,
    ToolChainVersion,
)

logger = logging.getLogger(__name__)


class ToolchainManager(Protocol):
    def install(self, label: ToolChainLabel): ...

    def update(self): ...

    def version(self, label: ToolChainLabel) -> ToolChainVersion: ...


class Runner:
    """
    Builds the dashboard: every source against the stable channel, then
    every source against the bleeding channel.

    Any exception escaping a channel or a source aborts the whole run.
    """

    sources: list[Source]
    toolchain: ToolchainManager
    build_runner: BuildRunner
    run_id: str
    run_number: str
    skip_install: bool
    skip_update: bool

    def __init__(
        self,
        sources: list[Source],
        toolchain: ToolchainManager,
        build_runner: BuildRunner,
        *,
        run_id: str = '0',
        run_number: str = '0',
        skip_install: bool = False,
        skip_update: bool = False,
    ):
        self.sources = sources
        self.toolchain = toolchain
        self.build_runner = build_runner
        self.run_id = run_id
        self.run_number = run_number
        self.skip_install = skip_install
        self.skip_update = skip_update

    def prepare_toolchain(self, label: ToolChainLabel) -> ToolChainVersion:
        if not self.skip_install:
            self.toolchain.install(label)
        if not self.skip_update:
            self.toolchain.update()
        version = self.toolchain.version(label)
        logger.info(
            f'{label.value} toolchain: {version.moon_version}, {version.moonc_version}'
        )
        return version

    def run_channel(
        self, label: ToolChainLabel
    ) -> tuple[ToolChainVersion, list[BuildState]]:
        version = self.prepare_toolchain(label)
        results = []
        for source in self.sources:
            logger.info(f'[{label.value}] Building {source.display_name}')
            results.append(self.build_runner.run(source))
        return version, results

    def run(self) -> Dashboard:
        start_time = datetime.now().astimezone().isoformat()
        stable_version, stable_data = self.run_channel(ToolChainLabel.stable)
        bleeding_version, bleeding_data = self.run_channel(ToolChainLabel.bleeding)
        return Dashboard(
            run_id=self.run_id,
            run_number=self.run_number,
            start_time=start_time,
            sources=self.sources,
            stable_toolchain_version=stable_version,
            stable_release_data=stable_data,
            bleeding_toolchain_version=bleeding_version,
            bleeding_release_data=bleeding_data,
        )
