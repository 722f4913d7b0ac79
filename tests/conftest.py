from pathlib import Path

import pytest

from moondash.exceptions import CommandSpawnError, FetchError
from moondash.runner.command import CommandOutput
from moondash.schemas import OS, Backend, GitSource, RegistrySource


class FakeToolchain:
    """Records every invocation and answers from the given predicates"""

    def __init__(self, host_os=OS.linux, fail=None, spawn_error=None):
        self.host_os = host_os
        self.fail = fail or (lambda args: False)
        self.spawn_error = spawn_error or (lambda args: False)
        self.calls = []

    def run(self, workdir: Path, args: list[str]) -> CommandOutput:
        self.calls.append((workdir, list(args)))
        if self.spawn_error(args):
            raise CommandSpawnError('moon ' + ' '.join(args), 'No such file')
        return CommandOutput(
            elapsed=5,
            stdout=f'call {len(self.calls)}',
            stderr='',
            success=not self.fail(args),
        )

    @property
    def commands(self) -> list[list[str]]:
        return [args for _, args in self.calls]


class FakeFetcher:
    def __init__(self, root: Path, failing: set[str] = frozenset()):
        self.root = root
        self.failing = failing
        self.fetched = []

    def fetch(self, source, version: str) -> Path:
        self.fetched.append(version)
        if version in self.failing:
            raise FetchError(f'cannot fetch {version}')
        workdir = self.root / version
        workdir.mkdir()
        return workdir


@pytest.fixture
def toolchain():
    return FakeToolchain()


@pytest.fixture
def registry_source():
    return RegistrySource(
        name='alice/json',
        version=['0.1.0', '0.2.0', '0.3.0'],
        running_os=[OS.linux],
        running_backend=[Backend.wasm_gc, Backend.js],
        index=1,
    )


@pytest.fixture
def git_source():
    return GitSource(
        url='https://github.com/moonbitlang/core',
        rev=['main'],
        running_os=[OS.linux, OS.macos, OS.windows],
        running_backend=[Backend.native],
        index=0,
    )
