from enum import Enum
from typing import ClassVar

from pydantic import BaseModel, ConfigDict, model_serializer, model_validator


class Backend(Enum):
    wasm = 'wasm'
    wasm_gc = 'wasm-gc'
    js = 'js'
    native = 'native'

    @property
    def flag(self) -> str:
        return self.value


class OS(Enum):
    linux = 'linux'
    macos = 'macos'
    windows = 'windows'


DEFAULT_RUNNING_OS = [OS.linux, OS.macos, OS.windows]
DEFAULT_RUNNING_BACKEND = [Backend.wasm_gc, Backend.wasm, Backend.js, Backend.native]


class _SourceBase(BaseModel):
    """
    Common part of every source. Serialized externally tagged, e.g.
    ``{"Git": {"url": ..., "rev": [...], ...}}``.
    """

    model_config = ConfigDict(frozen=True, extra='forbid')

    tag: ClassVar[str]

    running_os: list[OS]
    running_backend: list[Backend]
    index: int

    # noinspection PyNestedDecorators
    @model_validator(mode='before')
    @classmethod
    def unwrap_tag(cls, data):
        if isinstance(data, dict) and cls.tag in data:
            return data[cls.tag]
        return data

    @model_serializer(mode='wrap')
    def wrap_tag(self, handler):
        return {self.tag: handler(self)}

    @property
    def revisions(self) -> list[str]:
        raise NotImplementedError

    @property
    def display_name(self) -> str:
        raise NotImplementedError


class RegistrySource(_SourceBase):
    tag: ClassVar[str] = 'MooncakesIO'

    name: str
    version: list[str]

    @property
    def revisions(self) -> list[str]:
        return self.version

    @property
    def display_name(self) -> str:
        return self.name


class GitSource(_SourceBase):
    tag: ClassVar[str] = 'Git'

    url: str
    rev: list[str]

    @property
    def revisions(self) -> list[str]:
        return self.rev

    @property
    def display_name(self) -> str:
        return self.url


Source = RegistrySource | GitSource


class Status(Enum):
    success = 'Success'
    failure = 'Failure'
    skipped = 'Skipped'


class ExecuteResult(BaseModel):
    status: Status
    start_time: str
    elapsed: int
    stdout: str
    stderr: str

    @classmethod
    def skipped(cls) -> 'ExecuteResult':
        return cls(status=Status.skipped, start_time='', elapsed=0, stdout='', stderr='')


class BackendState(BaseModel):
    wasm: ExecuteResult
    wasm_gc: ExecuteResult
    js: ExecuteResult
    native: ExecuteResult

    @classmethod
    def from_results(cls, results: dict[Backend, ExecuteResult]) -> 'BackendState':
        return cls(**{backend.name: result for backend, result in results.items()})

    def get(self, backend: Backend) -> ExecuteResult:
        return getattr(self, backend.name)


class CBT(BaseModel):
    check: BackendState
    build: BackendState
    test: BackendState


class BuildState(BaseModel):
    source: int
    cbts: list[CBT | None]


class ToolChainLabel(Enum):
    stable = 'Stable'
    bleeding = 'Bleeding'


class ToolChainVersion(BaseModel):
    label: ToolChainLabel
    moon_version: str
    moonc_version: str


class Dashboard(BaseModel):
    run_id: str
    run_number: str
    start_time: str

    sources: list[Source]

    stable_toolchain_version: ToolChainVersion
    stable_release_data: list[BuildState]

    bleeding_toolchain_version: ToolChainVersion
    bleeding_release_data: list[BuildState]
