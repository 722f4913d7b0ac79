from pydantic import BaseModel, ConfigDict, Field

from moondash.schemas import OS, Backend


class _RunningSettings(BaseModel):
    running_os: list[OS] | None = None
    running_backend: list[Backend] | None = None


class GithubRepo(_RunningSettings):
    name: str
    link: str
    branch: str


class Mooncake(_RunningSettings):
    name: str
    version: str


class ReposConfig(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    github_repos: list[GithubRepo] = Field(default_factory=list, alias='github-repos')
    mooncakes: list[Mooncake] = Field(default_factory=list)


class ExcludeConfig(BaseModel):
    exclude: list[str] = Field(default_factory=list)
