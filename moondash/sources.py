import logging
from pathlib import Path
from typing import Callable

import yaml
from pydantic import BaseModel, ValidationError
from yaml import YAMLError

from moondash.const import ADHOC_REVISION
from moondash.exceptions import ConfigurationError
from moondash.schemas import (
    DEFAULT_RUNNING_BACKEND,
    DEFAULT_RUNNING_OS,
    GitSource,
    RegistrySource,
    Source,
)
from moondash.schemas.repos import ExcludeConfig, ReposConfig

logger = logging.getLogger(__name__)


def _load_yaml(path: Path, model: type[BaseModel]):
    if not path.is_file():
        raise ConfigurationError(f'{path} not found')
    try:
        return model.model_validate(yaml.safe_load(path.read_text()) or {})
    except (YAMLError, ValidationError) as e:
        raise ConfigurationError(str(e))


def load_repos_config(path: Path) -> ReposConfig:
    return _load_yaml(path, ReposConfig)


def load_exclude_config(path: Path) -> ExcludeConfig:
    return _load_yaml(path, ExcludeConfig)


def _or_default(value: list | None, default: list) -> list:
    return list(default) if value is None else value


def get_sources(
    repos: ReposConfig | None = None,
    repo_url: str | None = None,
    repo_revs: list[str] | None = None,
) -> list[Source]:
    """
    Builds the ordered source list. Indices are assigned sequentially:
    the ad-hoc repository (if any) first, then declared repositories,
    then declared packages.
    """
    sources: list[Source] = []

    if repo_url:
        sources.append(
            GitSource(
                url=repo_url,
                rev=repo_revs or [ADHOC_REVISION],
                running_os=DEFAULT_RUNNING_OS,
                running_backend=DEFAULT_RUNNING_BACKEND,
                index=0,
            )
        )

    if repos is not None:
        for repo in repos.github_repos:
            sources.append(
                GitSource(
                    url=repo.link,
                    rev=[repo.branch],
                    running_os=_or_default(repo.running_os, DEFAULT_RUNNING_OS),
                    running_backend=_or_default(
                        repo.running_backend, DEFAULT_RUNNING_BACKEND
                    ),
                    index=len(sources),
                )
            )
        for mooncake in repos.mooncakes:
            sources.append(
                RegistrySource(
                    name=mooncake.name,
                    version=[mooncake.version],
                    running_os=_or_default(mooncake.running_os, DEFAULT_RUNNING_OS),
                    running_backend=_or_default(
                        mooncake.running_backend, DEFAULT_RUNNING_BACKEND
                    ),
                    index=len(sources),
                )
            )

    logger.info(f'Loaded {len(sources)} sources')
    return sources


def org_predicate(org: str) -> Callable[[Source], bool]:
    """Returns a predicate telling whether a source belongs to ``org``"""

    def is_first_party(source: Source) -> bool:
        return org in source.display_name

    return is_first_party
