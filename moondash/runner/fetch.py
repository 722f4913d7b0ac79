import logging
import zipfile
from pathlib import Path
from urllib.parse import quote_plus

import httpx

from moondash.const import CLONE_DIRNAME, REGISTRY_BASE_URL
from moondash.exceptions import CommandError, FetchError
from moondash.schemas import GitSource, RegistrySource, Source
from moondash.utils import check_output, get_bin

logger = logging.getLogger(__name__)


def package_url(base_url: str, name: str, version: str) -> str:
    return f'{base_url}/{name}/{quote_plus(version)}.zip'


def download_package(
    client: httpx.Client, base_url: str, name: str, version: str, dst: Path
) -> Path:
    url = package_url(base_url, name, version)
    output_zip = dst / f'{version}.zip'
    workdir = dst / version
    try:
        with client.stream('GET', url) as resp:
            resp.raise_for_status()
            with output_zip.open('wb') as f:
                for chunk in resp.iter_bytes():
                    f.write(chunk)
        with zipfile.ZipFile(output_zip) as archive:
            archive.extractall(workdir)
    except (httpx.HTTPError, zipfile.BadZipFile, OSError) as e:
        raise FetchError(f'Failed to download {name}/{version}: {e}') from e
    return workdir


def clone_repo(git: str, url: str, at: Path) -> Path:
    try:
        check_output(git, 'clone', url, CLONE_DIRNAME, cwd=at)
    except CommandError as e:
        raise FetchError(f'Failed to clone {url}: {e}') from e
    return at / CLONE_DIRNAME


def checkout(git: str, workdir: Path, rev: str):
    try:
        check_output(git, 'checkout', rev, cwd=workdir)
    except CommandError as e:
        raise FetchError(f'Failed to checkout {rev}: {e}') from e


class Fetcher:
    """
    Materializes one version/revision of a source inside ``root``.

    One instance serves a single source: a git repository is cloned on
    the first fetch and reused for later revisions. A failed clone is
    remembered and reported again instead of cloning a second time.
    """

    root: Path
    client: httpx.Client
    registry_base_url: str
    git: str
    _clone: Path | None
    _clone_error: FetchError | None

    def __init__(
        self,
        root: Path,
        client: httpx.Client,
        registry_base_url: str = REGISTRY_BASE_URL,
        git: str = 'git',
    ):
        self.root = root
        self.client = client
        self.registry_base_url = registry_base_url
        self.git = git
        self._clone = None
        self._clone_error = None

    def fetch(self, source: Source, version: str) -> Path:
        if isinstance(source, RegistrySource):
            return download_package(
                self.client, self.registry_base_url, source.name, version, self.root
            )
        elif isinstance(source, GitSource):
            workdir = self._ensure_clone(source.url)
            checkout(get_bin(self.git), workdir, version)
            return workdir
        raise TypeError(f'Unknown source type {type(source).__name__}')

    def _ensure_clone(self, url: str) -> Path:
        if self._clone_error is not None:
            raise self._clone_error
        if self._clone is None:
            try:
                self._clone = clone_repo(get_bin(self.git), url, self.root)
            except FetchError as e:
                self._clone_error = e
                raise
        return self._clone
