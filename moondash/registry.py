import json
import logging
from pathlib import Path

from pydantic import BaseModel, ValidationError

from moondash.const import REGISTRY_TEST_KEYWORD
from moondash.exceptions import RegistryError
from moondash.schemas.repos import Mooncake

logger = logging.getLogger(__name__)


class PackageInfo(BaseModel):
    version: str
    keywords: list[str] | None = None


class RegistryDB(BaseModel):
    """Package name (``user/pkg``) to its versions, oldest first"""

    db: dict[str, list[str]] = {}

    def latest_version(self, name: str) -> str:
        versions = self.db.get(name)
        if not versions:
            raise RegistryError(f'Package {name} not found')
        return versions[-1]

    def latest_packages(
        self, exclude: set[str] | frozenset[str] = frozenset()
    ) -> list[Mooncake]:
        return [
            Mooncake(name=name, version=self.latest_version(name))
            for name in sorted(self.db)
            if name not in exclude and self.db[name]
        ]


def load_registry_index(index_dir: Path) -> RegistryDB:
    """
    Reads every ``<user>/<pkg>.index`` file below ``index_dir``.
    Packages tagged as registry tests are left out.
    """
    db = {}
    for path in sorted(index_dir.rglob('*.index')):
        if not path.is_file():
            continue
        name = path.relative_to(index_dir).with_suffix('').as_posix()
        versions = []
        is_registry_test = False
        for line in path.read_text().splitlines():
            if not line.strip():
                continue
            try:
                info = PackageInfo.model_validate(json.loads(line))
            except (ValueError, ValidationError) as e:
                raise RegistryError(f'Malformed index entry in {path}: {e}') from e
            versions.append(info.version)
            if info.keywords and REGISTRY_TEST_KEYWORD in info.keywords:
                is_registry_test = True
        if not is_registry_test:
            db[name] = versions
    logger.info(f'Loaded {len(db)} packages from {index_dir}')
    return RegistryDB(db=db)
