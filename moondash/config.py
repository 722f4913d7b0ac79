import os
from pathlib import Path

import yaml
from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from moondash.const import FIRST_PARTY_ORG, REGISTRY_BASE_URL


class Config(BaseSettings):
    model_config = SettingsConfigDict(env_prefix='MOONDASH_', populate_by_name=True)

    debug: bool = False

    moon_bin: str = 'moon'
    moonc_bin: str = 'moonc'
    git_bin: str = 'git'
    moon_home: Path = Field(
        None,
        validation_alias=AliasChoices('MOONDASH_MOON_HOME', 'MOON_HOME'),
        validate_default=True,
    )

    output_dir: Path = Path('webapp/public')
    registry_base_url: str = REGISTRY_BASE_URL
    first_party_org: str = FIRST_PARTY_ORG
    utc_offset_hours: int = 8

    run_id: str = Field(
        '0', validation_alias=AliasChoices('MOONDASH_RUN_ID', 'GITHUB_ACTION_RUN_ID')
    )
    run_number: str = Field(
        '0',
        validation_alias=AliasChoices('MOONDASH_RUN_NUMBER', 'GITHUB_ACTION_RUN_NUMBER'),
    )

    # noinspection PyNestedDecorators
    @field_validator('moon_home', mode='before')
    @classmethod
    def default_moon_home(cls, v: Path | str | None):
        if v:
            return Path(v)
        return Path(os.path.expanduser('~/.moon'))

    @property
    def registry_index_dir(self) -> Path:
        return self.moon_home / 'registry' / 'index' / 'user'


config_home = Path(os.getenv('XDG_CONFIG_HOME') or os.path.expanduser('~/.config'))
config_file = config_home / 'moondash' / 'config.yml'
if config_file.is_file():
    config_values = yaml.safe_load(config_file.read_text()) or {}
else:
    config_values = {}
config = Config(**config_values, _env_file='.env')

__all__ = ['Config', 'config']
