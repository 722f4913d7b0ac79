import pytest

from moondash.exceptions import ConfigurationError
from moondash.schemas import (
    DEFAULT_RUNNING_BACKEND,
    DEFAULT_RUNNING_OS,
    OS,
    Backend,
    GitSource,
    RegistrySource,
)
from moondash.sources import get_sources, load_repos_config, org_predicate

REPOS_YML = '''
github-repos:
  - name: core
    link: https://github.com/moonbitlang/core
    branch: main
  - name: parser
    link: https://github.com/bob/parser
    branch: dev
    running_os: [linux]
    running_backend: [js, wasm-gc]
mooncakes:
  - name: alice/json
    version: 0.3.0
  - name: bob/yaml
    version: 1.0.0
    running_backend: []
'''


@pytest.fixture
def repos(tmp_path):
    path = tmp_path / 'repos.yml'
    path.write_text(REPOS_YML)
    return load_repos_config(path)


def test_indices_follow_declaration_order(repos):
    sources = get_sources(repos)

    assert [s.index for s in sources] == [0, 1, 2, 3]
    assert [type(s) for s in sources] == [
        GitSource,
        GitSource,
        RegistrySource,
        RegistrySource,
    ]
    assert sources[1].rev == ['dev']
    assert sources[2].version == ['0.3.0']


def test_defaults_and_overrides(repos):
    sources = get_sources(repos)

    assert sources[0].running_os == DEFAULT_RUNNING_OS
    assert sources[0].running_backend == DEFAULT_RUNNING_BACKEND
    assert sources[1].running_os == [OS.linux]
    assert sources[1].running_backend == [Backend.js, Backend.wasm_gc]
    assert sources[3].running_backend == []


def test_adhoc_repository_comes_first(repos):
    sources = get_sources(repos, repo_url='https://github.com/carol/lib')

    assert sources[0].url == 'https://github.com/carol/lib'
    assert sources[0].index == 0
    assert sources[0].rev == ['HEAD']
    assert [s.index for s in sources] == [0, 1, 2, 3, 4]
    assert len({s.index for s in sources}) == len(sources)


def test_adhoc_repository_revisions():
    sources = get_sources(repo_url='https://github.com/carol/lib', repo_revs=['a', 'b'])
    assert sources[0].rev == ['a', 'b']


def test_missing_file(tmp_path):
    with pytest.raises(ConfigurationError):
        load_repos_config(tmp_path / 'nope.yml')


@pytest.mark.parametrize(
    'content',
    [
        'mooncakes: [{name: a/b}]',
        'mooncakes: [{name: a/b, version: 1, running_backend: [jvm]}]',
        'github-repos: [',
    ],
)
def test_invalid_file(tmp_path, content):
    path = tmp_path / 'repos.yml'
    path.write_text(content)
    with pytest.raises(ConfigurationError):
        load_repos_config(path)


def test_org_predicate(git_source, registry_source):
    is_first_party = org_predicate('moonbitlang')
    assert is_first_party(git_source)
    assert not is_first_party(registry_source)
    assert org_predicate('alice')(registry_source)
