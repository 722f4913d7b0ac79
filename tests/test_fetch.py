import io
import zipfile

import httpx
import pytest

from moondash.exceptions import FetchError
from moondash.runner import fetch
from moondash.runner.fetch import Fetcher, package_url

BASE_URL = 'https://registry.test/user'


def make_zip() -> bytes:
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, 'w') as archive:
        archive.writestr('moon.mod.json', '{"name": "alice/json"}')
        archive.writestr('src/lib.mbt', 'pub fn hello() -> Unit {}')
    return buf.getvalue()


@pytest.fixture
def requests():
    return []


@pytest.fixture
def client(requests):
    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(str(request.url))
        if request.url.path.endswith('/missing.zip'):
            return httpx.Response(404)
        if request.url.path.endswith('/broken.zip'):
            return httpx.Response(200, content=b'not a zip')
        return httpx.Response(200, content=make_zip())

    with httpx.Client(transport=httpx.MockTransport(handler)) as client:
        yield client


def test_package_url_encodes_version():
    assert (
        package_url(BASE_URL, 'alice/json', '1.0.0+build 1')
        == 'https://registry.test/user/alice/json/1.0.0%2Bbuild+1.zip'
    )


def test_registry_fetch_extracts_archive(tmp_path, client, requests, registry_source):
    fetcher = Fetcher(tmp_path, client, registry_base_url=BASE_URL)
    workdir = fetcher.fetch(registry_source, '0.1.0')

    assert workdir == tmp_path / '0.1.0'
    assert (workdir / 'moon.mod.json').is_file()
    assert (workdir / 'src' / 'lib.mbt').is_file()
    assert requests == ['https://registry.test/user/alice/json/0.1.0.zip']


@pytest.mark.parametrize('version', ['missing', 'broken'])
def test_registry_fetch_failure(tmp_path, client, registry_source, version):
    fetcher = Fetcher(tmp_path, client, registry_base_url=BASE_URL)
    with pytest.raises(FetchError):
        fetcher.fetch(registry_source, version)


def test_git_clone_is_reused(tmp_path, client, git_source, monkeypatch):
    clones = []
    checkouts = []

    def fake_clone(git, url, at):
        clones.append(url)
        (at / 'test').mkdir()
        return at / 'test'

    def fake_checkout(git, workdir, rev):
        if rev == 'gone':
            raise FetchError(f'Failed to checkout {rev}')
        checkouts.append(rev)

    monkeypatch.setattr(fetch, 'clone_repo', fake_clone)
    monkeypatch.setattr(fetch, 'checkout', fake_checkout)
    fetcher = Fetcher(tmp_path, client)

    assert fetcher.fetch(git_source, 'main') == tmp_path / 'test'
    with pytest.raises(FetchError):
        fetcher.fetch(git_source, 'gone')
    assert fetcher.fetch(git_source, 'dev') == tmp_path / 'test'
    assert clones == [git_source.url]
    assert checkouts == ['main', 'dev']


def test_failed_clone_is_not_retried(tmp_path, client, git_source, monkeypatch):
    clones = []

    def fake_clone(git, url, at):
        clones.append(url)
        raise FetchError(f'Failed to clone {url}')

    monkeypatch.setattr(fetch, 'clone_repo', fake_clone)
    fetcher = Fetcher(tmp_path, client)

    for rev in ('main', 'dev'):
        with pytest.raises(FetchError):
            fetcher.fetch(git_source, rev)
    assert len(clones) == 1


def test_missing_git_binary_is_a_fetch_error(tmp_path, client, git_source):
    fetcher = Fetcher(tmp_path, client, git='moondash-no-such-git')
    with pytest.raises(FetchError):
        fetcher.fetch(git_source, 'main')
