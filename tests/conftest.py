"""Shared pytest fixtures for all tests."""

import json

import httpx
import pytest
from fastapi.testclient import TestClient

from client.config import Config
from server import service_locator
from server.blob_store import BlobStoreAdapter
from server.github_client import GitHubClient
from server.repositories.catalog_repository import CatalogRepository
from server.repositories.content_store import InMemoryContentStore
from server.repositories.view_repository import ViewRepository
from server.sessions import ChunkSessionManager
from server.types import FileRecord


@pytest.fixture
def temp_config_dir(tmp_path):
    """
    Create temporary config directory.

    Returns:
        Path to temporary .assetshelf directory
    """
    config_dir = tmp_path / '.assetshelf'
    config_dir.mkdir()
    return config_dir


@pytest.fixture
def temp_config(temp_config_dir):
    """
    Create temporary config instance.

    Returns:
        Config instance with temp config file
    """
    return Config(temp_config_dir / 'config.json')


@pytest.fixture
def sample_file(tmp_path):
    """
    Create a sample file for testing uploads.
    """
    file_path = tmp_path / 'clip.txt'
    file_path.write_bytes(b'Sample content for testing')
    return file_path


@pytest.fixture
def content_store():
    return InMemoryContentStore()


@pytest.fixture
def catalog(content_store):
    return CatalogRepository(content_store, backoff_seconds=0)


@pytest.fixture
def views(content_store):
    return ViewRepository(content_store, backoff_seconds=0)


@pytest.fixture
def make_record():
    """Factory building FileRecords with plausible defaults."""
    def factory(file_id: str, **overrides) -> FileRecord:
        values = {
            "file_id": file_id,
            "file_name": f"{file_id}.mp4",
            "file_size": 1024,
            "mime_type": "video/mp4",
            "download_url": f"https://github.com/o/r/releases/download/{file_id}/{file_id}.mp4",
            "uploaded_at": "2024-01-01T00:00:00Z",
            "release_id": 1,
            "release_tag": file_id,
        }
        values.update(overrides)
        return FileRecord(**values)
    return factory


class FakeGitHub:
    """
    In-process stand-in for the releases API and the asset upload host.
    """

    def __init__(self):
        self.releases = []
        self.assets = []
        self.fail_uploads_with = None

    def __call__(self, request: httpx.Request) -> httpx.Response:
        if request.url.host == "uploads.github.com":
            return self.upload_asset(request)
        if request.method == "POST" and request.url.path.endswith("/releases"):
            return self.create_release(request)
        return httpx.Response(404, json={"message": "Not Found"})

    def create_release(self, request):
        payload = json.loads(request.content)
        release_id = len(self.releases) + 1
        release = {
            "id": release_id,
            "tag_name": payload["tag_name"],
            "upload_url": f"https://uploads.github.com/repos/octo/media/releases/{release_id}/assets{{?name,label}}",
            "html_url": f"https://github.com/octo/media/releases/tag/{payload['tag_name']}",
        }
        self.releases.append(release)
        return httpx.Response(201, json=release)

    def upload_asset(self, request):
        if self.fail_uploads_with:
            return httpx.Response(self.fail_uploads_with, text="upstream failure")
        name = request.url.params["name"]
        release_id = request.url.path.split("/")[-2]
        asset = {
            "id": 1000 + len(self.assets),
            "name": name,
            "size": len(request.content),
            "browser_download_url": f"https://github.com/octo/media/releases/download/r{release_id}/{name}",
        }
        self.assets.append((asset, request.content))
        return httpx.Response(201, json=asset)


@pytest.fixture
def fake_github():
    return FakeGitHub()


@pytest.fixture
def app_client(fake_github, content_store):
    """
    TestClient for the server app with an in-memory catalog and a fake
    GitHub behind the blob store. The lifespan is not run.
    """
    from server.main import app

    github = GitHubClient(
        token="ghp_testtoken",
        owner="octo",
        repo="media",
        api_url="https://api.github.com",
        transport=httpx.MockTransport(fake_github),
    )
    service_locator.set_content_store(content_store)
    service_locator.set_session_manager(ChunkSessionManager())
    service_locator.set_blob_store(BlobStoreAdapter(github))

    yield TestClient(app)

    service_locator.set_content_store(None)
    service_locator.set_session_manager(None)
    service_locator.set_blob_store(None)
