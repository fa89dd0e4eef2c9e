"""Tests for the write paths of UploadService."""

import asyncio

import httpx
import pytest

from server.blob_store import BlobStoreAdapter
from server.exceptions import RecordExistsError
from server.github_client import GitHubClient
from server.services.upload_service import UploadService
from server.sessions import ChunkSessionManager

RELEASE_TARGET = "https://uploads.github.com/repos/octo/media/releases/2/assets{?name,label}"


@pytest.fixture
def service(fake_github, catalog):
    github = GitHubClient(
        token="ghp_testtoken",
        owner="octo",
        repo="media",
        api_url="https://api.github.com",
        transport=httpx.MockTransport(fake_github),
    )
    return UploadService(
        session_manager=ChunkSessionManager(),
        blob_store=BlobStoreAdapter(github),
        catalog=catalog,
    )


class TestCallerChosenIds:

    @pytest.mark.asyncio
    async def test_concurrent_uploads_with_same_id(self, service, catalog):
        results = await asyncio.gather(
            service.upload_single(b"AAAA", "a.bin", destination=RELEASE_TARGET, file_id="mine"),
            service.upload_single(b"BBBBBBBB", "b.bin", destination=RELEASE_TARGET, file_id="mine"),
            return_exceptions=True,
        )

        stored = [r for r in results if not isinstance(r, Exception)]
        failed = [r for r in results if isinstance(r, Exception)]
        assert len(stored) == 1
        assert len(failed) == 1
        assert isinstance(failed[0], RecordExistsError)

        records = await catalog.find_records(["mine"])
        assert [r.download_url for r in records] == [stored[0].record.download_url]

    @pytest.mark.asyncio
    async def test_sequential_reuse_is_rejected_before_upload(self, service, fake_github):
        await service.upload_single(b"first", "a.bin", destination=RELEASE_TARGET, file_id="mine")

        with pytest.raises(RecordExistsError):
            await service.upload_single(b"second", "b.bin", destination=RELEASE_TARGET, file_id="mine")
        assert len(fake_github.assets) == 1
