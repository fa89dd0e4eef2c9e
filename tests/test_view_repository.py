"""Tests for views and groups."""

import asyncio

import pytest

from common.constants import VIEWS_PATH
from server.exceptions import GroupExistsError, MetadataStoreError
from server.repositories.view_repository import GROUP_KIND, VIEW_KIND, ViewRepository


def scripted_ids(*ids):
    remaining = list(ids)
    return lambda: remaining.pop(0)


class TestCreateView:

    @pytest.mark.asyncio
    async def test_creates_view_with_share_url(self, views, content_store):
        view = await views.create_view(["f_1", "f_2"], origin="https://share.example/")

        assert view.kind == VIEW_KIND
        assert len(view.id) == 6
        assert view.share_url == f"https://share.example/d/{view.id}"
        assert view.file_ids == ["f_1", "f_2"]

        stored = (await content_store.read(VIEWS_PATH)).data
        assert stored[0]["id"] == view.id
        assert stored[0]["fileIds"] == ["f_1", "f_2"]

    @pytest.mark.asyncio
    async def test_skips_taken_ids(self, content_store):
        views = ViewRepository(content_store, backoff_seconds=0, id_generator=scripted_ids("abc123", "abc123", "xyz789"))

        first = await views.create_view(["f_1"])
        second = await views.create_view(["f_2"])

        assert first.id == "abc123"
        assert second.id == "xyz789"

    @pytest.mark.asyncio
    async def test_gives_up_when_no_free_id(self, content_store):
        views = ViewRepository(content_store, backoff_seconds=0, id_generator=lambda: "same01")
        await views.create_view(["f_1"])

        with pytest.raises(MetadataStoreError):
            await views.create_view(["f_2"])

    @pytest.mark.asyncio
    async def test_password_hash_is_stored(self, views):
        view = await views.create_view(["f_1"], password_hash="deadbeef")

        fetched = await views.get(view.id)
        assert fetched.password_hash == "deadbeef"

    @pytest.mark.asyncio
    async def test_concurrent_views_are_all_kept(self, views):
        created = await asyncio.gather(*[views.create_view([f"f_{n}"]) for n in range(2)])

        listed = {view.id for view in await views.list_all()}
        assert {view.id for view in created} == listed


class TestCreateGroup:

    @pytest.mark.asyncio
    async def test_creates_group(self, views):
        group = await views.create_group("album-2024", ["f_1", "f_2"])

        assert group.kind == GROUP_KIND
        assert (await views.get("album-2024")).file_ids == ["f_1", "f_2"]

    @pytest.mark.asyncio
    async def test_duplicate_group_id(self, views):
        await views.create_group("album", ["f_1"])

        with pytest.raises(GroupExistsError):
            await views.create_group("album", ["f_2"])

    @pytest.mark.asyncio
    async def test_group_id_cannot_shadow_view(self, content_store):
        views = ViewRepository(content_store, backoff_seconds=0, id_generator=lambda: "taken1")
        await views.create_view(["f_1"])

        with pytest.raises(GroupExistsError):
            await views.create_group("taken1", ["f_2"])


class TestGet:

    @pytest.mark.asyncio
    async def test_unknown_id(self, views):
        assert await views.get("nope") is None

    @pytest.mark.asyncio
    async def test_ids_are_case_sensitive(self, views):
        await views.create_group("Album", ["f_1"])

        assert await views.get("album") is None
        assert await views.get("Album") is not None
