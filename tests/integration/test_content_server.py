"""
Integration tests for the aiohttp content server together with the
client-side fetcher and preferences loader.
"""

import pathlib

import pytest
import pytest_asyncio
from aiohttp.test_utils import TestClient, TestServer

from hotlink.client.modules import ModuleFetcher, ModuleFetchError
from hotlink.client.preferences import Preferences, fetch_preferences
from hotlink.env import Env
from hotlink.server.http import ContentServer
from hotlink.server.responder import PreferencesResponder
from tests.unit.mocks import RecordingLogger


@pytest.fixture
def project(tmp_path: pathlib.Path) -> pathlib.Path:
    resources = tmp_path / "Resources"
    (resources / "lib").mkdir(parents=True)
    (resources / "app.py").write_text("title = 'demo'\n")
    (resources / "lib" / "util.py").write_text("def double(x):\n    return x * 2\n")
    return tmp_path


class ReloadRecorder:
    def __init__(self) -> None:
        self.calls = 0

    async def __call__(self) -> None:
        self.calls += 1


@pytest.fixture
def reload_recorder() -> ReloadRecorder:
    return ReloadRecorder()


@pytest_asyncio.fixture
async def server(project: pathlib.Path, reload_recorder: ReloadRecorder):
    logger = RecordingLogger()
    content_server = ContentServer(
        "127.0.0.1",
        0,
        str(project),
        preferences=PreferencesResponder(debug_mode=True, log_level="warn"),
        on_reload=reload_recorder,
        logger=logger,
    )

    test_server = TestServer(content_server.app, host="127.0.0.1")
    await test_server.start_server()

    yield test_server

    await test_server.close()


class TestContentServer:
    @pytest.mark.asyncio
    async def test_serves_transformed_entry_module(self, server: TestServer):
        async with TestClient(server) as client:
            response = await client.get("/app.py")
            body = await response.text()

        assert response.status == 200
        assert "__global__.title = title" in body

    @pytest.mark.asyncio
    async def test_unknown_path_is_404(self, server: TestServer):
        async with TestClient(server) as client:
            response = await client.get("/does-not-exist.js")
            body = await response.text()

        assert response.status == 404
        assert body == "404 not found: /does-not-exist.js"

    @pytest.mark.asyncio
    async def test_dashboard_served(self, server: TestServer):
        async with TestClient(server) as client:
            index = await client.get("/")
            bundle = await client.get("/main.bundle.js")

        assert index.status == 200
        assert index.content_type == "text/html"
        assert bundle.status == 200
        assert bundle.content_type == "text/javascript"

    @pytest.mark.asyncio
    async def test_reload_endpoint(
        self,
        server: TestServer,
        reload_recorder: ReloadRecorder,
    ):
        async with TestClient(server) as client:
            response = await client.post("/reload")

        assert response.status == 202
        assert reload_recorder.calls == 1


class TestModuleFetcher:
    @pytest.mark.asyncio
    async def test_fetch_dotted_module(self, server: TestServer):
        fetcher = ModuleFetcher(str(server.make_url("/")), env=Env())

        try:
            source = await fetcher.fetch("lib.util")

        finally:
            await fetcher.close()

        assert "def double" in source
        assert fetcher.fetch_count == 1

    @pytest.mark.asyncio
    async def test_missing_module_raises(self, server: TestServer):
        fetcher = ModuleFetcher(str(server.make_url("/")), env=Env())

        try:
            with pytest.raises(ModuleFetchError) as raised:
                await fetcher.fetch("nowhere")

        finally:
            await fetcher.close()

        assert raised.value.status == 404
        assert raised.value.url.endswith("/nowhere.py")

    @pytest.mark.asyncio
    async def test_unreachable_server_raises(self, unused_port: int):
        fetcher = ModuleFetcher(f"http://127.0.0.1:{unused_port}", env=Env())

        try:
            with pytest.raises(ModuleFetchError):
                await fetcher.fetch("app")

        finally:
            await fetcher.close()


class TestFetchPreferences:
    @pytest.mark.asyncio
    async def test_loads_preferences(self, server: TestServer):
        preferences = await fetch_preferences(
            server.host,
            server.port,
            timeout=2,
            logger=RecordingLogger(),
        )

        assert preferences == Preferences(debug_mode=True, log_level="warn")

    @pytest.mark.asyncio
    async def test_failure_returns_defaults(self, unused_port: int):
        logger = RecordingLogger()

        preferences = await fetch_preferences(
            "127.0.0.1",
            unused_port,
            timeout=0.5,
            logger=logger,
        )

        assert preferences == Preferences()
        assert len(logger.entries) == 1
