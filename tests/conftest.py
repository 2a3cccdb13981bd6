import httpx
import pytest
from fastapi.testclient import TestClient

from linkmanager.config import Settings
from linkmanager.core.store import LinkStore
from linkmanager.database import create_db_engine, create_session_factory, init_database
from linkmanager.main import create_app
from linkmanager.services.metadata import MetadataExtractor

EXAMPLE_PAGE = """
<html>
  <head>
    <title>Example Page</title>
    <meta name="description" content="An example page">
  </head>
  <body><h1>Hello</h1></body>
</html>
"""


class FakeWeb:
    """Serves canned pages to the extractor and records every request"""

    def __init__(self):
        self.pages = {"https://example.com/article": EXAMPLE_PAGE}
        self.requests = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.host == "timeout.example.com":
            raise httpx.ConnectTimeout("timed out", request=request)
        page = self.pages.get(str(request.url))
        if page is None:
            return httpx.Response(404, text="not found")
        return httpx.Response(200, html=page)

    def extractor(self) -> MetadataExtractor:
        return MetadataExtractor(transport=httpx.MockTransport(self.handler))


@pytest.fixture
def fake_web():
    return FakeWeb()


@pytest.fixture
def store(tmp_path):
    engine = create_db_engine(f"sqlite:///{tmp_path / 'store.db'}")
    init_database(engine)
    db = create_session_factory(engine)()
    try:
        yield LinkStore(db)
    finally:
        db.close()
        engine.dispose()


def make_client(tmp_path, fake_web, seed):
    settings = Settings(
        DATABASE_URL=f"sqlite:///{tmp_path / 'api.db'}",
        SEED_EXAMPLES=seed
    )
    return TestClient(create_app(settings, extractor=fake_web.extractor()))


@pytest.fixture
def client(tmp_path, fake_web):
    with make_client(tmp_path, fake_web, seed=True) as test_client:
        yield test_client


@pytest.fixture
def empty_client(tmp_path, fake_web):
    with make_client(tmp_path, fake_web, seed=False) as test_client:
        yield test_client
