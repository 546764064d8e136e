import pytest
import pytest_asyncio

from stratacache.core.models.provider import KeyLayout, PerformanceMode
from stratacache.core.service.provider import StoreCacheProvider
from tests.fake.fake_store import FakeStore


@pytest.fixture
def store() -> FakeStore:
    return FakeStore()


@pytest.fixture(params=list(KeyLayout), ids=str)
def layout(request) -> KeyLayout:
    return request.param


@pytest.fixture(params=list(PerformanceMode), ids=str)
def mode(request) -> PerformanceMode:
    return request.param


@pytest_asyncio.fixture
async def provider(store, layout, mode) -> StoreCacheProvider:
    provider = StoreCacheProvider(store, layout=layout, performance_mode=mode)
    await provider.init()
    store.reset_calls()
    return provider
