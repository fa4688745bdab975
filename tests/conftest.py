import pytest
from sqlalchemy.pool import StaticPool

from authsome_otp.database import create_db_engine, create_session_factory, init_db
from authsome_otp.models.memory_store import InMemoryOtpStore
from authsome_otp.models.sql_store import SqlOtpStore
from authsome_otp.services.otp import OtpService


class FakeClock:
    def __init__(self, now: int = 1_700_000_000) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, seconds: int) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def sql_engine():
    engine = create_db_engine("sqlite://", poolclass=StaticPool)
    init_db(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def sql_store(sql_engine):
    return SqlOtpStore(create_session_factory(sql_engine))


@pytest.fixture
def memory_store():
    return InMemoryOtpStore()


@pytest.fixture(params=["memory", "sql"])
def store(request):
    return request.getfixturevalue(f"{request.param}_store")


@pytest.fixture
def service(store, clock):
    return OtpService(store, default_ttl_seconds=300, clock=clock)
