import pytest
from fastapi.testclient import TestClient

from daycare.services.session import DailySession, SessionRegistry
from tests.helpers import FakeClock, at, attendance_doc, make_store, roster


@pytest.fixture
def clock():
    return FakeClock(at(9, 30))


@pytest.fixture
def store():
    return make_store(
        children=roster("Ana", "Ben", "Cleo"),
        attendance=[attendance_doc({"Ana": ("present", "09:15"), "Ben": ("absent", "09:20")})],
    )


@pytest.fixture
def session(store, clock):
    return DailySession(store, clock=clock)


@pytest.fixture
def client(store, clock):
    from daycare.main import app

    app.state.store = store
    app.state.sessions = SessionRegistry(store, clock=clock)
    return TestClient(app)
