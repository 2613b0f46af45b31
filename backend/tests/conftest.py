import os

os.environ["ENV"] = "test"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["TZ"] = "Asia/Tokyo"
os.environ["SEED_DEMO"] = "false"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from shiptrack.main import app as fastapi_app
from shiptrack.core.deps import get_db
from shiptrack.core.security import create_access_token
from shiptrack.db.base import Base
from shiptrack.db.models import Department, Item, User, Role
from shiptrack.services.access import UserContext


@pytest.fixture()
def engine():
    eng = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)

    @event.listens_for(eng, "connect")
    def _fk(dbapi_conn, _record):
        cur = dbapi_conn.cursor()
        cur.execute("PRAGMA foreign_keys=ON")
        cur.close()

    Base.metadata.create_all(eng)
    yield eng
    eng.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@pytest.fixture()
def db(session_factory):
    s = session_factory()
    try:
        yield s
    finally:
        s.close()


@pytest.fixture()
def world(db):
    """Two departments with a user each, one management department, a few items."""
    tokyo = Department(name="Tokyo", code="TKY")
    osaka = Department(name="Osaka", code="OSK")
    hq = Department(name="HQ", code="HQ", is_management=True)
    db.add_all([tokyo, osaka, hq])
    db.flush()

    tokyo_user = User(email="taro@example.com", name="Taro", department_id=tokyo.id, role=Role.department.value)
    osaka_user = User(email="hanako@example.com", name="Hanako", department_id=osaka.id, role=Role.department.value)
    manager = User(email="boss@example.com", name="Boss", department_id=hq.id, role=Role.management.value)
    db.add_all([tokyo_user, osaka_user, manager])
    db.flush()

    desk = Item(name="Desk", unit="pcs", department_id=tokyo.id)
    chair = Item(name="Chair", unit="pcs", department_id=osaka.id)
    db.add_all([desk, chair])
    db.commit()
    return {
        "tokyo": tokyo,
        "osaka": osaka,
        "hq": hq,
        "tokyo_user": tokyo_user,
        "osaka_user": osaka_user,
        "manager": manager,
        "desk": desk,
        "chair": chair,
    }


def ctx_for(user: User) -> UserContext:
    return UserContext(user_id=user.id, role=Role(user.role), department_id=user.department_id)


@pytest.fixture()
def client(session_factory):
    def _override_get_db():
        s = session_factory()
        try:
            yield s
        finally:
            s.close()

    fastapi_app.dependency_overrides[get_db] = _override_get_db
    with TestClient(fastapi_app) as c:
        yield c
    fastapi_app.dependency_overrides.clear()


def auth_headers(user: User) -> dict:
    return {"Authorization": f"Bearer {create_access_token(sub=str(user.id), role=user.role)}"}
