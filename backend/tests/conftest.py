"""
Test configuration and shared fixtures for the speech therapy backend suite.

Uses an in-memory SQLite database with transaction-based isolation.
Each test gets a clean database state via automatic transaction rollback.
"""

import itertools
import os

# Must be set before any application module reads the configuration
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["SMTP_HOST"] = ""

import pytest
from typing import Any, Dict, Generator, Optional

from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

from core.database import Base, get_db
from models import ActorKind, ActorRole, Admin, Center, Child, Parent, Specialist
from services import ActorService, CenterService, ChildService, LinkGraph
from services.jwt_service import jwt_service


DEFAULT_PASSWORD = "secret123"


@pytest.fixture(scope="session")
def db_engine():
    """
    Create a database engine for the test session.

    One in-memory database shared through a single connection (StaticPool) so
    the TestClient's worker threads see the same data.
    """
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False,
    )

    # pysqlite's own transaction handling breaks SAVEPOINT; let SQLAlchemy emit BEGIN
    @event.listens_for(engine, "connect")
    def _disable_pysqlite_transactions(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _emit_begin(conn):
        conn.exec_driver_sql("BEGIN")

    Base.metadata.create_all(bind=engine)

    yield engine

    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db_session(db_engine) -> Generator[Session, None, None]:
    """
    Provide a database session for a test with automatic rollback.

    The session runs inside an outer transaction and turns every commit or
    rollback of application code into a savepoint, so nothing a test writes
    survives it.
    """
    connection = db_engine.connect()
    transaction = connection.begin()

    session = Session(
        bind=connection,
        join_transaction_mode="create_savepoint",
        expire_on_commit=False,
    )

    yield session

    session.close()
    transaction.rollback()
    connection.close()


@pytest.fixture
def client(db_session):
    from main import app

    def override_get_db():
        return db_session
    app.dependency_overrides[get_db] = override_get_db
    client = TestClient(app)
    yield client
    app.dependency_overrides.pop(get_db, None)


class Factory:
    """Builds actors, centers and children through the real services."""

    def __init__(self, db: Session):
        self.db = db
        self._seq = itertools.count(1)

    def _email(self, prefix: str) -> str:
        return f"{prefix}{next(self._seq)}@example.com"

    def parent(self, name: str = "Parent", email: Optional[str] = None, verified: bool = True) -> Parent:
        return ActorService.create_actor(self.db, ActorKind.PARENT, {  # type: ignore[return-value]
            "name": name,
            "email": email or self._email("parent"),
            "password": DEFAULT_PASSWORD,
            "email_verified": verified,
        })

    def specialist(self, name: str = "Specialist", center: Optional[Center] = None,
                   email: Optional[str] = None) -> Specialist:
        return ActorService.create_actor(self.db, ActorKind.SPECIALIST, {  # type: ignore[return-value]
            "name": name,
            "email": email or self._email("specialist"),
            "password": DEFAULT_PASSWORD,
            "email_verified": True,
            "center_id": center.id if center else None,
        })

    def admin(self, name: str = "Admin", role: ActorRole = ActorRole.ADMIN) -> Admin:
        return ActorService.create_actor(self.db, ActorKind.ADMIN, {  # type: ignore[return-value]
            "name": name,
            "email": self._email(role.value),
            "password": DEFAULT_PASSWORD,
            "role": role.value,
            "email_verified": True,
        })

    def center(self, admin: Optional[Admin] = None, name: str = "مركز النطق") -> Center:
        admin = admin or self.admin()
        center = CenterService.provision_center(self.db, admin.id, {"name": name})
        self.db.refresh(admin)
        return center

    def child(self, parent: Parent, **fields: Any) -> Child:
        values: Dict[str, Any] = {"name": "Salma", "age": 5, "gender": "female"}
        values.update(fields)
        return ChildService.create_child(self.db, parent, values)

    def link(self, parent: Parent, specialist: Specialist) -> None:
        LinkGraph.link_parent_to_specialist(self.db, parent, specialist)

    def headers(self, actor) -> Dict[str, str]:
        return {"Authorization": f"Bearer {jwt_service.issue_token(actor.id, actor.role)}"}


@pytest.fixture
def make(db_session) -> Factory:
    return Factory(db_session)


@pytest.fixture
def center_setup(make):
    """A center with its admin, one member specialist and one outside specialist."""
    admin = make.admin()
    center = make.center(admin)
    specialist = make.specialist(center=center)
    outsider = make.specialist(name="Outsider")
    return admin, center, specialist, outsider
