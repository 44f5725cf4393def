import pytest
import os
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Set env before importing app components
os.environ["APP_ENV"] = "testing"
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["RATE_LIMIT_PER_MINUTE"] = "1000"

from marketplace.database import Base, get_db
from marketplace.main import app
from fastapi.testclient import TestClient
from tests.payloads import LANDING_PAGE_JOB

# SQLite in-memory database configuration
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

TEST_PASSWORD = "Password123!"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

@pytest.fixture(scope="session", autouse=True)
def setup_database():
    """Create tables once for the whole test session."""
    import marketplace.models  # noqa: F401
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)

@pytest.fixture(scope="session")
def password_hash():
    """bcrypt is slow on purpose; hash the shared test password once."""
    from marketplace.core.security import get_password_hash
    return get_password_hash(TEST_PASSWORD)

@pytest.fixture(scope="function")
def db_session():
    """Get a clean database session for each test function with rollback safety."""
    connection = engine.connect()
    transaction = connection.begin()
    # Use sessionmaker with the active connection
    session = TestingSessionLocal(bind=connection)

    yield session

    session.close()
    transaction.rollback()
    connection.close()

@pytest.fixture(scope="function")
def make_user(db_session, password_hash):
    """Factory fixture: create a user with the given role and skills."""
    from marketplace.models.user import User, UserRole

    def _make_user(username, role=UserRole.FREELANCER, skills=None):
        user = User(
            name=username.title(),
            username=username,
            email=f"{username}@example.com",
            hashed_password=password_hash,
            role=role,
            skills=skills or [],
            is_active=True,
        )
        db_session.add(user)
        db_session.commit()
        return user
    return _make_user

@pytest.fixture(scope="function")
def employer(make_user):
    from marketplace.models.user import UserRole
    return make_user("acme", role=UserRole.EMPLOYER)

@pytest.fixture(scope="function")
def freelancer(make_user):
    from marketplace.models.user import UserRole
    return make_user("alice", role=UserRole.FREELANCER, skills=["HTML", "CSS", "React"])

@pytest.fixture(scope="function")
def other_freelancer(make_user):
    from marketplace.models.user import UserRole
    return make_user("bob", role=UserRole.FREELANCER, skills=["Python"])

@pytest.fixture(scope="function")
def hybrid(make_user):
    from marketplace.models.user import UserRole
    return make_user("hana", role=UserRole.HYBRID, skills=["css"])

@pytest.fixture(scope="function")
def get_token():
    """Helper fixture to create access tokens."""
    from marketplace.services.auth import issue_token
    return issue_token

@pytest.fixture(scope="function")
def auth_headers(get_token):
    def _auth_headers(user):
        return {"Authorization": f"Bearer {get_token(user)}"}
    return _auth_headers

@pytest.fixture(scope="function")
def client(db_session):
    """Get a TestClient that uses the test database session via dependency override."""
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()

@pytest.fixture(scope="function")
def open_job(client, employer, auth_headers):
    """The landing-page job, posted through the API."""
    response = client.post("/api/jobs/create", json=LANDING_PAGE_JOB, headers=auth_headers(employer))
    assert response.status_code == 201, response.text
    return response.json()
