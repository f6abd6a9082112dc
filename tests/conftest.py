import os

# Must be set before yogastudio.config is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET"] = "test-secret-for-pytest"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["CACHE_ENABLED"] = "false"
os.environ["RESEND_API_KEY"] = ""
os.environ["REDIS_URL"] = ""

import time  # noqa: E402
import uuid  # noqa: E402
from datetime import timedelta  # noqa: E402
from decimal import Decimal  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from jose import jwt  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402

from yogastudio.config import JWT_ALGORITHM, JWT_AUDIENCE, JWT_SECRET  # noqa: E402
from yogastudio.database import Base, create_db_engine, get_db  # noqa: E402
from yogastudio.main import app  # noqa: E402
from yogastudio.models import (  # noqa: E402
    ClassType,
    Instructor,
    Profile,
    ScheduledClass,
    User,
    UserRole,
)
from yogastudio.seed import ensure_role, seed_default_roles  # noqa: E402
from yogastudio.shared.dates import utcnow  # noqa: E402


@pytest.fixture
def db_session():
    engine = create_db_engine("sqlite://")
    Base.metadata.create_all(bind=engine)
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()
    seed_default_roles(session)
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def client(db_session):
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def make_token():
    def _make_token(
        user_id=None,
        email="member@example.com",
        full_name=None,
        expires_in=3600,
        audience=JWT_AUDIENCE,
        secret=JWT_SECRET,
    ):
        now = int(time.time())
        claims = {
            "sub": user_id or str(uuid.uuid4()),
            "aud": audience,
            "iat": now,
            "exp": now + expires_in,
        }
        if email:
            claims["email"] = email
        if full_name:
            claims["user_metadata"] = {"full_name": full_name}
        return jwt.encode(claims, secret, algorithm=JWT_ALGORITHM)

    return _make_token


@pytest.fixture
def create_user(db_session):
    def _create_user(email, roles=("user",), full_name=None):
        user = User(id=str(uuid.uuid4()), email=email)
        db_session.add(user)
        db_session.add(Profile(user_id=user.id, email=email, full_name=full_name or email))
        for name in roles:
            db_session.add(UserRole(user_id=user.id, role_id=ensure_role(db_session, name).id))
        db_session.commit()
        db_session.refresh(user)
        return user

    return _create_user


@pytest.fixture
def auth_headers(make_token):
    def _auth_headers(user):
        return {"Authorization": f"Bearer {make_token(user_id=user.id, email=user.email)}"}

    return _auth_headers


@pytest.fixture
def member(create_user):
    return create_user("member@example.com", full_name="Maya Member")


@pytest.fixture
def admin(create_user):
    return create_user("admin@example.com", roles=("user", "admin"), full_name="Ada Admin")


@pytest.fixture
def curator(create_user):
    return create_user("curator@example.com", roles=("user", "mantra_curator"), full_name="Cora Curator")


@pytest.fixture
def member_headers(member, auth_headers):
    return auth_headers(member)


@pytest.fixture
def admin_headers(admin, auth_headers):
    return auth_headers(admin)


@pytest.fixture
def curator_headers(curator, auth_headers):
    return auth_headers(curator)


@pytest.fixture
def class_type(db_session):
    class_type = ClassType(
        name="Vinyasa Flow",
        difficulty_level="intermediate",
        price=Decimal("30.00"),
        duration_minutes=75,
        max_participants=20,
    )
    db_session.add(class_type)
    db_session.commit()
    db_session.refresh(class_type)
    return class_type


@pytest.fixture
def instructor(db_session):
    instructor = Instructor(name="Sarah Johnson", email="sarah@example.com", specialties=["Hatha"])
    db_session.add(instructor)
    db_session.commit()
    db_session.refresh(instructor)
    return instructor


@pytest.fixture
def make_class(db_session, class_type, instructor):
    def _make_class(max_participants=2, starts_in=timedelta(days=2), status="scheduled"):
        start = utcnow() + starts_in
        scheduled = ScheduledClass(
            class_type_id=class_type.id,
            instructor_id=instructor.id,
            start_time=start,
            end_time=start + timedelta(minutes=75),
            max_participants=max_participants,
            current_participants=0,
            status=status,
        )
        db_session.add(scheduled)
        db_session.commit()
        db_session.refresh(scheduled)
        return scheduled

    return _make_class


@pytest.fixture
def booking_payload():
    def _booking_payload(email="guest@example.com", first_name="Guest", last_name="Yogi"):
        return {
            "first_name": first_name,
            "last_name": last_name,
            "email": email,
            "phone": "+1 555 123 4567",
        }

    return _booking_payload
