import pytest
from fastapi.testclient import TestClient

from showcase.auth.jwt_handler import TokenService
from showcase.auth.passwords import hash_password
from showcase.database import build_engine, build_session_factory, create_schema
from showcase.main import create_app
from showcase.models.project import STATUS_PUBLISHED, Project
from showcase.models.user import Role, User

TEST_SECRET = 'test-secret-key-that-is-long-enough-for-hs256'


@pytest.fixture
def tokens() -> TokenService:
    return TokenService(secret_key=TEST_SECRET, algorithm='HS256', expires_minutes=60)


@pytest.fixture
def showcase_db():
    engine = build_engine('sqlite://')
    create_schema(engine)
    db = build_session_factory(engine)()
    try:
        yield db
    finally:
        db.close()
        engine.dispose()


@pytest.fixture
def make_user(showcase_db):
    def _make_user(
        email: str = 'a@x.edu',
        name: str = 'Alice',
        password: str = 'secret1',
        role: Role = Role.USER,
    ) -> User:
        user = User(name=name, email=email, hashed_password=hash_password(password), role=role.value)
        showcase_db.add(user)
        showcase_db.commit()
        showcase_db.refresh(user)
        return user

    return _make_user


@pytest.fixture
def make_project(showcase_db):
    def _make_project(author: User, title: str = 'Demo', **fields) -> Project:
        values = {
            'description': 'A demo project',
            'technologies': ['Python'],
            'category': 'Web Development',
            'images': [],
            'status': STATUS_PUBLISHED,
            'likes': [],
            'comments': [],
        }
        values.update(fields)
        project = Project(title=title, author_id=author.id, **values)
        showcase_db.add(project)
        showcase_db.commit()
        showcase_db.refresh(project)
        return project

    return _make_project


@pytest.fixture
def client(tokens):
    app = create_app(database_url='sqlite://', token_service=tokens)
    with TestClient(app) as test_client:
        yield test_client
