import os

os.environ.setdefault('DATABASE_URL', 'sqlite:///:memory:')
os.environ.setdefault('JWT_SECRET_KEY', 'test-secret-key-with-at-least-32-bytes!')
os.environ.setdefault('BCRYPT_ROUNDS', '4')

import pytest  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from emargement.auth.jwt_handler import TokenService  # noqa: E402
from emargement.database import Base, create_store_engine  # noqa: E402
from emargement.models import attendance, training_session, user  # noqa: E402,F401

TEST_SECRET = 'test-secret-key-with-at-least-32-bytes!'


@pytest.fixture
def db_engine():
    engine = create_store_engine('sqlite://', poolclass=StaticPool)
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=db_engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def token_service() -> TokenService:
    return TokenService(TEST_SECRET)
