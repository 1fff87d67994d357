import os

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault('DATABASE_URL', 'sqlite://')

from office_hours.database import Base, init_db  # noqa: E402
from office_hours.services.portal import PortalService  # noqa: E402
from office_hours.stores.principal_store import SqlPrincipalStore  # noqa: E402
from office_hours.stores.record_store import SqlRecordStore  # noqa: E402

PASSWORD = 'secret-pass'


@pytest.fixture
def session_factory():
    engine = create_engine(
        'sqlite://',
        connect_args={'check_same_thread': False},
        poolclass=StaticPool,
    )
    init_db(bind=engine)
    testing_session_local = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    try:
        yield testing_session_local
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def record_store(session_factory):
    return SqlRecordStore(session_factory)


@pytest.fixture
def principal_store(session_factory):
    return SqlPrincipalStore(session_factory)


@pytest.fixture
def service(principal_store, record_store):
    return PortalService(principal_store, record_store)


@pytest.fixture
def admin(service):
    return service.register('admin@school.edu', PASSWORD, 'Ada Admin', 'admin')


@pytest.fixture
def teacher(service):
    return service.register(
        'turing@school.edu',
        PASSWORD,
        'Alan Turing',
        'teacher',
        department='CS',
        subject='Algorithms',
    )


@pytest.fixture
def student(service, admin):
    registered = service.register('grace@school.edu', PASSWORD, 'Grace Hopper', 'student')
    return service.approve_student(admin, registered.id)
