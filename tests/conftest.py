"""Shared test fixtures."""
import pytest
from unittest.mock import patch, MagicMock
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.database import Base


@pytest.fixture
def db_engine():
    """In-memory SQLite engine with schema created, one connection shared across threads."""
    engine = create_engine(
        'sqlite:///:memory:',
        connect_args={'check_same_thread': False},
        poolclass=StaticPool,
    )
    import app.models.lead
    import app.models.tech_analysis
    import app.models.lead_run
    import app.models.lead_event
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db_session(db_engine):
    """Session for assertions; store helpers get their own sessions on the same engine."""
    Session = sessionmaker(bind=db_engine)
    session = Session()
    yield session
    session.rollback()
    session.close()


@pytest.fixture(autouse=True)
def patch_get_session(db_engine):
    """Route all get_session() calls to fresh sessions on the test engine.

    Store helpers commit and close their own sessions, so each call gets a
    new one, exactly as in production.
    """
    Session = sessionmaker(bind=db_engine)
    with patch('app.database.get_session', side_effect=Session), \
            patch('app.services.db.get_session', side_effect=Session):
        yield Session


@pytest.fixture
def no_retry_backoff():
    """Retries without sleeping."""
    with patch('app.services.db.time.sleep') as sleep:
        yield sleep


@pytest.fixture
def mock_redis():
    """Mock Redis client. Returns a MagicMock with common Redis methods."""
    mock = MagicMock()
    mock.get.return_value = None
    mock.incr.return_value = 1
    mock.hgetall.return_value = {}
    with patch('app.extensions.redis_client', mock):
        yield mock


@pytest.fixture
def app(mock_redis):
    """Flask test app."""
    from app import create_app
    app = create_app()
    app.config['TESTING'] = True
    yield app


@pytest.fixture
def client(app):
    """Flask test client."""
    with app.test_client() as c:
        yield c


@pytest.fixture
def make_place():
    """Factory fixture: a places-crawler dataset item."""
    def _make(**overrides):
        item = {
            'placeId': 'ChIJ-place-001',
            'title': 'Bright Smile Family Dentistry',
            'address': '12 Main St, Springfield, IL 62701',
            'city': 'Springfield',
            'state': 'Illinois',
            'postalCode': '62701',
            'location': {'lat': 39.78, 'lng': -89.65},
            'phone': '+1 217-555-0100',
            'website': 'https://www.brightsmile.example/',
            'totalScore': 4.8,
            'rating': 4.8,
            'reviewsCount': 120,
            'categories': ['Dentist', 'Cosmetic dentist'],
        }
        item.update(overrides)
        return item
    return _make


@pytest.fixture
def site_text():
    """Website text hitting scheduling, reminders and imaging patterns."""
    return (
        'Welcome to Bright Smile. Book online today or call us. '
        'We send text reminders before every visit. '
        'Our office uses CEREC for same day crown treatment and 3D imaging.'
    )
