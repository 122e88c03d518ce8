import pytest
from fastapi.testclient import TestClient

from portfolio_service.app import create_app
from portfolio_service.shared.config import Settings
from portfolio_service.shared.contact.database import PortfolioMessage


@pytest.fixture
def valid_submission():
    return {
        "name": "Jo",
        "number": "1234567890",
        "email": "a@b.com",
        "message": "Hello there!",
    }


@pytest.fixture
def settings(tmp_path):
    """Settings pointing at a throwaway SQLite database."""
    return Settings(
        database_url=f"sqlite:///{tmp_path / 'portfolio.db'}",
        db_retry_delay_seconds=60,
    )


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def stored_count(app):
    """Callable returning the number of rows in the portfolio table."""
    def _count():
        manager = app.state.connection_manager
        with manager.SessionLocal() as db:
            return db.query(PortfolioMessage).count()
    return _count


@pytest.fixture
def database_down(app, monkeypatch):
    """Make the connection manager report that the database is unreachable."""
    monkeypatch.setattr(app.state.connection_manager, "is_ready", lambda: False)
