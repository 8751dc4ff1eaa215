import pytest

from campus_bins import create_app
from campus_bins.config import TestingConfig
from campus_bins.models import db
from campus_bins.seed import seed_demo_data


@pytest.fixture
def app():
    app = create_app(TestingConfig)
    with app.app_context():
        seed_demo_data(db.session)
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def session(app):
    return db.session
