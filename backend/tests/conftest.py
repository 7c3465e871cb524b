"""
Pytest fixtures for PPE tracker backend tests.

In-memory SQLite app with a per-test clean database. A recording notifier
replaces the LINE client.
"""

import base64

import pytest

from ppe_tracker import create_app
from ppe_tracker.extensions import db
from ppe_tracker.models import PpeItem, LoanTransaction
from ppe_tracker.models.loans import LOAN_ON_LOAN
from ppe_tracker.services import voucher_service
from ppe_tracker.services.notification_service import EXTENSION_KEY
from ppe_tracker.time_utils import utcnow


ADMIN_LINE_USER_ID = "U-admin-0001"


class RecordingNotifier:
    """Stands in for LineNotifier; records every push."""

    def __init__(self, result=True, error=None):
        self.result = result
        self.error = error
        self.calls = []
        self.is_configured = True

    def push(self, recipient_id, message):
        self.calls.append((recipient_id, message))
        if self.error is not None:
            raise self.error
        return self.result


@pytest.fixture(scope='session')
def app(tmp_path_factory):
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'LINE_CHANNEL_ACCESS_TOKEN': 'test-channel-token',
        'ADMIN_LINE_USER_ID': ADMIN_LINE_USER_ID,
        'ADMIN_USERNAME': 'admin',
        'ADMIN_PASSWORD_BASE64': base64.b64encode(b'S3cret!').decode('ascii'),
        'DOCUMENTS_DIR': str(tmp_path_factory.mktemp('documents')),
        'ALLOW_NEGATIVE_STOCK': False,
    })

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Create fresh database for each test."""
    with app.app_context():
        # Clear all data but keep schema
        meta = db.metadata
        for table in reversed(meta.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()

        yield db.session

        # Cleanup after test
        db.session.rollback()


@pytest.fixture(scope='function')
def notifier(app):
    """Replace the LINE client with a recorder for the duration of a test."""
    original = app.extensions[EXTENSION_KEY]
    recorder = RecordingNotifier()
    app.extensions[EXTENSION_KEY] = recorder
    yield recorder
    app.extensions[EXTENSION_KEY] = original


@pytest.fixture(scope='function')
def make_item(db_session):
    """Factory for items with explicit ids, as in the workflow scenarios."""
    def _make(id, *, stock=0, on_loan=0, reorder_point=0, price=0, name=None, code=None):
        item = PpeItem(
            id=id,
            code=code or f"PPE-{id:03d}",
            name=name or f"Item {id}",
            category="Hand protection",
            unit="pair",
            reorder_point=reorder_point,
            stock=stock,
            on_loan_quantity=on_loan,
            price=price,
            image_url="",
        )
        db_session.add(item)
        db_session.commit()
        return item
    return _make


@pytest.fixture(scope='function')
def make_voucher(db_session):
    """Factory for pending vouchers created through the service."""
    def _make(lines, *, user="Somchai", department="Production"):
        return voucher_service.create_voucher(user=user, department=department, lines=lines)
    return _make


@pytest.fixture(scope='function')
def make_loan(db_session):
    def _make(loan_id, item_id, *, status=LOAN_ON_LOAN, borrower="Malee", due_date=None):
        loan = LoanTransaction(
            loan_id=loan_id,
            item_id=item_id,
            borrower_name=borrower,
            borrow_date=utcnow(),
            due_date=due_date,
            status=status,
        )
        db_session.add(loan)
        db_session.commit()
        return loan
    return _make
