import pytest

from ppe_tracker.extensions import db
from ppe_tracker.models import LoanTransaction, PpeItem
from ppe_tracker.services import loan_service
from ppe_tracker.services.errors import (
    InvalidInputError,
    InvalidStateError,
    NotFoundError,
    OutOfStockError,
)


def _item(item_id):
    db.session.expire_all()
    return db.session.get(PpeItem, item_id)


class TestBorrowItem:
    def test_borrow_moves_one_unit_to_loan(self, make_item):
        make_item(1, stock=5)

        result = loan_service.borrow_item(
            item_id=1,
            borrower_name="Malee",
            employee_id="E-042",
            department="Maintenance",
            due_date="2026-11-01",
        )

        assert result["updatedItem"] == {"id": 1, "stock": 4, "onLoanQuantity": 1}
        loan = result["newLoan"]
        assert loan["loanId"] == 1
        assert loan["status"] == "on_loan"
        assert loan["dueDate"] == "2026-11-01T00:00:00Z"
        assert loan["returnDate"] is None

    def test_loan_ids_continue_after_existing_rows(self, make_item, make_loan):
        make_item(1, stock=5)
        make_loan(7, 1)

        result = loan_service.borrow_item(item_id=1, borrower_name="Malee")

        assert result["newLoan"]["loanId"] == 8

    def test_out_of_stock_changes_nothing(self, make_item):
        make_item(1, stock=0)

        with pytest.raises(OutOfStockError):
            loan_service.borrow_item(item_id=1, borrower_name="Malee")
        db.session.rollback()

        item = _item(1)
        assert (item.stock, item.on_loan_quantity) == (0, 0)
        assert db.session.query(LoanTransaction).count() == 0

    def test_unknown_item(self, db_session):
        with pytest.raises(NotFoundError):
            loan_service.borrow_item(item_id=99, borrower_name="Malee")

    def test_borrower_required(self, make_item):
        make_item(1, stock=5)
        with pytest.raises(InvalidInputError):
            loan_service.borrow_item(item_id=1, borrower_name="")

    def test_bad_due_date(self, make_item):
        make_item(1, stock=5)
        with pytest.raises(InvalidInputError, match="dueDate"):
            loan_service.borrow_item(item_id=1, borrower_name="Malee", due_date="next week")

    def test_last_unit_can_be_borrowed_once(self, make_item):
        make_item(1, stock=1)
        loan_service.borrow_item(item_id=1, borrower_name="Malee")

        with pytest.raises(OutOfStockError):
            loan_service.borrow_item(item_id=1, borrower_name="Somchai")
        db.session.rollback()

        item = _item(1)
        assert (item.stock, item.on_loan_quantity) == (0, 1)


class TestReturnItem:
    def test_return_moves_unit_back(self, make_item, make_loan):
        make_item(1, stock=7, on_loan=1)
        make_loan(5, 1)

        result = loan_service.return_item(5)

        assert result == {
            "returnedLoanId": 5,
            "updatedItem": {"id": 1, "stock": 8, "onLoanQuantity": 0},
        }
        db.session.expire_all()
        loan = db.session.get(LoanTransaction, 5)
        assert loan.status == "returned"
        assert loan.return_date is not None

    def test_second_return_fails(self, make_item, make_loan):
        make_item(1, stock=7, on_loan=1)
        make_loan(5, 1)
        loan_service.return_item(5)

        with pytest.raises(InvalidStateError):
            loan_service.return_item(5)
        db.session.rollback()

        item = _item(1)
        assert (item.stock, item.on_loan_quantity) == (8, 0)

    def test_unknown_loan(self, db_session):
        with pytest.raises(NotFoundError):
            loan_service.return_item(404)

    def test_loan_id_as_string(self, make_item, make_loan):
        make_item(1, stock=0, on_loan=1)
        make_loan(3, 1)

        result = loan_service.return_item("3")

        assert result["returnedLoanId"] == 3

    def test_borrow_then_return_restores_counts(self, make_item):
        make_item(1, stock=3)
        loans = [loan_service.borrow_item(item_id=1, borrower_name=f"B{n}") for n in range(3)]

        item = _item(1)
        assert (item.stock, item.on_loan_quantity) == (0, 3)

        for result in loans:
            loan_service.return_item(result["newLoan"]["loanId"])

        item = _item(1)
        assert (item.stock, item.on_loan_quantity) == (3, 0)
