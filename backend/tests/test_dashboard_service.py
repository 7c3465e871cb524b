import json
import unittest
from datetime import datetime

from ppe_tracker.services import dashboard_service, loan_service, voucher_service
from ppe_tracker.services.dashboard_service import (
    loan_status_summary,
    low_stock_items,
    overdue_loans,
    recent_activities,
    top_issued_items,
    total_stock_value,
)


ITEMS = [
    {"id": 1, "name": "Nitrile gloves", "stock": 10, "price": 12.5, "reorderPoint": 5},
    {"id": 2, "name": "Safety glasses", "stock": 3, "price": 80, "reorderPoint": 5},
    {"id": 3, "name": "Hard hat", "stock": 0, "price": 250, "reorderPoint": 0},
    {"id": 4, "name": "Ear plugs", "stock": 1, "price": 2, "reorderPoint": 2},
]


def _voucher(id, status, lines, timestamp=None, user="Somchai"):
    return {
        "id": id,
        "status": status,
        "itemsJson": lines,
        "timestamp": timestamp,
        "user": user,
    }


class DashboardMetricsTests(unittest.TestCase):
    def test_total_stock_value(self):
        self.assertEqual(total_stock_value(ITEMS), 10 * 12.5 + 3 * 80 + 0 + 1 * 2)

    def test_total_stock_value_tolerates_missing_numbers(self):
        items = [{"id": 1, "stock": None, "price": 5}, {"id": 2, "stock": "4", "price": ""}]
        self.assertEqual(total_stock_value(items), 0)

    def test_top_issued_sums_issued_vouchers_only(self):
        vouchers = [
            _voucher(1, "approved", [{"itemId": 1, "quantity": 3}]),
            _voucher(2, "partially_approved", [{"itemId": 1, "quantity": 5}]),
            _voucher(3, "pending", [{"itemId": 2, "quantity": 50}]),
            _voucher(4, "rejected", [{"itemId": 2, "quantity": 50}]),
        ]

        top = top_issued_items(ITEMS, vouchers, 5)

        self.assertEqual(top, [{"itemId": 1, "itemName": "Nitrile gloves", "totalQuantity": 8}])

    def test_top_issued_ties_keep_first_seen_order(self):
        vouchers = [
            _voucher(1, "approved", [{"itemId": 2, "quantity": 4}, {"itemId": 1, "quantity": 4}]),
            _voucher(2, "approved", [{"itemId": 4, "quantity": 9}]),
        ]

        top = top_issued_items(ITEMS, vouchers, 5)

        self.assertEqual([row["itemId"] for row in top], [4, 2, 1])

    def test_top_issued_truncates_to_n(self):
        vouchers = [
            _voucher(1, "approved", [{"itemId": i, "quantity": i} for i in (1, 2, 3, 4)]),
        ]
        top = top_issued_items(ITEMS, vouchers, 2)
        self.assertEqual([row["itemId"] for row in top], [4, 3])

    def test_top_issued_reads_json_string_lines_and_unknown_items(self):
        vouchers = [
            _voucher(1, "approved", json.dumps([{"itemId": 99, "quantity": 2}])),
            _voucher(2, "approved", "not json"),
        ]

        top = top_issued_items(ITEMS, vouchers, 5)

        self.assertEqual(top, [{"itemId": 99, "itemName": "Unknown", "totalQuantity": 2}])

    def test_loan_status_summary(self):
        loans = [
            {"status": "on_loan"},
            {"status": " on_loan "},
            {"status": "returned"},
            {"status": "lost"},
        ]
        self.assertEqual(loan_status_summary(loans), {"onLoan": 2, "returned": 1})

    def test_recent_activities_newest_first_with_returns(self):
        vouchers = [_voucher(1, "approved", [], "2026-10-01T08:00:00Z")]
        loans = [{
            "loanId": 3,
            "itemId": 2,
            "borrowerName": "Malee",
            "borrowDate": "2026-10-02T08:00:00Z",
            "returnDate": "2026-10-05T08:00:00Z",
            "status": "returned",
        }]
        receives = [
            {"id": 1, "itemName": "Hard hat", "quantity": 6, "timestamp": "2026-10-03T08:00:00Z"},
            {"id": 2, "itemName": "Hard hat", "quantity": 1, "timestamp": None},
        ]

        activities = recent_activities(vouchers, loans, receives, ITEMS, 10)

        self.assertEqual(
            [a["type"] for a in activities],
            [
                "return_transaction",
                "receive_transaction",
                "loan_transaction",
                "issue_voucher",
                "receive_transaction",
            ],
        )
        self.assertEqual(activities[0]["description"], "Returned: Safety glasses by Malee")
        self.assertEqual(activities[3]["description"], "Voucher #1 by Somchai (Approved)")
        self.assertIsNone(activities[-1]["timestamp"])

    def test_recent_activities_limit(self):
        vouchers = [
            _voucher(i, "pending", [], f"2026-10-{i:02d}T08:00:00Z") for i in range(1, 16)
        ]
        activities = recent_activities(vouchers, [], [], ITEMS, 10)
        self.assertEqual(len(activities), 10)
        self.assertEqual(activities[0]["id"], 15)

    def test_low_stock_items(self):
        low = low_stock_items(ITEMS)
        self.assertEqual([i["id"] for i in low], [4, 2])

    def test_overdue_loans(self):
        now = datetime(2026, 10, 19, 15, 0)
        loans = [
            {"loanId": 1, "status": "on_loan", "dueDate": "2026-10-18T23:00:00Z"},
            {"loanId": 2, "status": "on_loan", "dueDate": "2026-10-19T00:00:00Z"},
            {"loanId": 3, "status": "returned", "dueDate": "2026-01-01T00:00:00Z"},
            {"loanId": 4, "status": "on_loan", "dueDate": None},
            {"loanId": 5, "status": "on_loan", "dueDate": "2026-09-01"},
        ]

        overdue = overdue_loans(loans, now=now)

        self.assertEqual([loan["loanId"] for loan in overdue], [5, 1])


class TestGetInitialData:
    def test_snapshot_and_metrics(self, make_item):
        make_item(1, stock=10, price=10, reorder_point=2, name="Nitrile gloves")
        make_item(2, stock=1, price=100, reorder_point=3, name="Safety glasses")

        voucher = voucher_service.create_voucher(
            user="Somchai", department="Production", lines=[{"itemId": 1, "quantity": 3}]
        )
        voucher_service.approve_voucher(voucher.id)
        loan_service.borrow_item(item_id=1, borrower_name="Malee")

        data = dashboard_service.get_initial_data()

        assert set(data) == {
            "ppeItems",
            "issueVouchers",
            "receiveTransactions",
            "loanTransactions",
            "categories",
            "departments",
            "feedbackData",
            "ppeMatrix",
            "ppeDocuments",
            "dashboardMetrics",
        }
        assert [i["stock"] for i in data["ppeItems"]] == [6, 1]
        assert data["issueVouchers"][0]["status"] == "approved"

        metrics = data["dashboardMetrics"]
        assert metrics["totalStockValue"] == 6 * 10 + 1 * 100
        assert metrics["topIssuedItems"] == [
            {"itemId": 1, "itemName": "Nitrile gloves", "totalQuantity": 3},
        ]
        assert metrics["loanStatusSummary"] == {"onLoan": 1, "returned": 0}
        assert {a["type"] for a in metrics["recentActivities"]} == {"issue_voucher", "loan_transaction"}
        assert [i["id"] for i in metrics["lowStockItems"]] == [2]
        assert metrics["overdueLoans"] == []

    def test_empty_database(self, db_session):
        data = dashboard_service.get_initial_data()

        assert data["ppeItems"] == []
        assert data["dashboardMetrics"]["totalStockValue"] == 0
        assert data["dashboardMetrics"]["topIssuedItems"] == []
        assert data["dashboardMetrics"]["recentActivities"] == []
