"""Shared fixtures: a fake sheets API connection and a logged-in test client."""

import time

import pytest

from common import config_util
from common.api_connection import SheetsApiError
from common.supplier_logic import FixedMetricsProvider

import main_server.main as main_module
import common.sheet_fetch
import common.api_check_util
import common.log_util
import products.views
import purchases.views
import expenses.views
import sheets.views
import suppliers.views


SALES_HEADER = ["ID", "Receipt", "Date", "Time", "Category", "Product",
                "Unit Price", "Discount", "Qty", "Revenue", "Sold By"]
PURCHASES_HEADER = ["ID", "Receipt", "Date", "Time", "Product", "Category",
                    "Qty", "Unit Cost", "Amount", "Location", "Supplier"]
EXPENSES_HEADER = ["ID", "Date", "Category", "Description", "Amount"]
INVENTORY_HEADER = ["ID", "Product", "Category", "Current", "Min", "Max", "Unit",
                    "x", "x", "x", "Last Updated"]
SUPPLIERS_HEADER = ["ID", "Supplier Name", "Contact Person", "Email", "Phone", "Address",
                    "City", "Country", "Status", "Notes", "Created At", "Updated At"]
PRODUCTS_HEADER = ["ID", "Name", "Category", "Price", "Cost", "Stock",
                   "Supplier", "Status", "Description"]


def sample_sheets():
    return {
        "Sales": [
            SALES_HEADER,
            ["S1", "R001", "2024-01-01", "09:00:00", "Drinks", "Soda", "1000", "0", "2", "TSh2,000", "alice"],
            ["S2", "R002", "2024-03-01", "10:00:00", "Food", "Bread", "500", "100", "3", "1,400", "bob"],
        ],
        "Purchases": [
            PURCHASES_HEADER,
            ["P1", "B001", "2024-02-01", "08:00:00", "Soda", "Drinks", "10", "600", "6000", "Store", "Acme"],
        ],
        "Expenses": [
            EXPENSES_HEADER,
            ["E1", "2024-02-15", "Rent", "February rent", "TSh3,000"],
        ],
        "Inventory": [
            INVENTORY_HEADER,
            ["I1", "Soda", "Drinks", "8", "5", "50", "Bottle", "", "", "", "2024-02-20"],
            ["I2", "Bread", "Food", "2", "5", "30", "Loaf", "", "", "", ""],
        ],
        "Products": [
            PRODUCTS_HEADER,
            ["P100001", "Soda", "Drinks", "1000", "600", "25", "Acme", "active", "330ml"],
            ["P100002", "Bread", "Food", "500", "300", "0", "Bakery", "active", ""],
        ],
        "Suppliers": [
            SUPPLIERS_HEADER,
            ["supplier-1", "Acme", "Jane Doe", "jane@acme.test", "+255 700 000 001",
             "Plot 4", "Dar es Salaam", "Tanzania", "active", "Drinks", "2024-01-01T08:00:00", ""],
            ["supplier-2", "Bakery", "Sam", "", "", "", "Arusha", "Tanzania", "inactive", "", "", ""],
        ],
    }


class FakeConnection:
    """Stands in for SheetsConnection; records writes."""

    def __init__(self, sheets=None, healthy=True, fail=None):
        self.sheets = sheets if sheets is not None else sample_sheets()
        self.healthy = healthy
        self.fail = fail
        self.appended = []
        self.updated = []
        self.cleared = []

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        return None

    def _check(self):
        if self.fail is not None:
            raise self.fail

    def health(self):
        if not self.healthy:
            raise SheetsApiError("Connection refused")
        return {"success": True, "message": "API is healthy", "environment": "test", "uptime": 12}

    def metadata(self):
        self._check()
        return {"title": "POS Data", "sheets": [{"properties": {"title": n}} for n in self.sheets]}

    def all_sheets(self):
        self._check()
        return dict(self.sheets)

    def get_values(self, sheet_name, range_=None, session=None):
        self._check()
        return self.sheets.get(sheet_name, [])

    def fetch_many(self, sheet_names):
        self._check()
        return {name: self.sheets.get(name, []) for name in sheet_names}

    def append(self, sheet_name, values):
        self._check()
        self.appended.append((sheet_name, values))
        return {"updates": {"updatedRows": len(values)}}

    def update_range(self, sheet_name, range_, values):
        self._check()
        self.updated.append((sheet_name, range_, values))
        return {"updatedRange": range_}

    def clear(self, sheet_name, range_=None):
        self._check()
        self.cleared.append((sheet_name, range_))
        return {"clearedRange": range_ or sheet_name}


CONNECTION_USERS = [
    main_module,
    common.sheet_fetch,
    common.api_check_util,
    common.log_util,
    products.views,
    purchases.views,
    expenses.views,
    sheets.views,
    suppliers.views,
]


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch):
    """No config file, no stray environment settings."""
    monkeypatch.setattr(config_util, "_CFG_CACHE", {})
    for key in ("API_TARGET", "BACKEND_URL", "API_TIMEOUT", "OPLOG_SHEET",
                "SESSION_TIMEOUT", "URL_PREFIX", "SECRET_KEY"):
        monkeypatch.delenv(key, raising=False)


@pytest.fixture
def fake_api(monkeypatch):
    conn = FakeConnection()
    for module in CONNECTION_USERS:
        monkeypatch.setattr(module, "get_connection", lambda target=None: conn)
    return conn


@pytest.fixture
def app(fake_api):
    app = main_module.create_app({
        "TESTING": True,
        "SUPPLIER_METRICS": FixedMetricsProvider(),
    })
    return app


@pytest.fixture
def client(app):
    return app.test_client()


def log_in(client, role="admin", email="admin@example.com", last_access=None):
    with client.session_transaction() as sess:
        sess["user"] = {"email": email, "name": "Test User", "role": role}
        sess["last_access"] = last_access if last_access is not None else time.time()


@pytest.fixture
def admin_client(client):
    log_in(client, role="admin")
    return client


@pytest.fixture
def cashier_client(client):
    log_in(client, role="cashier", email="cashier@example.com")
    return client


@pytest.fixture
def login_as(client):
    def _login(role="admin", email="admin@example.com", last_access=None):
        log_in(client, role=role, email=email, last_access=last_access)
        return client
    return _login
