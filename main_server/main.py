import sys, os
# project root on the module path (common / blueprints live there)
BASE_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if BASE_DIR not in sys.path:
    sys.path.insert(0, BASE_DIR)

from flask import Flask, render_template

from auth import auth_bp
from auth.auth_utils import login_required, UserSession
from cashflow import cashflow_bp
from inventory import inventory_bp
from suppliers import suppliers_bp
from products import products_bp
from purchases import purchases_bp
from sales import sales_bp
from expenses import expenses_bp
from sheets import sheets_bp

from common.api_connection import get_connection, SheetsApiError
from common.cell_logic import format_currency, format_currency_with_scale
from common.config_util import get_setting, get_int_setting

class PrefixMiddleware(object):
    def __init__(self, app, prefix=''):
        self.app = app
        self.prefix = prefix

    def __call__(self, environ, start_response):
        # 1. url_for builds links under the prefix
        environ['SCRIPT_NAME'] = self.prefix

        # 2. strip the prefix when the front server did not
        path_info = environ.get('PATH_INFO', '')
        if path_info.startswith(self.prefix):
            environ['PATH_INFO'] = path_info[len(self.prefix):] or '/'

        return self.app(environ, start_response)

# (blueprint, url prefix, menu label, menu endpoint)
BLUEPRINTS = [
    (auth_bp, "/auth", None, None),
    (cashflow_bp, "/cashflow", "Cashflow", "cashflow.index"),
    (inventory_bp, "/inventory", "Inventory", "inventory.stock"),
    (suppliers_bp, "/suppliers", "Suppliers", "suppliers.index"),
    (products_bp, "/products", "Products", "products.index"),
    (purchases_bp, "/purchases", "Purchases", "purchases.index"),
    (sales_bp, "/sales", "Sales", "sales.index"),
    (expenses_bp, "/expenses", "Expenses", "expenses.index"),
    (sheets_bp, "/sheets", "Sheets", "sheets.health"),
]

def create_app(config=None):
    """
    Build the Flask app.
    config: extra app.config values (tests pass TESTING, SUPPLIER_METRICS ...)
    """
    app = Flask(__name__)

    app.secret_key = get_setting("SECRET_KEY", "dev-secret-key-change-me")
    app.config["SESSION_TIMEOUT"] = get_int_setting("SESSION_TIMEOUT", 300)
    if config:
        app.config.update(config)

    prefix = (get_setting("URL_PREFIX", "") or "").rstrip("/")
    if prefix:
        app.wsgi_app = PrefixMiddleware(app.wsgi_app, prefix=prefix)

    # Blueprint registration (one URL prefix per feature)
    for bp, url_prefix, _, _ in BLUEPRINTS:
        app.register_blueprint(bp, url_prefix=url_prefix)

    app.add_template_filter(format_currency, "currency")
    app.add_template_filter(format_currency_with_scale, "currency_scaled")

    @app.context_processor
    def inject_menu():
        return {
            "menu": [(endpoint, label) for _, _, label, endpoint in BLUEPRINTS if label],
            "login_user": UserSession.load(),
        }

    @app.route('/')
    @login_required
    def dashboard():
        try:
            with get_connection() as conn:
                health = conn.health()
            error = ""
        except SheetsApiError as e:
            health = {}
            error = f"Failed to fetch health data: {e}"
        return render_template("index.html", health=health, error=error)

    return app

app = create_app()

# ----------------------------------------
if __name__ == "__main__":
    app.run(host="0.0.0.0", port=5000, debug=True, use_reloader=False)
