"""Config file lookup and setting resolution."""

from common import config_util

CONFIG_TEXT = """
/* sample */
{
    // target
    "API_TARGET": "local",
    "SESSION_TIMEOUT": "abc",
    "ROW_LIMITS": {"cashflow": 20, "audit": 0},
    "USERS": [{"email": "a@b.c", "password": "x", "role": "manager"}]
}
"""


def load_from(tmp_path, monkeypatch, text=CONFIG_TEXT):
    path = tmp_path / "pos.config"
    path.write_text(text, encoding="utf-8")
    monkeypatch.setenv("POS_CONFIG", str(path))
    monkeypatch.setattr(config_util, "_CFG_CACHE", None)
    return config_util.load_app_config()


def test_reads_commented_json(tmp_path, monkeypatch):
    cfg = load_from(tmp_path, monkeypatch)
    assert cfg["API_TARGET"] == "local"
    assert config_util.get_setting("API_TARGET") == "local"


def test_config_is_cached(tmp_path, monkeypatch):
    first = load_from(tmp_path, monkeypatch)
    (tmp_path / "pos.config").write_text('{"API_TARGET": "production"}', encoding="utf-8")
    assert config_util.load_app_config() is first


def test_env_then_default(tmp_path, monkeypatch):
    load_from(tmp_path, monkeypatch)
    monkeypatch.setenv("OPLOG_SHEET", "OpLog")
    assert config_util.get_setting("OPLOG_SHEET") == "OpLog"
    assert config_util.get_setting("NOT_SET_ANYWHERE", "fallback") == "fallback"


def test_bad_integer_falls_back(tmp_path, monkeypatch):
    load_from(tmp_path, monkeypatch)
    assert config_util.get_int_setting("SESSION_TIMEOUT", 300) == 300


def test_row_limits(tmp_path, monkeypatch):
    load_from(tmp_path, monkeypatch)
    assert config_util.get_row_limit("cashflow", 50) == 20
    # non-positive caps are ignored
    assert config_util.get_row_limit("audit", 30) == 30
    monkeypatch.setenv("ROW_LIMIT_MOVEMENTS", "15")
    assert config_util.get_row_limit("movements", 50) == 15
    assert config_util.get_row_limit("suppliers", 100) == 100


def test_users(tmp_path, monkeypatch):
    load_from(tmp_path, monkeypatch)
    assert config_util.get_users()[0]["email"] == "a@b.c"


def test_invalid_file_gives_empty_config(tmp_path, monkeypatch):
    cfg = load_from(tmp_path, monkeypatch, text="{not json")
    assert cfg == {}
    assert config_util.get_users() == []
