from datetime import date, time, timedelta

import pytest

from src.academy_system.academy_system.database.bootstrap import split_statements
from src.academy_system.academy_system.database.connection import DBConfig
from src.academy_system.academy_system.database.mysql_base import (
    dump_json,
    fetchone,
    hhmm_or_none,
    load_json,
    normalize_mysql_time,
)


def test_split_statements_drops_database_directives_and_comments():
    script = """
    CREATE DATABASE IF NOT EXISTS academy_db;
    USE academy_db;
    -- users
    CREATE TABLE a (id INT);
    INSERT INTO a VALUES (1)
    """
    assert list(split_statements(script)) == ["CREATE TABLE a (id INT)", "INSERT INTO a VALUES (1)"]


def test_split_statements_keeps_semicolons_inside_literals():
    script = "INSERT INTO t VALUES ('a;b', \"c;d\", 'it\\'s; fine'); SELECT 1;"
    assert list(split_statements(script)) == [
        "INSERT INTO t VALUES ('a;b', \"c;d\", 'it\\'s; fine')",
        "SELECT 1",
    ]


def test_normalize_mysql_time_accepts_connector_shapes():
    assert normalize_mysql_time(None) is None
    assert normalize_mysql_time(time(8, 30)) == time(8, 30)
    assert normalize_mysql_time(timedelta(hours=9, minutes=5)) == time(9, 5)
    assert normalize_mysql_time("14:00") == time(14, 0)
    assert normalize_mysql_time(b"07:15:30") == time(7, 15, 30)
    assert hhmm_or_none(timedelta(hours=17, minutes=45, seconds=10)) == "17:45"


def test_normalize_mysql_time_rejects_garbage():
    with pytest.raises(ValueError):
        normalize_mysql_time("9")
    with pytest.raises(TypeError):
        normalize_mysql_time(3.5)


def test_json_columns_round_trip_dates_as_iso_strings():
    assert load_json(None, {}) == {}
    assert load_json("", []) == []
    assert load_json(b'{"a": 1}') == {"a": 1}
    assert load_json({"already": "decoded"}) == {"already": "decoded"}
    assert dump_json(None) is None
    assert load_json(dump_json({"date": date(2026, 1, 5)})) == {"date": "2026-01-05"}


def test_fetchone_maps_empty_row_to_none():
    class Cursor:
        def fetchone(self):
            return {}

    assert fetchone(Cursor()) is None


def test_db_config_fills_blank_values_with_defaults():
    cfg = DBConfig.from_dict({"host": "", "port": "3307", "password": None})
    assert cfg == DBConfig(host="localhost", port=3307, user="root", password="", database="academy_db")
