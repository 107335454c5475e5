"""Tests for the DB-API connection adapter."""

import sqlite3
import threading
from unittest.mock import MagicMock

import pytest

from sqltunnel.data import DatabaseDriver, DbApiConnection, SqliteConnection


class TestSqliteConnection:
    """Test the sqlite-backed driver used behind the executor."""

    def test_is_a_driver(self, sqlite_db):
        assert isinstance(sqlite_db, DatabaseDriver)

    def test_select_returns_dict_rows(self, sqlite_db):
        sqlite_db.insert("insert into users (name) values (?)", ["ada"])
        sqlite_db.insert("insert into users (name, active) values (?, ?)", ["grace", 0])

        assert sqlite_db.select("select name, active from users order by id") == [
            {"name": "ada", "active": 1},
            {"name": "grace", "active": 0},
        ]
        assert sqlite_db.select("select name from users where active = ?", [5]) == []

    def test_select_one(self, sqlite_db):
        sqlite_db.insert("insert into users (name) values (?)", ["ada"])

        assert sqlite_db.select_one("select id, name from users") == {"id": 1, "name": "ada"}
        assert sqlite_db.select_one("select id from users where name = ?", ["nobody"]) is None

    def test_named_bindings(self, sqlite_db):
        sqlite_db.insert("insert into users (name) values (:name)", {"name": "ada"})
        assert sqlite_db.select_one("select name from users where name = :name", {"name": "ada"}) == {"name": "ada"}

    def test_none_bindings(self, sqlite_db):
        assert sqlite_db.select("select 1 as one", None) == [{"one": 1}]

    def test_last_insert_id(self, sqlite_db):
        assert sqlite_db.last_insert_id() is None

        assert sqlite_db.insert("insert into users (name) values (?)", ["ada"]) is True
        assert sqlite_db.insert("insert into users (name) values (?)", ["grace"]) is True
        assert sqlite_db.last_insert_id() == 2

    def test_affected_rows(self, sqlite_db):
        for name in ("a", "b", "c"):
            sqlite_db.insert("insert into users (name) values (?)", [name])

        assert sqlite_db.update("update users set active = 0 where name != ?", ["a"]) == 2
        assert sqlite_db.delete("delete from users where active = 0") == 2
        assert sqlite_db.affecting_statement("update users set active = 1") == 1

    def test_ddl_affects_no_rows(self, sqlite_db):
        assert sqlite_db.affecting_statement("create table tags (name text)") == 0
        assert sqlite_db.statement("drop table tags") is True

    def test_unprepared_script(self, sqlite_db):
        assert sqlite_db.unprepared(
            "create table tags (id integer primary key, name text);"
            "insert into tags (name) values ('x');"
            "insert into tags (name) values ('y');"
        ) is True
        assert sqlite_db.select_one("select count(*) as n from tags") == {"n": 2}
        assert sqlite_db.last_insert_id() == 2

    def test_failed_write_rolled_back(self, sqlite_db):
        sqlite_db.insert("insert into users (name) values (?)", ["ada"])

        with pytest.raises(sqlite3.IntegrityError):
            sqlite_db.insert("insert into users (name) values (?)", ["ada"])

        assert not sqlite_db.connection.in_transaction
        assert sqlite_db.select_one("select count(*) as n from users") == {"n": 1}

    def test_session_blocks_other_threads(self, sqlite_db):
        """Test a held session keeps other threads off the handle until released."""
        worker = threading.Thread(target=sqlite_db.insert, args=("insert into users (name) values (?)", ["grace"]))

        with sqlite_db.session():
            sqlite_db.insert("insert into users (name) values (?)", ["ada"])
            worker.start()
            worker.join(timeout=0.2)
            assert worker.is_alive()
            assert sqlite_db.last_insert_id() == 1

        worker.join()
        assert sqlite_db.last_insert_id() == 2

    def test_database_name(self):
        named = SqliteConnection.from_path(":memory:", "reports")
        unnamed = SqliteConnection.from_path(":memory:")
        try:
            assert named.get_database_name() == "reports"
            assert unnamed.get_database_name() == ":memory:"
        finally:
            named.close()
            unnamed.close()

    def test_file_database(self, tmp_path):
        path = str(tmp_path / "app.db")
        db = SqliteConnection.from_path(path)
        db.statement("create table kv (k text primary key, v text)")
        db.insert("insert into kv values (?, ?)", ["a", "1"])
        db.close()

        reopened = SqliteConnection.from_path(path)
        try:
            assert reopened.select("select * from kv") == [{"k": "a", "v": "1"}]
        finally:
            reopened.close()


class TestDbApiConnection:
    """Test the generic DB-API adapter."""

    def test_last_insert_id_from_cursor(self):
        db = DbApiConnection(sqlite3.connect(":memory:"), "generic")
        try:
            db.statement("create table t (id integer primary key, v text)")
            assert db.last_insert_id() is None

            db.insert("insert into t (v) values (?)", ["a"])
            db.update("update t set v = ?", ["b"])
            assert db.last_insert_id() == 1
        finally:
            db.close()

    def test_unprepared_without_executescript(self):
        """Test drivers without executescript run the raw SQL once, unbound."""
        cursor = MagicMock(lastrowid=None, rowcount=-1)
        connection = MagicMock(spec=["cursor", "commit", "rollback", "close"])
        connection.cursor.return_value = cursor

        assert DbApiConnection(connection).unprepared("vacuum") is True

        cursor.execute.assert_called_once_with("vacuum")
        connection.commit.assert_called_once_with()
        cursor.close.assert_called_once_with()

    def test_rollback_on_failure(self):
        cursor = MagicMock()
        cursor.execute.side_effect = RuntimeError("driver exploded")
        connection = MagicMock(spec=["cursor", "commit", "rollback", "close"])
        connection.cursor.return_value = cursor

        with pytest.raises(RuntimeError):
            DbApiConnection(connection).statement("update t set v = 1")

        connection.rollback.assert_called_once_with()
        connection.commit.assert_not_called()
        cursor.close.assert_called_once_with()
