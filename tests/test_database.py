import pytest

from modelmatrix.database import DocumentStore


def test_session_requires_open_store():
    store = DocumentStore("sqlite://")
    with pytest.raises(RuntimeError):
        with store.session():
            pass


def test_postgres_url_gets_sslmode():
    store = DocumentStore("postgresql://u:p@db.example.com:5432/app")
    assert store.url.endswith("?sslmode=require")
    assert store.engine_options["pool_size"] == 1


def test_postgres_url_keeps_existing_query():
    store = DocumentStore("postgresql://u:p@db/app?application_name=mm")
    assert store.url.endswith("?application_name=mm&sslmode=require")


def test_explicit_sslmode_is_untouched():
    url = "postgresql://u:p@db/app?sslmode=disable"
    assert DocumentStore(url).url == url


def test_sqlite_url_is_untouched():
    store = DocumentStore("sqlite://")
    assert store.url == "sqlite://"
    assert store.engine_options == {}


def test_open_and_close_are_idempotent():
    store = DocumentStore("sqlite://")
    store.open()
    store.open()
    assert store.is_open
    store.close()
    store.close()
    assert not store.is_open
