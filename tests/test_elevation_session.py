"""Shared HTTP session used by the elevation fetchers."""

from concurrent.futures import ThreadPoolExecutor

from requests.adapters import HTTPAdapter

from track_studio.config import HTTP_MAX_RETRIES
from track_studio.elevation import session as session_module


def test_default_session_is_shared_across_threads():
    with ThreadPoolExecutor(max_workers=8) as pool:
        sessions = list(pool.map(lambda _: session_module.get_default_session(), range(32)))

    assert len({id(session) for session in sessions}) == 1
    assert sessions[0] is session_module.get_default_session()


def test_default_session_retries_server_errors():
    session = session_module.get_default_session()
    adapter = session.get_adapter("https://api.open-elevation.com")

    assert isinstance(adapter, HTTPAdapter)
    assert adapter.max_retries.total == HTTP_MAX_RETRIES
    assert 503 in adapter.max_retries.status_forcelist
    assert session.headers["Accept"] == "application/json"


def test_new_sessions_are_independent():
    first = session_module.create_default_session()
    second = session_module.create_default_session()
    assert first is not second
    assert first is not session_module.get_default_session()
