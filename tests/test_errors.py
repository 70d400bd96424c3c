import logging

from sqlalchemy.exc import OperationalError
from starlette.requests import Request

from app.core.errors import database_exception_handler, unhandled_exception_handler


def _request():
    return Request({"type": "http", "method": "GET", "path": "/api/tasks", "headers": []})


def test_database_error_logs_traceback_and_returns_500(caplog):
    exc = OperationalError("INSERT INTO tasks", {}, Exception("disk I/O error"))

    with caplog.at_level(logging.ERROR, logger="app.core.errors"):
        res = database_exception_handler(_request(), exc)

    assert res.status_code == 500
    record = caplog.records[-1]
    assert record.exc_info is not None
    assert record.exc_info[1] is exc


def test_unhandled_error_logs_traceback_and_returns_500(caplog):
    exc = RuntimeError("boom")

    with caplog.at_level(logging.ERROR, logger="app.core.errors"):
        res = unhandled_exception_handler(_request(), exc)

    assert res.status_code == 500
    assert caplog.records[-1].exc_info[1] is exc
