"""Pytest configuration for test isolation.

Import settings are read from the process environment, and the shared
database engine is a process-wide singleton bound to the first URL it sees.
An autouse fixture clears the ``SI_*`` variables, points ``DATABASE_URL`` away
from any developer database and disposes the engine after each test so
per-test SQLite files never leak into one another. It also resets the
package logger that the CLI configures, since its handler is bound to the
stream that was current at configuration time.
"""

from __future__ import annotations

import logging

import pytest
from db.client import dispose_engine

from statement_import import logging_setup

_ENV_VARS = (
    "SI_DEFAULT_LOCALE",
    "SI_DATE_ORDER",
    "SI_HEADER_SCAN_ROWS",
    "STATEMENT_IMPORT_LOG_LEVEL",
    "DATABASE_URL",
)


@pytest.fixture(autouse=True)
def _isolate_env_and_db(monkeypatch: pytest.MonkeyPatch):
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    yield
    dispose_engine()
    pkg_logger = logging.getLogger("statement_import")
    for h in list(pkg_logger.handlers):
        pkg_logger.removeHandler(h)
    pkg_logger.propagate = True
    logging_setup._CONFIGURED = False
