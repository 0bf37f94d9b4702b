""" Configure the tests """

from typing import Callable
from threading import Thread

import pytest
from flask import Flask
from werkzeug.serving import make_server

from docstore.config import StoreConfig


class FakeClock:
    """Manually advanced clock for expiration tests."""

    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        """Moves the clock forward by `seconds`."""
        self.now += seconds


class NoSweepConfig(StoreConfig):
    """Configuration without background sweep."""

    SWEEP_AT_STARTUP = False


@pytest.fixture(name="clock")
def _clock():
    """
    Return a `FakeClock`-instance.
    """
    return FakeClock()


@pytest.fixture(name="testing_config")
def _testing_config():
    """
    Return the app configuration used for tests.
    """
    return NoSweepConfig()


@pytest.fixture(name="run_service")
def _run_service(request) -> Callable:
    """
    Returns function that, if called, runs a flask-app in a separate
    thread on a free port and returns the app's base url.

    The server lives only in pytest's 'function'-scope.
    """

    def _(app: Flask) -> str:
        server = make_server("127.0.0.1", 0, app, threaded=True)
        thread = Thread(target=server.serve_forever, daemon=True)
        thread.start()

        def shutdown():
            server.shutdown()
            server.server_close()
            thread.join()

        request.addfinalizer(shutdown)
        return f"http://127.0.0.1:{server.server_port}"

    return _
