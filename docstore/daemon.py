"""
This module contains the definition of the `Daemon`-base class and the
`ExpirationDaemon` that proactively purges expired keys.
"""

from typing import Optional
import abc
from threading import Thread, Event

from docstore.logging import Logging
from docstore.store import DocumentStore


class Daemon(metaclass=abc.ABCMeta):
    """
    Base class for daemon-implementations. A `Daemon` monitors a
    service-`Thread` and restarts it whenever it has terminated.
    """

    def __init__(self) -> None:
        self._daemon: Optional[Thread] = None
        self._stop = Event()
        self._service: Optional[Thread] = None
        self._skip_sleep = Event()

    @property
    def active(self) -> bool:
        """
        Returns `True` if the `Daemon` is currently running.
        """
        return self._daemon is not None and self._daemon.is_alive()

    @property
    def status(self) -> bool:
        """
        Returns `True` if currently both the `Daemon` is active and the
        service is alive.
        """
        return (
            self.active
            and self._service is not None
            and self._service.is_alive()
        )

    @abc.abstractmethod
    def _restart_service(self):
        """
        Generates and runs new `Thread`.
        """
        raise NotImplementedError(
            f"Class {self.__class__.__name__} does not define method "
            + "'_restart_service'."
        )

    def _serve(self, interval: float):
        """
        Loops until stopped. If `self._service` is down, restart.
        """
        while not self._stop.is_set():
            if self._service is None or not self._service.is_alive():
                try:
                    self._restart_service()
                # pylint: disable=broad-exception-caught
                except Exception as exc_info:
                    Logging.error(
                        "Daemon encountered an unrecoverable error while "
                        + f"trying to (re-)start a service: {exc_info} "
                        + "Shutting down now.."
                    )
                    self._stop.set()
                    break
            self._skip_sleep.wait(interval)
            self._skip_sleep.clear()

    def run(
        self,
        interval: Optional[float] = None,
        daemon: bool = False,
        block: bool = False,
    ) -> None:
        """
        Start providing the service.

        Keyword arguments:
        interval -- interval for monitoring the service's status
                    (default 0.1)
        daemon -- run the `Daemon` as python `threading`-daemon
                  (default False)
        block -- if `True`, blocks until service is alive
                 (default False)
        """
        if self._daemon is not None and self._daemon.is_alive():
            return

        self._stop.clear()
        self._daemon = Thread(
            target=self._serve, daemon=daemon, args=(interval or 0.1,)
        )
        self._daemon.start()

        if block:
            while not self.status:
                pass

    def stop(self, block: bool = False) -> None:
        """
        Stop restarting the service.

        Keyword arguments:
        block -- if `True`, blocks until `Daemon` is inactive
                 (default False)
        """
        self._stop.set()
        self._skip_sleep.set()
        if block:
            while self.active:
                pass


class ExpirationDaemon(Daemon):
    """
    A `ExpirationDaemon` runs a background `Thread` that periodically
    purges expired keys from a `DocumentStore` (see
    `DocumentStore.purge_expired`). If that `Thread` dies (e.g. due to
    an unexpected error), it is restarted by the `Daemon`.

    Keyword arguments:
    store -- the `DocumentStore` to be swept
    sweep_interval -- interval between sweeps in seconds
                      (default 1.0)
    sweep_limit -- maximum number of deadlines processed per sweep
                   (default None; no limit)
    """

    def __init__(
        self,
        store: DocumentStore,
        sweep_interval: float = 1.0,
        sweep_limit: Optional[int] = None,
    ) -> None:
        self.store = store
        self.sweep_interval = sweep_interval
        self.sweep_limit = sweep_limit
        self.sweeps = 0
        self.purged = 0
        super().__init__()

    def _sweep(self) -> None:
        while not self._stop.is_set():
            try:
                self.purged += self.store.purge_expired(self.sweep_limit)
            except Exception as exc_info:
                Logging.error(f"Expiration sweep failed: {exc_info}")
                raise
            self.sweeps += 1
            self._stop.wait(self.sweep_interval)

    def _restart_service(self):
        self._service = Thread(target=self._sweep, daemon=True)
        self._service.start()

    def stop(self, block: bool = False) -> None:
        super().stop(block)
        if block and self._service is not None:
            self._service.join()
