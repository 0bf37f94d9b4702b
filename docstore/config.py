"""Configuration class for `docstore`-services."""

import os
import sys
import importlib.metadata


# pylint: disable=invalid-name


class StoreConfig:
    """
    Configuration class for `docstore`-services. Settings are read from
    the environment when the class is defined; override by subclassing.
    """

    # allow CORS (requires python package Flask-CORS)
    ALLOW_CORS = (int(os.environ.get("ALLOW_CORS") or 0)) == 1

    # proactive expiration
    SWEEP_AT_STARTUP = (
        int(os.environ.get("DOCSTORE_SWEEP_AT_STARTUP") or 1)
    ) == 1
    SWEEP_INTERVAL = float(os.environ.get("DOCSTORE_SWEEP_INTERVAL") or 1.0)
    SWEEP_LIMIT = int(os.environ.get("DOCSTORE_SWEEP_LIMIT") or 100)

    def __init__(self) -> None:
        self.CONTAINER_SELF_DESCRIPTION = {}
        self.set_identity()

    def set_identity(self) -> None:
        """
        Load dictionary with self-description based on current settings.

        When inheriting from this config-class with a custom
        self-description, the `set_identity`-default can be loaded with
        `super().set_identity()`.
        """
        try:
            version = importlib.metadata.version("docstore")
        except importlib.metadata.PackageNotFoundError:
            version = None
        self.CONTAINER_SELF_DESCRIPTION = {
            "description": "in-memory JSON document store",
            "version": {
                "app": version,
                "python": sys.version,
            },
            "configuration": {
                "settings": {
                    "allowCors": self.ALLOW_CORS,
                    "expiration": {
                        "sweepAtStartup": self.SWEEP_AT_STARTUP,
                        "sweepInterval": self.SWEEP_INTERVAL,
                        "sweepLimit": self.SWEEP_LIMIT,
                    },
                },
            },
        }
