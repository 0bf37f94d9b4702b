"""Global `docstore`-logging settings."""

import os
import sys
from time import time


def map_loglevel(level: str) -> int:
    """Returns integer-representation of the given loglevel."""
    match level:
        case "none":
            return -1
        case "error":
            return 0
        case "info":
            return 1
        case "debug":
            return 2
        case _:
            raise ValueError(f"Unknown loglevel '{level}'.")


class Logging:
    """Global `docstore`-logging settings."""

    LEVEL_NONE = -1
    LEVEL_ERROR = 0
    LEVEL_INFO = 1
    LEVEL_DEBUG = 2
    LOGLEVEL = map_loglevel(os.environ.get("DOCSTORE_LOGLEVEL", "info"))
    LOGFILE = sys.stderr
    LOGPREFIX = os.environ.get("DOCSTORE_LOGPREFIX", "[docstore]")

    @classmethod
    def print_to_log(cls, msg: str, level: int):
        """Print to docstore-log."""
        if level <= cls.LOGLEVEL:
            print(
                cls.LOGPREFIX
                + f" [{(str(time()) + '000')[:13]}] "
                + msg,
                file=cls.LOGFILE,
            )

    @classmethod
    def error(cls, msg: str):
        """Print error-message to docstore-log."""
        cls.print_to_log("\033[31mERROR\033[0m " + msg, cls.LEVEL_ERROR)

    @classmethod
    def info(cls, msg: str):
        """Print info-message to docstore-log."""
        cls.print_to_log(msg, cls.LEVEL_INFO)

    @classmethod
    def debug(cls, msg: str):
        """Print debug-message to docstore-log."""
        cls.print_to_log(msg, cls.LEVEL_DEBUG)
