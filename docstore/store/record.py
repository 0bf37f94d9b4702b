"""Definition of the `KeyRecord`-model."""

from typing import Optional
from dataclasses import dataclass
from enum import Enum

from docstore.models import JSONable, clone


class ExpirationState(Enum):
    """Expiration state of a `KeyRecord`."""

    NO_TTL = "no-ttl"
    TTL_SET = "ttl-set"
    EXPIRED = "expired"


@dataclass
class KeyRecord:
    """
    Store entry binding a key to its document.

    Keyword arguments:
    key -- record key
    document -- the document (owned by the store)
    version -- version number, renewed with every mutation
    expires_at -- absolute expiration timestamp (seconds since epoch)
                  or `None`
                  (default None)
    """

    key: str
    document: JSONable
    version: int
    expires_at: Optional[float] = None

    def state(self, now: float) -> ExpirationState:
        """Returns the `ExpirationState` at time `now`."""
        if self.expires_at is None:
            return ExpirationState.NO_TTL
        if now > self.expires_at:
            return ExpirationState.EXPIRED
        return ExpirationState.TTL_SET

    def snapshot(self) -> "KeyRecord":
        """Returns an independent copy of this record."""
        return KeyRecord(
            self.key, clone(self.document), self.version, self.expires_at
        )
