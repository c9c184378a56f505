"""Data models shared by the DAO, service and handler layers.

Classes:
    UrlRecordModel:
        A stored short URL record (id, long URL, redirect statistics).
    UrlStatModel:
        Reporting projection of a record, as served by GET /stat.
    ShortenResult:
        Outcome of shortening a long URL.
"""

from dataclasses import dataclass
from datetime import datetime

from shorturl.utils.helpers import isoformat_z


# fmt: off
@dataclass(frozen=True)
class UrlRecordModel:
    id: int                             # Unique, never reused record id (assigned by the store)
    url: str                            # Original long URL
    count: int                          # Number of successful redirects
    last_access: datetime               # Creation time, then time of the latest redirect (UTC)

    @property
    def shortcode(self) -> str:
        return str(self.id)


@dataclass(frozen=True)
class UrlStatModel:
    url: str                            # Original long URL
    short_url: str                      # Public short URL, e.g. https://example.com/my/42
    redirects: int                      # Number of successful redirects
    last_access: datetime               # Time of the latest redirect (or creation) in UTC

    def to_dict(self) -> dict:
        return {
            'url': self.url,
            'shortUrl': self.short_url,
            'redirects': self.redirects,
            'lastAccess': isoformat_z(self.last_access),
        }


@dataclass(frozen=True)
class ShortenResult:
    url: str                            # Long URL echoed back to the client
    short_url: str                      # Public short URL of the (new or reused) record
    record: UrlRecordModel              # Backing record
# fmt: on
