"""Shortening service: find-or-create a short URL for a long URL.

Shortening is idempotent: a long URL that already has a record gets the same
short URL back, and its redirect statistics are left untouched.

Classes:
    ShortenerService:
        Validates long URLs and resolves them to (possibly new) records.

Functions:
    validate_url(url) -> str
        Reject empty, blank, non-string or overly long URLs

Example:
    >>> service = ShortenerService(dao, short_url_base='https://sho.rt/my')
    >>> service.shorten('https://example.com').short_url
    'https://sho.rt/my/1'
    >>> service.shorten('https://example.com').short_url
    'https://sho.rt/my/1'
"""

import logging
from typing import Any

from shorturl.constants import Limits
from shorturl.models import ShortenResult, UrlRecordModel
from shorturl.dao.base import UrlRecordBaseDAO
from shorturl.dao.exceptions import UrlRecordAlreadyExistsError, ConcurrentWriteError
from shorturl.services.exceptions import MalformedUrlError


logger = logging.getLogger(__name__)


def validate_url(url: Any) -> str:
    """Return the long URL unchanged if it can be shortened

    The URL is not normalized: it is stored and echoed back exactly as given.

    Raises:
        MalformedUrlError:
            If the URL is not a string, is empty or whitespace-only,
            or is longer than Limits.MAX_URL_LENGTH characters.
    """
    if not isinstance(url, str):
        raise MalformedUrlError(f'URL must be a string (given type: {type(url).__name__}).')
    if not url.strip():
        raise MalformedUrlError('URL must not be empty.')
    if len(url) > Limits.MAX_URL_LENGTH:
        raise MalformedUrlError(f'URL must be at most {Limits.MAX_URL_LENGTH} characters long.')
    return url


class ShortenerService:
    """Find-or-create records for long URLs

    Attributes:
        dao (UrlRecordBaseDAO):
            Record store.
        short_url_base (str):
            Address every short URL starts with, e.g. 'https://sho.rt/my'.
        max_attempts (int):
            How many find-or-create rounds to try before giving up on a contended URL.
    """

    def __init__(self, dao: UrlRecordBaseDAO, short_url_base: str, max_attempts: int = Limits.SHORTEN_MAX_ATTEMPTS):
        self.dao = dao
        self.short_url_base = short_url_base.rstrip('/')
        self.max_attempts = max_attempts

    def short_url(self, record: UrlRecordModel) -> str:
        return f'{self.short_url_base}/{record.shortcode}'

    def shorten(self, url: Any) -> ShortenResult:
        """Return the short URL of a long URL, creating a record on first use

        Concurrent calls for the same URL all end up with the same record:
        a creation that loses the race finds the winner's record on its next round.

        Args:
            url (str):
                The long URL (validated with validate_url()).

        Returns:
            ShortenResult: the echoed URL, its short URL and the backing record.

        Raises:
            MalformedUrlError:
                If the URL is invalid.
            ConcurrentWriteError:
                If the URL stayed contended for max_attempts rounds.
            DataStoreError:
                If the record store fails.
        """
        url = validate_url(url)

        for attempt in range(1, self.max_attempts + 1):
            record = self.dao.find_by_url(url)
            if record is not None:
                logger.debug('Reusing record %s for URL.', record.id, extra={'record_id': record.id})
                return ShortenResult(url=url, short_url=self.short_url(record), record=record)

            try:
                record = self.dao.create(url)
            except (UrlRecordAlreadyExistsError, ConcurrentWriteError) as e:
                logger.debug(
                    'Lost a creation race (attempt %d/%d): %s',
                    attempt,
                    self.max_attempts,
                    e,
                    extra={'attempt': attempt},
                )
                continue

            logger.info('Created record %s.', record.id, extra={'record_id': record.id})
            return ShortenResult(url=url, short_url=self.short_url(record), record=record)

        raise ConcurrentWriteError(f'Gave up shortening URL after {self.max_attempts} contended attempts.')
