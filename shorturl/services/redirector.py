"""Redirect service: resolve a shortcode and record the redirect.

Functions:
    parse_shortcode(shortcode) -> int
        Convert a shortcode (the decimal record id) into a record id

Classes:
    RedirectorService:
        Resolve shortcodes to long URLs, counting every successful redirect.
"""

import re
import logging
from typing import Any

from shorturl.constants import Limits
from shorturl.models import UrlRecordModel
from shorturl.dao.base import UrlRecordBaseDAO
from shorturl.services.exceptions import MalformedShortcodeError, UrlRecordNotFoundError


logger = logging.getLogger(__name__)

SHORTCODE_PATTERN = re.compile(r'[0-9]+')


def parse_shortcode(shortcode: Any) -> int:
    """Return the record id a shortcode stands for

    Raises:
        MalformedShortcodeError:
            If the shortcode isn't a string of at most Limits.MAX_SHORTCODE_LENGTH
            ASCII digits denoting a positive integer.
    """
    if not isinstance(shortcode, str) or not SHORTCODE_PATTERN.fullmatch(shortcode):
        raise MalformedShortcodeError(f'Shortcode {shortcode!r} is not a decimal number.')
    if len(shortcode) > Limits.MAX_SHORTCODE_LENGTH:
        raise MalformedShortcodeError(f'Shortcode must be at most {Limits.MAX_SHORTCODE_LENGTH} digits long.')

    record_id = int(shortcode)
    if record_id < 1:
        raise MalformedShortcodeError('Shortcode must be a positive number.')
    return record_id


class RedirectorService:
    """Resolve shortcodes to their long URLs

    Each successful resolution increments the record's redirect count and moves
    its last access to now, in one atomic store operation.
    """

    def __init__(self, dao: UrlRecordBaseDAO, short_url_base: str):
        self.dao = dao
        self.short_url_base = short_url_base.rstrip('/')

    def resolve(self, shortcode: Any) -> UrlRecordModel:
        """Record a redirect through a shortcode and return the updated record

        Raises:
            MalformedShortcodeError:
                If the shortcode is malformed. Nothing is recorded.
            UrlRecordNotFoundError:
                If no record has this id. Nothing is recorded.
            DataStoreError:
                If the record store fails.
        """
        record_id = parse_shortcode(shortcode)

        record = self.dao.increment_and_touch(record_id)
        if record is None:
            raise UrlRecordNotFoundError(f"Short URL {self.short_url_base}/{shortcode} doesn't exist.")

        logger.debug('Redirect %d recorded for record %s.', record.count, record.id, extra={'record_id': record.id})
        return record
