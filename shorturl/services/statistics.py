"""Statistics projection: redirect statistics of every record."""

import logging

from shorturl.models import UrlStatModel, UrlRecordModel
from shorturl.dao.base import UrlRecordBaseDAO


logger = logging.getLogger(__name__)


class StatisticsService:
    """Project stored records into UrlStatModel entries (reads never modify records)"""

    def __init__(self, dao: UrlRecordBaseDAO, short_url_base: str):
        self.dao = dao
        self.short_url_base = short_url_base.rstrip('/')

    def to_stat(self, record: UrlRecordModel) -> UrlStatModel:
        return UrlStatModel(
            url=record.url,
            short_url=f'{self.short_url_base}/{record.shortcode}',
            redirects=record.count,
            last_access=record.last_access,
        )

    def list_stats(self) -> list[UrlStatModel]:
        """Return one entry per stored record, in no particular order

        Raises:
            DataStoreError:
                If the record store fails.
        """
        stats = [self.to_stat(record) for record in self.dao.list_all()]
        logger.debug('Projected %d records.', len(stats), extra={'records': len(stats)})
        return stats
