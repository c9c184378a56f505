# Success codes
STATS_SUCCESS = 'STATS_SUCCESS'

ALLOWED_METHODS = ('GET',)
