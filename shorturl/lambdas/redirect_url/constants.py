# Error codes
MISSING_SHORTCODE = 'MISSING_SHORTCODE'
INVALID_SHORTCODE = 'INVALID_SHORTCODE'
SHORT_URL_NOT_FOUND = 'SHORT_URL_NOT_FOUND'

# Success codes
REDIRECT_SUCCESS = 'REDIRECT_SUCCESS'

ALLOWED_METHODS = ('GET',)
