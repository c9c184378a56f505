# Error codes
MISSING_URL = 'MISSING_URL'
INVALID_URL = 'INVALID_URL'
INVALID_JSON = 'INVALID_JSON'
CONCURRENT_WRITE = 'CONCURRENT_WRITE'

# Success codes
SHORTEN_SUCCESS = 'SHORTEN_SUCCESS'

# API Gateway resources served by this handler
QUERY_ROUTE = '/shorten_simple'  # GET /shorten_simple?url=<long url>
BODY_ROUTE = '/shorten'  # POST /shorten {"url": "<long url>"}

ALLOWED_METHODS = {
    QUERY_ROUTE: ('GET',),
    BODY_ROUTE: ('POST',),
}
