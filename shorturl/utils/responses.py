"""API Gateway (Lambda proxy) response builders shared by all handlers.

Every JSON response carries `Content-Type: application/json`. Error bodies
follow the shape {"message": "<Reason> (<detail>)", "errorCode": "<CODE>"}.

Example:
    >>> response_400(message="missing 'url'", error_code='MISSING_URL')
    {'statusCode': 400, 'headers': {...}, 'body': '{"message": "Bad Request (missing \\'url\\')", "errorCode": "MISSING_URL"}'}
"""

import json
from typing import Any

from shorturl.types import HttpHeaders, LambdaResponse
from shorturl.constants import NO_CACHE_HEADER_VALUE


JSON_HEADERS: HttpHeaders = {'Content-Type': 'application/json'}


def json_response(status_code: int, body: Any, headers: HttpHeaders | None = None) -> LambdaResponse:
    return {
        'statusCode': status_code,
        'headers': {**JSON_HEADERS, **(headers or {})},
        'body': json.dumps(body),
    }


def error_response(
    status_code: int,
    reason: str,
    *,
    message: str | None = None,
    error_code: str | None = None,
    headers: HttpHeaders | None = None,
) -> LambdaResponse:
    body = {'message': reason if not message else f'{reason} ({message})'}
    if error_code:
        body['errorCode'] = error_code
    return json_response(status_code, body, headers)


def response_200(body: Any) -> LambdaResponse:
    return json_response(200, body)


def response_302(*, location: str) -> LambdaResponse:
    return {
        'statusCode': 302,
        'headers': {
            'Location': location,
            'Cache-Control': NO_CACHE_HEADER_VALUE,
        },
        'body': '',  # no body needed for redirects
    }


def response_400(message: str | None = None, error_code: str | None = None) -> LambdaResponse:
    return error_response(400, 'Bad Request', message=message, error_code=error_code)


def response_404(message: str | None = None, error_code: str | None = None) -> LambdaResponse:
    return error_response(404, 'Not Found', message=message, error_code=error_code)


def response_405(*, allowed: tuple[str, ...], error_code: str | None = None) -> LambdaResponse:
    allow = ', '.join(allowed)
    return error_response(
        405,
        'Method Not Allowed',
        message=f'allowed methods: {allow}',
        error_code=error_code,
        headers={'Allow': allow},
    )


def response_409(message: str | None = None, error_code: str | None = None) -> LambdaResponse:
    return error_response(409, 'Conflict', message=message, error_code=error_code)


def response_500(message: str | None = None, error_code: str | None = None) -> LambdaResponse:
    return error_response(500, 'Internal Server Error', message=message, error_code=error_code)
