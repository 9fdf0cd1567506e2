import json
import logging
from typing import Any

from linkshortener.dao.redis import ShortURLRedisDAO
from linkshortener.services import ShortURLStore, RedirectResolver, RedirectState
from linkshortener.utils import load_config, get_short_url, get_header, app_prefix, guarantee_500_response
from linkshortener.lambdas.redirect_url.constants import (
    MISSING_SHORTCODE,
    SHORT_URL_NOT_FOUND,
    SHORT_URL_EXPIRED,
    REDIRECT_SUCCESS,
    REFERER_HEADER,
    TIMEZONE_HEADER,
)


logger = logging.getLogger(__name__)


def response_500(message: str | None = None) -> dict:
    base = 'Internal Server Error'
    body = {'message': base if not message else f'{base} ({message})'}
    return {
        'statusCode': 500,
        'body': json.dumps(body),
    }


def response_error(status_code: int, base: str, message: str | None = None, error_code: str | None = None) -> dict:
    body = {'message': base if not message else f'{base} ({message})'}
    if error_code:
        body['errorCode'] = error_code
    return {
        'statusCode': status_code,
        'headers': {'Content-Type': 'application/json'},
        'body': json.dumps(body),
    }


def response_302(*, location: str) -> dict:
    return {
        'statusCode': 302,
        'headers': {
            'Location': location,
            'Cache-Control': 'no-store',
        },
        'body': json.dumps({}),  # no body needed for redirects
    }


@guarantee_500_response
def lambda_handler(event: dict, context: Any) -> dict:
    """Handle incoming API Gateway requests to redirect URLs

    This Lambda handler follows this procedure to redirect URLs:
    - Step 1: Extract shortcode from request path
    - Step 2: Extract click metadata (referrer, viewer timezone) from headers
    - Step 3: Resolve shortcode (records the click for active short URLs)
    - Step 4: Redirect client to target URL

    HTTP responses:
        302: Successful redirect
            headers:
                Location: target URL destination
        400: Bad client request
            message: missing shortcode in path parameters
        404: Not found
            message: short URL doesn't exist
        410: Gone
            message: short URL has expired
        500: Internal server error
            message: server experienced an internal error

    Args:
        event (dict):
            API Gateway event payload containing the shortcode path parameter.
        context (LambdaContext):
            AWS Lambda runtime context object (not used directly).

    Returns:
        dict:
            API Gateway-compatible response including statusCode, headers, and body.

    Example:
        >>> event = {'pathParameters': {'shortcode': 'aZ3k9Q'}}
        >>> response = lambda_handler(event, None)
        >>> response['statusCode']
        302
        >>> response['headers']['Location']
        'https://example.com/my-page'
    """
    # 0- Get application's config
    try:
        app_config = load_config('redirect_url')
    except FileNotFoundError:
        logger.exception('Failed to load configuration for redirect URL function. Responding with 500.')
        return response_500()
    else:
        redis_config = {f'redis_{k}': v for k, v in app_config['redis'].items()}

    # 1- Extract shortcode from request's path
    shortcode = (event.get('pathParameters') or {}).get('shortcode')
    if not shortcode or not shortcode.strip():
        logger.info(
            'Missing "shortcode" in path. Responding with 400.',
            extra={'event': MISSING_SHORTCODE},
        )
        return response_error(400, 'Bad Request', "missing 'shortcode' in path", MISSING_SHORTCODE)

    # 2- Extract click metadata
    source = get_header(event, REFERER_HEADER)
    location = get_header(event, TIMEZONE_HEADER)

    # 3- Resolve shortcode
    store = ShortURLStore(ShortURLRedisDAO(**redis_config, prefix=app_prefix()))
    resolution = RedirectResolver(store).resolve(shortcode, source=source, location=location)

    if resolution.state is RedirectState.EXPIRED:
        logger.info(
            'Short URL expired. Responding with 410.',
            extra={'shortcode': shortcode, 'event': SHORT_URL_EXPIRED},
        )
        return response_error(410, 'Gone', f'short url {get_short_url(shortcode, event)} has expired', SHORT_URL_EXPIRED)

    if resolution.state is not RedirectState.REDIRECTING:
        logger.info(
            'Short URL record not found in database. Responding with 404.',
            extra={'shortcode': shortcode, 'event': SHORT_URL_NOT_FOUND},
        )
        return response_error(404, 'Not Found', f"short url {get_short_url(shortcode, event)} doesn't exist", SHORT_URL_NOT_FOUND)

    # 4- Redirect client to target URL
    logger.info(
        'Redirecting client to target URL. Responding with 302.',
        extra={'shortcode': shortcode, 'event': REDIRECT_SUCCESS},
    )
    return response_302(location=resolution.original_url)
