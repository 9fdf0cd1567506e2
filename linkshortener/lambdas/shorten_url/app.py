import json
import logging
from typing import Any

from linkshortener.constants import Validity, MAX_URLS_PER_REQUEST
from linkshortener.dao.redis import ShortURLRedisDAO
from linkshortener.dao.exceptions import DataStoreError
from linkshortener.exceptions import LinkShortenerError
from linkshortener.services import ShortURLStore
from linkshortener.utils import load_config, get_short_url, app_prefix, guarantee_500_response
from linkshortener.lambdas.shorten_url.constants import (
    INVALID_JSON_BODY,
    MISSING_URLS,
    TOO_MANY_URLS,
    INVALID_URL_ITEM,
    STORAGE_FAILURE,
)


logger = logging.getLogger(__name__)

# Set once the expired short URLs were swept in this container
_warmed_up = False


def response(status_code: int, body: dict) -> dict:
    return {
        'statusCode': status_code,
        'headers': {'Content-Type': 'application/json'},
        'body': json.dumps(body),
    }


def response_400(message: str, error_code: str) -> dict:
    return response(400, {'message': f'Bad Request ({message})', 'errorCode': error_code})


def warm_up(store: ShortURLStore) -> None:
    """Remove expired short URLs on the first invocation of a fresh container."""
    global _warmed_up
    if _warmed_up:
        return
    _warmed_up = True

    try:
        removed = store.cleanup_expired()
    except DataStoreError:
        logger.exception('Failed to clean up expired short URLs on warm-up.')
        return
    logger.info('Removed %d expired short URLs on warm-up.', removed, extra={'removed': removed})


def extract_url_items(body: Any) -> list | None:
    """Return the list of URL items from a request body, or None if it holds none.

    Accepted shapes:
        {"urls": [{"original_url": ...}, ...]}
        {"original_url": ...}
    """
    if not isinstance(body, dict):
        return None
    if 'urls' in body:
        return body['urls'] if isinstance(body['urls'], list) and body['urls'] else None
    return [body] if body.get('original_url') else None


def shorten_item(store: ShortURLStore, item: Any, event: dict) -> dict:
    """Shorten a single URL item. Failures are reported in the result, not raised."""
    if not isinstance(item, dict):
        return {'success': False, 'message': 'URL item must be a JSON object.', 'errorCode': INVALID_URL_ITEM}

    original_url = item.get('original_url')
    custom_shortcode = item.get('custom_shortcode')
    validity_minutes = item.get('validity_minutes', Validity.DEFAULT)
    if (
        not isinstance(original_url, str)
        or not isinstance(custom_shortcode, (str, type(None)))
        or not isinstance(validity_minutes, int)
        or isinstance(validity_minutes, bool)
    ):
        return {'success': False, 'message': 'URL item has fields of invalid type.', 'errorCode': INVALID_URL_ITEM}

    try:
        short_url = store.create(original_url, custom_shortcode, validity_minutes)
    except LinkShortenerError as e:
        logger.info('Failed to shorten URL: %s', e, extra={'original_url': original_url, 'errorCode': e.error_code})
        return {'success': False, 'message': str(e), 'errorCode': e.error_code}
    except DataStoreError:
        logger.exception('Failed to store short URL.', extra={'original_url': original_url})
        return {'success': False, 'message': 'Failed to store short URL.', 'errorCode': STORAGE_FAILURE}

    return {
        'success': True,
        'short_url': get_short_url(short_url.shortcode, event),
        **short_url.to_dict(),
    }


@guarantee_500_response
def lambda_handler(event: dict[str, Any], context: Any) -> dict[str, Any]:
    """Handle incoming API Gateway requests to shorten URLs

    This Lambda handler follows this procedure to shorten URLs:
    - Step 1: Sweep expired short URLs (first invocation of a container only)
    - Step 2: Extract URL items from request body (at most 5)
    - Step 3: Shorten every item independently (validate, allocate shortcode, store)
    - Step 4: Respond with per-item results

    HTTP responses:
        200: Request processed (see per-item 'success' flags)
            results: list of shortened records or per-item errors
        400: Bad client request
            message: invalid JSON, missing URLs or too many URLs
        500: Internal server error
            message: indicate the server experienced an internal error
            results: per-item results when no item could be stored

    Args:
        event (Dict[str, Any]):
            API Gateway event payload in Lambda Proxy format.
        context (Any):
            AWS Lambda context object containing runtime information.

    Returns:
        Dict[str, Any]:
            JSON-serializable response following API Gateway Lambda Proxy format.

    Example:
        >>> event = {'body': '{"urls": [{"original_url": "https://example.com", "validity_minutes": 60}]}'}
        >>> response = lambda_handler(event, None)
        >>> response['statusCode']
        200
        >>> json.loads(response['body'])['results'][0]['shortcode']
        'aZ3k9Q'
    """
    # 0- Get application's config
    try:
        app_config = load_config('shorten_url')
    except FileNotFoundError:
        logger.exception('Failed to load configuration for shorten URL function. Responding with 500.')
        return response(500, {'message': 'Internal Server Error'})
    else:
        redis_config = {f'redis_{k}': v for k, v in app_config['redis'].items()}

    store = ShortURLStore(ShortURLRedisDAO(**redis_config, prefix=app_prefix()))

    # 1- Sweep expired short URLs on a cold start
    warm_up(store)

    # 2- Extract URL items from request body
    try:
        request_body = json.loads(event.get('body') or '{}')
    except json.JSONDecodeError:
        return response_400('invalid JSON body', INVALID_JSON_BODY)

    items = extract_url_items(request_body)
    if items is None:
        return response_400("missing 'urls' or 'original_url' in JSON body", MISSING_URLS)
    if len(items) > MAX_URLS_PER_REQUEST:
        logger.warning('Attempted to shorten more than %d URLs at once.', MAX_URLS_PER_REQUEST, extra={'count': len(items)})
        return response_400(f'at most {MAX_URLS_PER_REQUEST} URLs per request', TOO_MANY_URLS)

    # 3- Shorten every item independently
    results = [shorten_item(store, item, event) for item in items]

    # 4- Respond with per-item results
    shortened = sum(1 for result in results if result['success'])
    logger.info('Shortened %d of %d URLs.', shortened, len(results))
    if not shortened and any(result.get('errorCode') == STORAGE_FAILURE for result in results):
        return response(500, {'message': 'Internal Server Error (failed to store short URLs)', 'results': results})
    return response(200, {'message': f'Shortened {shortened} of {len(results)} URLs', 'results': results})
