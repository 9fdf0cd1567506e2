import json
import logging
from typing import Any

from linkshortener.dao.redis import ShortURLRedisDAO
from linkshortener.services import ShortURLStore
from linkshortener.utils import load_config, get_short_url, app_prefix, guarantee_500_response


logger = logging.getLogger(__name__)


@guarantee_500_response
def lambda_handler(event: dict[str, Any], context: Any) -> dict[str, Any]:
    """Handle incoming API Gateway requests for short URL statistics

    This Lambda handler follows this procedure:
    - Step 1: Sweep expired short URLs out of the collection
    - Step 2: Load every remaining short URL and the aggregate stats
    - Step 3: Respond with stats and per-URL details (incl. click history)

    HTTP responses:
        200: Statistics
            stats: {totalUrls, totalClicks, activeUrls}
            urls: stored short URLs with 'short_url' and 'expired' fields
        500: Internal server error

    Example:
        >>> response = lambda_handler({}, None)
        >>> json.loads(response['body'])['stats']
        {'totalUrls': 2, 'totalClicks': 5, 'activeUrls': 2}
    """
    # 0- Get application's config
    try:
        app_config = load_config('url_stats')
    except FileNotFoundError:
        logger.exception('Failed to load configuration for URL stats function. Responding with 500.')
        return {'statusCode': 500, 'body': json.dumps({'message': 'Internal Server Error'})}
    else:
        redis_config = {f'redis_{k}': v for k, v in app_config['redis'].items()}

    store = ShortURLStore(ShortURLRedisDAO(**redis_config, prefix=app_prefix()))

    # 1- Sweep expired short URLs
    store.cleanup_expired()

    # 2- Load short URLs and stats
    short_urls = store.list_all()
    stats = store.stats()
    logger.info(
        'Loaded %d URLs with %d total clicks.',
        len(short_urls),
        stats.total_clicks,
        extra=stats.to_dict(),
    )

    # 3- Respond with stats and per-URL details
    urls = [
        {
            **short_url.to_dict(),
            'short_url': get_short_url(short_url.shortcode, event),
            'expired': store.is_expired(short_url),
        }
        for short_url in short_urls
    ]
    return {
        'statusCode': 200,
        'headers': {'Content-Type': 'application/json'},
        'body': json.dumps({'stats': stats.to_dict(), 'urls': urls}),
    }
