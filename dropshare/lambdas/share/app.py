import json
import logging

from dropshare.dao.redis import ShareRecordRedisDAO
from dropshare.dao.exceptions import DataStoreError
from dropshare.exceptions import ConfigurationError, ShareNotFoundError
from dropshare.services import LinkResolutionService, ResolvedShare
from dropshare.utils import load_config, app_prefix, get_header, guarantee_500_response
from dropshare.lambdas.share.templates import render_share_page, render_not_found_page
from dropshare.lambdas.share.constants import (
    SHARE_RESOLVED,
    SHARE_NOT_FOUND,
    MISSING_SHARE_ID,
    DATA_STORE_ERROR,
    CONFIGURATION_ERROR,
)


logger = logging.getLogger(__name__)


def wants_json(event: dict) -> bool:
    accept = get_header(event, 'Accept') or ''
    return 'application/json' in accept.lower()


def response_200(*, share: ResolvedShare, as_json: bool) -> dict:
    if as_json:
        body = json.dumps(
            {
                'files': [f.to_dict() for f in share.files],
                'minutesRemaining': share.minutes_remaining,
                'expiresAt': share.expires_at.isoformat(timespec='milliseconds').replace('+00:00', 'Z'),
            }
        )
        content_type = 'application/json'
    else:
        body = render_share_page(share)
        content_type = 'text/html; charset=utf-8'
    return {
        'statusCode': 200,
        'headers': {'Content-Type': content_type, 'Cache-Control': 'no-store'},
        'body': body,
    }


def response_404(*, as_json: bool) -> dict:
    if as_json:
        body = json.dumps({'message': 'Share not found', 'code': SHARE_NOT_FOUND})
        content_type = 'application/json'
    else:
        body = render_not_found_page()
        content_type = 'text/html; charset=utf-8'
    return {
        'statusCode': 404,
        'headers': {'Content-Type': content_type, 'Cache-Control': 'no-store'},
        'body': body,
    }


def response_500() -> dict:
    return {
        'statusCode': 500,
        'headers': {'Content-Type': 'application/json'},
        'body': json.dumps({'message': 'Internal server error'}),
    }


@guarantee_500_response
def lambda_handler(event: dict, context) -> dict:
    """Handle incoming API Gateway requests for a share page

    This Lambda handler follows this procedure to serve shares:
    - Step 1: Extract share id from request path
    - Step 2: Resolve the share (missing and expired shares are both not found)
    - Step 3: Render the file list with minutes remaining

    HTTP responses:
        200: Share page (HTML), or {files, minutesRemaining, expiresAt} with Accept: application/json
        404: Share missing, expired, or no id in path
        500: Internal server error

    Example:
        >>> event = {'pathParameters': {'id': 'V1StGXR8_Z'}, 'headers': {'Accept': 'application/json'}}
        >>> response = lambda_handler(event, None)
        >>> json.loads(response['body'])['minutesRemaining']
        9
    """
    as_json = wants_json(event)

    # 0- Get application's config
    try:
        app_config = load_config('share')
    except ConfigurationError:
        logger.exception('Failed to load AppConfig for share function. Responding with 500.', extra={'event': CONFIGURATION_ERROR})
        return response_500()
    else:
        logger.debug('Assuming Redis as the backend database for share records')
        redis_config = {f'redis_{k}': v for k, v in app_config['redis'].items()}

    # 1- Extract share id from request's path
    share_id = (event.get('pathParameters') or {}).get('id')
    if not share_id:
        logger.info('Missing "id" in path. Responding with 404.', extra={'event': MISSING_SHARE_ID})
        return response_404(as_json=as_json)

    # 2- Resolve the share
    try:
        share_dao = ShareRecordRedisDAO(**redis_config, prefix=app_prefix())
        share = LinkResolutionService(share_dao=share_dao).resolve(share_id)
    except ShareNotFoundError:
        logger.info(
            'Share not found or expired. Responding with 404.',
            extra={'shareId': share_id, 'event': SHARE_NOT_FOUND},
        )
        return response_404(as_json=as_json)
    except DataStoreError:
        logger.exception(
            'Data store failure while resolving share. Responding with 500.',
            extra={'shareId': share_id, 'event': DATA_STORE_ERROR},
        )
        return response_500()

    # 3- Render share
    logger.info(
        'Share resolved. Responding with 200.',
        extra={'shareId': share_id, 'minutesRemaining': share.minutes_remaining, 'event': SHARE_RESOLVED},
    )
    return response_200(share=share, as_json=as_json)
