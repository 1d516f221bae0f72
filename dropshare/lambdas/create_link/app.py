import json
import base64
import logging

from dropshare.models import RateLimitDecision
from dropshare.dao.redis import ShareRecordRedisDAO, RateLimitRedisDAO
from dropshare.dao.exceptions import DataStoreError, ShareIdCollisionError
from dropshare.exceptions import ConfigurationError, RateLimitExceededError, ValidationError
from dropshare.services import LinkCreationService
from dropshare.utils import load_config, app_prefix, base_url, share_url, client_address, guarantee_500_response
from dropshare.constants import RateLimit
from dropshare.lambdas.create_link.constants import (
    SHARE_CREATED,
    INVALID_REQUEST,
    RATE_LIMIT_EXCEEDED,
    SHARE_ID_COLLISION,
    DATA_STORE_ERROR,
    CONFIGURATION_ERROR,
)


logger = logging.getLogger(__name__)


def _headers(rate_limit: RateLimitDecision | None) -> dict:
    headers = {'Content-Type': 'application/json'}
    if rate_limit is not None:
        headers.update(rate_limit.headers())
    return headers


def response_201(*, share_id: str, share_url: str, rate_limit: RateLimitDecision) -> dict:
    return {
        'statusCode': 201,
        'headers': _headers(rate_limit),
        'body': json.dumps({'shareId': share_id, 'shareUrl': share_url}),
    }


def response_400(*, violations: list[str], rate_limit: RateLimitDecision | None) -> dict:
    return {
        'statusCode': 400,
        'headers': _headers(rate_limit),
        'body': json.dumps(
            {
                'message': 'Invalid request body',
                'code': INVALID_REQUEST,
                'violations': violations,
            }
        ),
    }


def response_429(*, rate_limit: RateLimitDecision) -> dict:
    headers = _headers(rate_limit)
    headers['Retry-After'] = str(rate_limit.retry_after)
    return {
        'statusCode': 429,
        'headers': headers,
        'body': json.dumps(
            {
                'message': 'Too many requests. Please try again later.',
                'code': RATE_LIMIT_EXCEEDED,
            }
        ),
    }


def response_500(*, rate_limit: RateLimitDecision | None = None) -> dict:
    return {
        'statusCode': 500,
        'headers': _headers(rate_limit),
        'body': json.dumps({'message': 'Internal server error'}),
    }


def _request_body(event: dict) -> str | bytes | None:
    body = event.get('body')
    if body is not None and event.get('isBase64Encoded'):
        return base64.b64decode(body)
    return body


@guarantee_500_response
def lambda_handler(event: dict, context) -> dict:
    """Handle incoming API Gateway requests to create share links

    This Lambda handler follows this procedure to create share links:
    - Step 1: Extract client address from X-Forwarded-For (fallback 127.0.0.1)
    - Step 2: Consult the sliding-window rate limiter
    - Step 3: Validate the request body
    - Step 4: Generate a share id and store the share record for 10 minutes
    - Step 5: Respond to client with 201

    HTTP responses (all carry X-RateLimit-* headers once the limiter answered):
        201: Share created
            shareId: newly generated share id
            shareUrl: public URL of the share page
        400: Bad client request
            message, code=INVALID_REQUEST, violations: every validation failure
        429: Too many requests from this client address
            message, code=RATE_LIMIT_EXCEEDED (plus Retry-After header)
        500: Internal server error
            message: generic message, details are logged only

    Args:
        event (dict):
            API Gateway event payload in Lambda Proxy format.
        context (LambdaContext):
            AWS Lambda context object containing runtime information.

    Returns:
        dict:
            API Gateway-compatible response including statusCode, headers, and body.

    Example:
        >>> event = {'body': '{"files": [{"url": "https://store.example/abc", "filename": "report.pdf"}]}'}
        >>> response = lambda_handler(event, None)
        >>> response['statusCode']
        201
        >>> json.loads(response['body'])['shareId']
        'V1StGXR8_Z'
    """
    # 0- Get application's config
    try:
        app_config = load_config('create_link')
    except ConfigurationError:
        logger.exception('Failed to load AppConfig for create link function. Responding with 500.', extra={'event': CONFIGURATION_ERROR})
        return response_500()
    else:
        logger.debug('Assuming Redis as the backend database for share records')
        redis_config = {f'redis_{k}': v for k, v in app_config['redis'].items()}
        rate_limit_config = app_config.get('rate_limit', {})

    # 1- Extract client address
    address = client_address(event)

    # Create DAO classes to access share records and the rate limiter (one Redis client, pinged once)
    try:
        share_dao = ShareRecordRedisDAO(**redis_config, prefix=app_prefix())
        rate_limiter = RateLimitRedisDAO(
            redis_client=share_dao.redis,
            healthcheck=False,
            prefix=app_prefix(),
            limit=int(rate_limit_config.get('limit', RateLimit.LIMIT)),
            window_seconds=int(rate_limit_config.get('window_seconds', RateLimit.WINDOW_SECONDS)),
        )
    except DataStoreError:
        logger.exception('Redis is unreachable. Responding with 500.', extra={'event': DATA_STORE_ERROR})
        return response_500()

    service = LinkCreationService(share_dao=share_dao, rate_limiter=rate_limiter)

    # 2-4- Rate limit, validate and store
    try:
        result = service.create(address, _request_body(event))
    except RateLimitExceededError as e:
        logger.info(
            'Rate limit exceeded for client. Responding with 429.',
            extra={'clientAddress': address, 'event': RATE_LIMIT_EXCEEDED},
        )
        return response_429(rate_limit=e.rate_limit)
    except ValidationError as e:
        logger.info(
            'Invalid create link request. Responding with 400.',
            extra={'clientAddress': address, 'violations': e.violations, 'event': INVALID_REQUEST},
        )
        return response_400(violations=e.violations, rate_limit=e.rate_limit)
    except ShareIdCollisionError as e:
        logger.exception('Could not allocate a free share id. Responding with 500.', extra={'event': SHARE_ID_COLLISION})
        return response_500(rate_limit=e.rate_limit)
    except DataStoreError as e:
        logger.exception('Data store failure while creating share. Responding with 500.', extra={'event': DATA_STORE_ERROR})
        return response_500(rate_limit=e.rate_limit)

    # 5- Return successful response to client
    logger.info(
        'Share link created. Responding with 201.',
        extra={
            'shareId': result.share_id,
            'files': len(result.record.files),
            'remaining': result.rate_limit.remaining,
            'event': SHARE_CREATED,
        },
    )
    return response_201(
        share_id=result.share_id,
        share_url=share_url(result.share_id, base_url(event)),
        rate_limit=result.rate_limit,
    )
