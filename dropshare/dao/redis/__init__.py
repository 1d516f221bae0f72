from dropshare.dao.redis.redis_key_schema import RedisKeySchema
from dropshare.dao.redis.mixins import RedisClientMixin
from dropshare.dao.redis.share_record_redis_dao import ShareRecordRedisDAO
from dropshare.dao.redis.rate_limit_redis_dao import RateLimitRedisDAO


__all__ = [
    'RedisKeySchema',
    'RedisClientMixin',
    'ShareRecordRedisDAO',
    'RateLimitRedisDAO',
]
