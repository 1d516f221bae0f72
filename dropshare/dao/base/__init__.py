from dropshare.dao.base.share_record_base_dao import ShareRecordBaseDAO
from dropshare.dao.base.rate_limit_base_dao import RateLimitBaseDAO


__all__ = [
    'ShareRecordBaseDAO',
    'RateLimitBaseDAO',
]
