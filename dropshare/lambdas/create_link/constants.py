# Structured logging event codes
SHARE_CREATED = 'SHARE_CREATED'
INVALID_REQUEST = 'INVALID_REQUEST'
RATE_LIMIT_EXCEEDED = 'RATE_LIMIT_EXCEEDED'
SHARE_ID_COLLISION = 'SHARE_ID_COLLISION'
DATA_STORE_ERROR = 'DATA_STORE_ERROR'
CONFIGURATION_ERROR = 'CONFIGURATION_ERROR'
