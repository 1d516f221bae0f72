# Structured logging event codes
SHARE_RESOLVED = 'SHARE_RESOLVED'
SHARE_NOT_FOUND = 'SHARE_NOT_FOUND'
MISSING_SHARE_ID = 'MISSING_SHARE_ID'
DATA_STORE_ERROR = 'DATA_STORE_ERROR'
CONFIGURATION_ERROR = 'CONFIGURATION_ERROR'
