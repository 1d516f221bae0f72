from dropshare.client.models import UploadTask, UploadStatus
from dropshare.client.link_client import LinkClient
from dropshare.client.orchestrator import UploadOrchestrator
from dropshare.client.upload_service import UploadService, S3UploadService

__all__ = [
    'UploadTask',
    'UploadStatus',
    'LinkClient',
    'UploadOrchestrator',
    'UploadService',
    'S3UploadService',
]
