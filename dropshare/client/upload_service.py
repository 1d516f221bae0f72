"""Object storage upload services

Classes:
    UploadService:
        Interface: upload one file, report progress, honor a cancel handle,
        return a URL others can download the file from.

    S3UploadService:
        Amazon S3 implementation. Objects are tagged `temporary=true` so a bucket
        lifecycle rule can expire them, and the returned URL is a presigned GET
        valid for the share TTL.

Example:
    >>> service = S3UploadService(bucket='dropshare-uploads')
    >>> url = service.upload(Path('report.pdf'), on_progress=print, cancel_event=threading.Event())
    0
    ...
    100
"""

import uuid
import logging
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from collections.abc import Callable

import boto3
from botocore.client import BaseClient
from botocore.exceptions import BotoCoreError, ClientError
from boto3.exceptions import S3UploadFailedError

from dropshare.client.exceptions import UploadError, UploadAbortedError
from dropshare.constants import TTL


logger = logging.getLogger(__name__)

type ProgressCallback = Callable[[int], None]


class UploadService(ABC):
    @abstractmethod
    def upload(self, path: Path, *, on_progress: ProgressCallback, cancel_event: threading.Event) -> str:
        """Upload a file and return a retrievable URL.

        Args:
            path (Path):
                Local file to upload.
            on_progress (Callable[[int], None]):
                Called with whole percentages 0..100 as bytes are sent.
            cancel_event (threading.Event):
                When set, the upload stops as soon as possible.

        Returns:
            str: URL the file can be downloaded from.

        Raises:
            UploadAbortedError:
                If cancel_event was set before the upload finished.
            UploadError:
                On any other upload failure.
        """
        pass


class S3UploadService(UploadService):
    def __init__(
        self,
        bucket: str,
        s3_client: BaseClient | None = None,
        key_prefix: str = 'uploads/',
        url_expires_in: int = TTL.SHARE,
    ):
        self.bucket = bucket
        self.s3 = s3_client or boto3.client('s3')
        self.key_prefix = key_prefix
        self.url_expires_in = url_expires_in

    def object_key(self, path: Path) -> str:
        return f'{self.key_prefix}{uuid.uuid4().hex}/{path.name}'

    def upload(self, path: Path, *, on_progress: ProgressCallback, cancel_event: threading.Event) -> str:
        if cancel_event.is_set():
            raise UploadAbortedError(f'Upload of {path.name} cancelled before it started.')

        key = self.object_key(path)
        try:
            total = path.stat().st_size
        except OSError as e:
            raise UploadError(f"Can't read {path}.") from e

        sent = 0

        # NOTE: raising from the transfer callback is the only way to stop an
        #       in-flight boto3 transfer; s3transfer re-raises it from upload_fileobj().
        def callback(bytes_amount: int) -> None:
            nonlocal sent
            if cancel_event.is_set():
                raise UploadAbortedError(f'Upload of {path.name} cancelled.')
            sent += bytes_amount
            on_progress(min(100, sent * 100 // total) if total else 100)

        on_progress(0)
        try:
            with path.open('rb') as f:
                self.s3.upload_fileobj(
                    f,
                    self.bucket,
                    key,
                    ExtraArgs={'Tagging': 'temporary=true'},
                    Callback=callback,
                )
        except UploadAbortedError:
            raise
        except (S3UploadFailedError, BotoCoreError, ClientError, OSError) as e:
            if cancel_event.is_set():
                raise UploadAbortedError(f'Upload of {path.name} cancelled.') from e
            raise UploadError(f'Failed to upload {path.name} to s3://{self.bucket}/{key}.') from e

        on_progress(100)
        logger.debug('Uploaded file to S3.', extra={'bucket': self.bucket, 'key': key, 'size': total})

        try:
            return self.s3.generate_presigned_url(
                'get_object',
                Params={'Bucket': self.bucket, 'Key': key},
                ExpiresIn=self.url_expires_in,
            )
        except (BotoCoreError, ClientError) as e:
            raise UploadError(f'Failed to presign s3://{self.bucket}/{key}.') from e
