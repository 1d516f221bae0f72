"""Upload orchestration for one sharing session

UploadOrchestrator follows this procedure for a batch:
    - Step 1: Fan out every PENDING task onto a thread pool
    - Step 2: Drive each task's state from its upload's progress callbacks:
              PENDING -> 0..100 -> COMPLETE, or -> ERROR, or back to PENDING on cancel
    - Step 3: Wait until every upload of the batch has settled (barrier)
    - Step 4: Send the successful {url, filename} pairs to /create-link, once

Cancelling one upload never affects the others. A batch without any successful
upload makes no server call.

Example:
    >>> orchestrator = UploadOrchestrator(S3UploadService('dropshare-uploads'), LinkClient('https://share.example.com'))
    >>> orchestrator.add(Path('report.pdf'))
    UploadTask(path=PosixPath('report.pdf'), key='...', progress=<UploadStatus.PENDING: 'PENDING'>, error=None)
    >>> orchestrator.upload()
    'V1StGXR8_Z'
"""

import time
import uuid
import logging
import threading
from pathlib import Path
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor

from dropshare.models import SharedFileModel
from dropshare.client.models import UploadTask, UploadStatus
from dropshare.client.exceptions import UploadError, UploadAbortedError, FileRejectedError
from dropshare.client.upload_service import UploadService
from dropshare.client.link_client import LinkClient
from dropshare.constants import UploadLimits


logger = logging.getLogger(__name__)


class UploadOrchestrator:
    def __init__(
        self,
        upload_service: UploadService,
        link_client: LinkClient,
        max_files: int = UploadLimits.MAX_FILES,
        max_file_size: int = UploadLimits.MAX_FILE_SIZE,
        complete_delay: float = UploadLimits.COMPLETE_DELAY_SECONDS,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.upload_service = upload_service
        self.link_client = link_client
        self.max_files = max_files
        self.max_file_size = max_file_size
        self.complete_delay = complete_delay
        self.sleep = sleep
        self._tasks: list[UploadTask] = []
        self._lock = threading.Lock()

    @property
    def tasks(self) -> list[UploadTask]:
        with self._lock:
            return list(self._tasks)

    @property
    def pending_count(self) -> int:
        return sum(1 for t in self.tasks if t.is_pending)

    def get(self, key: str) -> UploadTask:
        for task in self.tasks:
            if task.key == key:
                return task
        raise KeyError(key)

    def add(self, path: Path | str) -> UploadTask:
        """Add a file to the session as a PENDING task.

        Raises:
            FileRejectedError:
                If the path is not a regular file, is larger than max_file_size,
                or the session already holds max_files files.
        """
        path = Path(path)
        if not path.is_file():
            raise FileRejectedError(f'{path} is not a file.')
        if path.stat().st_size > self.max_file_size:
            raise FileRejectedError(f'The file is too large. Max size is {self.max_file_size} bytes.')

        with self._lock:
            if len(self._tasks) >= self.max_files:
                raise FileRejectedError(f'You can only add {self.max_files} file(s).')
            task = UploadTask(path=path, key=uuid.uuid4().hex)
            self._tasks.append(task)
        return task

    def remove(self, key: str) -> None:
        with self._lock:
            self._tasks = [t for t in self._tasks if t.key != key]

    def reset(self) -> None:
        with self._lock:
            self._tasks = []

    def cancel(self, key: str) -> bool:
        """Cancel one in-flight upload.

        Returns False if the task is not in flight, or if its transfer already
        reached 100% and it is only waiting to flip to COMPLETE.
        """
        task = self.get(key)
        with self._lock:
            if not task.in_flight or task.progress >= 100:
                return False
            task.cancel_event.set()
        return True

    def upload(self) -> str | None:
        """Upload every PENDING file, then create one share link for the successes.

        Returns:
            str | None: the share id, or None if no upload of the batch succeeded.

        Raises:
            LinkCreationError:
                If the server refuses to create the link.
        """
        batch = [t for t in self.tasks if t.is_pending]
        if not batch:
            return None

        for task in batch:
            task.cancel_event.clear()

        with ThreadPoolExecutor(max_workers=len(batch), thread_name_prefix='dropshare-upload') as pool:
            futures = [pool.submit(self._run, task) for task in batch]
            # Barrier: every upload settles before the link is created
            results = [f.result() for f in futures]

        uploaded = [r for r in results if r is not None]
        logger.info(
            'Upload batch settled.',
            extra={'batch': len(batch), 'uploaded': len(uploaded)},
        )
        if not uploaded:
            return None

        return self.link_client.create_link(uploaded)

    def _update(self, task: UploadTask, **changes) -> None:
        with self._lock:
            for name, value in changes.items():
                setattr(task, name, value)

    def _run(self, task: UploadTask) -> SharedFileModel | None:
        try:
            url = self.upload_service.upload(
                task.path,
                on_progress=lambda p: self._update(task, progress=p),
                cancel_event=task.cancel_event,
            )
        except UploadAbortedError:
            logger.info('Upload cancelled.', extra={'key': task.key, 'fileName': task.filename})
            self._update(task, progress=UploadStatus.PENDING)
            return None
        except UploadError as e:
            logger.warning('Upload failed.', exc_info=True, extra={'key': task.key, 'fileName': task.filename})
            self._update(task, progress=UploadStatus.ERROR, error=e)
            return None

        # Hold 100% briefly so the terminal progress value is observable
        self._update(task, progress=100)
        self.sleep(self.complete_delay)
        self._update(task, progress=UploadStatus.COMPLETE, error=None)
        return SharedFileModel(url=url, filename=task.filename)
