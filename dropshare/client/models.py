import threading
from enum import StrEnum
from pathlib import Path
from dataclasses import dataclass, field


class UploadStatus(StrEnum):
    PENDING = 'PENDING'
    COMPLETE = 'COMPLETE'
    ERROR = 'ERROR'


@dataclass
class UploadTask:
    """Client-side upload state of one file.

    `progress` is an UploadStatus, or an int 0..100 while the upload is in flight.
    `cancel_event` is this task's own cancellation handle.
    """

    path: Path
    key: str
    progress: UploadStatus | int = UploadStatus.PENDING
    error: Exception | None = None
    cancel_event: threading.Event = field(default_factory=threading.Event, repr=False, compare=False)

    @property
    def filename(self) -> str:
        return self.path.name

    @property
    def is_pending(self) -> bool:
        return self.progress == UploadStatus.PENDING

    @property
    def in_flight(self) -> bool:
        return isinstance(self.progress, int)
