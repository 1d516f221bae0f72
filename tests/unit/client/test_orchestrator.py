import threading
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from dropshare.models import SharedFileModel
from dropshare.client.models import UploadStatus
from dropshare.client.exceptions import UploadError, UploadAbortedError, FileRejectedError, LinkCreationError
from dropshare.client.link_client import LinkClient
from dropshare.client.orchestrator import UploadOrchestrator
from dropshare.client.upload_service import UploadService


WAIT = 5  # seconds; generous upper bound for thread hand-offs


class FakeUploadService(UploadService):
    """Upload service whose uploads can be held open, failed or cancelled from the test."""

    def __init__(self, names: list[str]):
        self.started = {name: threading.Event() for name in names}
        self.release = {name: threading.Event() for name in names}
        self.failing: set[str] = set()
        for event in self.release.values():
            event.set()

    def hold(self, name: str) -> None:
        self.release[name].clear()

    def upload(self, path: Path, *, on_progress, cancel_event: threading.Event) -> str:
        on_progress(0)
        self.started[path.name].set()
        while not self.release[path.name].wait(0.01):
            if cancel_event.is_set():
                raise UploadAbortedError(f'Upload of {path.name} cancelled.')
        if path.name in self.failing:
            raise UploadError(f'Failed to upload {path.name}.')
        on_progress(50)
        on_progress(100)
        return f'https://store.example/{path.name}'


@pytest.fixture
def files(tmp_path: Path) -> list[Path]:
    paths = []
    for name in ('a.txt', 'b.txt', 'c.txt'):
        path = tmp_path / name
        path.write_bytes(b'x' * 16)
        paths.append(path)
    return paths


@pytest.fixture
def upload_service(files: list[Path]) -> FakeUploadService:
    return FakeUploadService([p.name for p in files])


@pytest.fixture
def link_client() -> LinkClient:
    client = MagicMock(spec=LinkClient)
    client.create_link.return_value = 'V1StGXR8_Z'
    return client


@pytest.fixture
def orchestrator(upload_service: FakeUploadService, link_client: LinkClient) -> UploadOrchestrator:
    return UploadOrchestrator(upload_service, link_client, sleep=MagicMock())


class TestAddingFiles:
    def test_add_file(self, orchestrator: UploadOrchestrator, files: list[Path]):
        task = orchestrator.add(files[0])

        assert task.filename == 'a.txt'
        assert task.progress == UploadStatus.PENDING
        assert orchestrator.tasks == [task]
        assert orchestrator.pending_count == 1

    def test_keys_are_unique(self, orchestrator: UploadOrchestrator, files: list[Path]):
        first, second = orchestrator.add(files[0]), orchestrator.add(files[0])
        assert first.key != second.key

    def test_add_rejects_missing_file(self, orchestrator: UploadOrchestrator, tmp_path: Path):
        with pytest.raises(FileRejectedError, match='is not a file'):
            orchestrator.add(tmp_path / 'missing.txt')

    def test_add_rejects_directory(self, orchestrator: UploadOrchestrator, tmp_path: Path):
        with pytest.raises(FileRejectedError):
            orchestrator.add(tmp_path)

    def test_add_rejects_large_file(self, upload_service, link_client, tmp_path: Path):
        orchestrator = UploadOrchestrator(upload_service, link_client, max_file_size=10)
        path = tmp_path / 'big.bin'
        path.write_bytes(b'x' * 11)

        with pytest.raises(FileRejectedError, match='too large'):
            orchestrator.add(path)
        assert orchestrator.tasks == []

    def test_add_accepts_file_at_size_limit(self, upload_service, link_client, tmp_path: Path):
        orchestrator = UploadOrchestrator(upload_service, link_client, max_file_size=10)
        path = tmp_path / 'exact.bin'
        path.write_bytes(b'x' * 10)

        assert orchestrator.add(path).filename == 'exact.bin'

    def test_add_rejects_sixth_file(self, orchestrator: UploadOrchestrator, files: list[Path]):
        for _ in range(5):
            orchestrator.add(files[0])

        with pytest.raises(FileRejectedError, match='only add 5'):
            orchestrator.add(files[1])
        assert len(orchestrator.tasks) == 5

    def test_remove_and_reset(self, orchestrator: UploadOrchestrator, files: list[Path]):
        a, b, c = (orchestrator.add(p) for p in files)

        orchestrator.remove(b.key)
        assert orchestrator.tasks == [a, c]

        orchestrator.reset()
        assert orchestrator.tasks == []

    def test_cancel_pending_task_is_a_no_op(self, orchestrator: UploadOrchestrator, files: list[Path]):
        task = orchestrator.add(files[0])

        assert orchestrator.cancel(task.key) is False
        assert not task.cancel_event.is_set()

    def test_cancel_unknown_task(self, orchestrator: UploadOrchestrator):
        with pytest.raises(KeyError):
            orchestrator.cancel('nope')


class TestUploading:
    def test_upload_all_files(self, orchestrator: UploadOrchestrator, link_client, files: list[Path]):
        tasks = [orchestrator.add(p) for p in files]

        assert orchestrator.upload() == 'V1StGXR8_Z'

        assert [t.progress for t in tasks] == [UploadStatus.COMPLETE] * 3
        link_client.create_link.assert_called_once_with(
            [
                SharedFileModel(url='https://store.example/a.txt', filename='a.txt'),
                SharedFileModel(url='https://store.example/b.txt', filename='b.txt'),
                SharedFileModel(url='https://store.example/c.txt', filename='c.txt'),
            ]
        )

    def test_progress_holds_at_100_before_complete(self, upload_service, link_client, files: list[Path]):
        observed = []
        orchestrator = UploadOrchestrator(upload_service, link_client, sleep=lambda s: observed.append((s, task.progress)))
        task = orchestrator.add(files[0])

        orchestrator.upload()

        assert observed == [(1.0, 100)]
        assert task.progress == UploadStatus.COMPLETE

    def test_cancel_after_transfer_finished_is_refused(self, upload_service, link_client, files: list[Path]):
        cancelled = []
        orchestrator = UploadOrchestrator(upload_service, link_client, sleep=lambda s: cancelled.append(orchestrator.cancel(task.key)))
        task = orchestrator.add(files[0])

        assert orchestrator.upload() == 'V1StGXR8_Z'

        assert cancelled == [False]
        assert not task.cancel_event.is_set()
        assert task.progress == UploadStatus.COMPLETE
        link_client.create_link.assert_called_once()

    def test_failed_uploads_are_excluded(self, orchestrator: UploadOrchestrator, upload_service, link_client, files: list[Path]):
        upload_service.failing.add('b.txt')
        a, b, c = (orchestrator.add(p) for p in files)

        assert orchestrator.upload() == 'V1StGXR8_Z'

        assert b.progress == UploadStatus.ERROR
        assert isinstance(b.error, UploadError)
        assert a.progress == c.progress == UploadStatus.COMPLETE
        (shared,), _ = link_client.create_link.call_args
        assert [f.filename for f in shared] == ['a.txt', 'c.txt']

    def test_no_server_call_when_every_upload_fails(self, orchestrator: UploadOrchestrator, upload_service, link_client, files: list[Path]):
        upload_service.failing.update(p.name for p in files)
        tasks = [orchestrator.add(p) for p in files]

        assert orchestrator.upload() is None

        assert [t.progress for t in tasks] == [UploadStatus.ERROR] * 3
        link_client.create_link.assert_not_called()

    def test_upload_without_pending_files(self, orchestrator: UploadOrchestrator, link_client):
        assert orchestrator.upload() is None
        link_client.create_link.assert_not_called()

    def test_completed_files_are_not_uploaded_again(self, orchestrator: UploadOrchestrator, link_client, files: list[Path]):
        orchestrator.add(files[0])
        orchestrator.upload()
        orchestrator.add(files[1])

        orchestrator.upload()

        (shared,), _ = link_client.create_link.call_args_list[-1]
        assert [f.filename for f in shared] == ['b.txt']

    def test_link_creation_error_propagates(self, orchestrator: UploadOrchestrator, link_client, files: list[Path]):
        link_client.create_link.side_effect = LinkCreationError('Too many requests. Please try again later.', status=429, retry_after=4)
        orchestrator.add(files[0])

        with pytest.raises(LinkCreationError) as exc_info:
            orchestrator.upload()
        assert exc_info.value.retry_after == 4

    def test_cancel_one_upload_while_others_succeed(
        self,
        orchestrator: UploadOrchestrator,
        upload_service: FakeUploadService,
        link_client,
        files: list[Path],
    ):
        for p in files:
            upload_service.hold(p.name)
        a, b, c = (orchestrator.add(p) for p in files)

        result = {}
        worker = threading.Thread(target=lambda: result.setdefault('share_id', orchestrator.upload()))
        worker.start()

        for p in files:
            assert upload_service.started[p.name].wait(WAIT)
        assert b.in_flight

        assert orchestrator.cancel(b.key) is True
        upload_service.release['a.txt'].set()
        upload_service.release['c.txt'].set()
        worker.join(WAIT)

        assert not worker.is_alive()
        assert result['share_id'] == 'V1StGXR8_Z'
        assert b.progress == UploadStatus.PENDING
        assert a.progress == c.progress == UploadStatus.COMPLETE
        link_client.create_link.assert_called_once()
        (shared,), _ = link_client.create_link.call_args
        assert [f.filename for f in shared] == ['a.txt', 'c.txt']

        # The cancelled file can be retried on its own
        upload_service.release['b.txt'].set()
        assert orchestrator.upload() == 'V1StGXR8_Z'
        assert b.progress == UploadStatus.COMPLETE
        (shared,), _ = link_client.create_link.call_args
        assert [f.filename for f in shared] == ['b.txt']
