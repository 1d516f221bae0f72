from dropshare.exceptions import DropShareError


class ClientError(DropShareError):
    """Base class for client-side upload and link creation errors."""

    error_code = 'client:client_error'


class UploadError(ClientError):
    """Raised when uploading a file to object storage fails."""

    error_code = 'client:upload_error'


class UploadAbortedError(UploadError):
    """Raised when an upload is cancelled through its cancel handle.

    Cancellation is not a failure: the task goes back to PENDING and can be retried.
    """

    error_code = 'client:upload_aborted_error'


class FileRejectedError(ClientError):
    """Raised when a file cannot be added to the batch (too large, too many files, not a file)."""

    error_code = 'client:file_rejected_error'


class LinkCreationError(ClientError):
    """Raised when the create-link endpoint answers with a non-success status.

    Attributes:
        status (int | None):
            HTTP status, None when the server could not be reached.
        code (str | None):
            Machine readable error code from the response body, if any.
        retry_after (int | None):
            Seconds to wait before retrying (429 responses only).
    """

    error_code = 'client:link_creation_error'

    def __init__(self, message: str, status: int | None = None, code: str | None = None, retry_after: int | None = None):
        super().__init__(message)
        self.status = status
        self.code = code
        self.retry_after = retry_after
