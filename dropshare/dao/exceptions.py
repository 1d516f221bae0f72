from dropshare.exceptions import DropShareError


class DAOError(DropShareError):
    """Generic base class for DAO-related exceptions."""

    error_code = 'dao:dao_error'


class DataStoreError(DAOError):
    """Raised when the data store encounters an error.

    Examples include connection issues, timeouts, and malformed stored records.
    """

    error_code = 'dao:data_store_error'


class ShareAlreadyExistsError(DAOError):
    """Raised when writing a ShareRecordModel whose share id is still live in the data store."""

    error_code = 'dao:share_already_exists_error'


class ShareIdCollisionError(DAOError):
    """Raised when no free share id could be found within the allowed number of attempts."""

    error_code = 'dao:share_id_collision_error'
