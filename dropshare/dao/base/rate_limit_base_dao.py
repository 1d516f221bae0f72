from abc import ABC, abstractmethod

from dropshare.models import RateLimitDecision


class RateLimitBaseDAO(ABC):
    """Interface for per-client request rate limiters.

    Implementations record the request on every check, whether or not it is allowed.
    """

    @abstractmethod
    def check(self, client_address: str, **kwargs) -> RateLimitDecision:
        """Record a request from client_address and decide whether it may proceed.

        Raises:
            DataStoreError:
                If the limiter backend is unreachable.
        """
        pass
