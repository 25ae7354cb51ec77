"""Custom exceptions for pool, strategy and market failures."""


class PoolError(Exception):
    """Base exception for all pool-specific errors."""


class ConfigurationError(PoolError):
    """Raised when a call is wired or addressed incorrectly."""


class IndexOutOfRange(ConfigurationError):
    """Raised when a strategy index does not exist in the registry."""


class AssetMismatch(ConfigurationError):
    """Raised when an adapter wraps a different asset than the pool."""


class Unauthorized(ConfigurationError):
    """Raised when a caller lacks the authority for an operation."""


class PoolStateError(PoolError):
    """Raised when the current state does not allow an operation."""


class NotConnected(PoolStateError):
    """Raised when an adapter is used before `connect`."""


class AlreadyConnected(PoolStateError):
    """Raised when `connect` is called twice."""


class ZeroAmount(PoolStateError):
    """Raised when an amount (or the shares it implies) is zero."""


class HasOutstandingAssets(PoolStateError):
    """Raised when a non-forced disconnect finds managed assets."""


class InsufficientShares(PoolStateError):
    """Raised when a share balance or share allowance is too small."""


class InsufficientPosition(PoolStateError):
    """Raised when an adapter's claim cannot cover a withdrawal."""


class InsufficientLiquidity(PoolStateError):
    """Raised when idle balance plus adapter capacity cannot cover a withdrawal."""


class NoActiveStrategy(PoolStateError):
    """Raised when a deposit cannot be placed in any active strategy."""


class InactiveStrategy(PoolStateError):
    """Raised when an inactive registry entry is addressed."""


class ZeroTotalAssets(PoolStateError):
    """Raised when shares are outstanding but the pool values them at zero."""


class RollbackFailed(PoolStateError):
    """Raised when a failed operation could not be fully rolled back."""


class ExternalError(PoolError):
    """Raised when an external collaborator rejects a call."""


class TransferFailed(ExternalError):
    """Raised when an asset transfer, approval or burn fails."""


class MarketError(ExternalError):
    """Raised when a wrapped market rejects a call."""
