"""Exception types for the SinkSwap pool engine.

Every failure aborts the whole operation. Pool operations are pure functions
over immutable state, so a raised error never leaves a partially applied pool.
"""

from __future__ import annotations


class SinkSwapError(Exception):
    """Base class for all pool engine errors."""


class ZeroInput(SinkSwapError, ValueError):
    """Raised when an amount that must be positive is zero."""


class InvalidPair(SinkSwapError, ValueError):
    """Raised when token kinds are identical, mis-ordered, or not part of the pool."""


class PoolAlreadyExists(SinkSwapError):
    """Raised when registering a canonical pair that already has a pool."""


class PoolNotFound(SinkSwapError, LookupError):
    """Raised when a pool id is not known to the store."""


class ExcessiveSlippage(SinkSwapError):
    """Raised when an output falls below the caller's minimum or an input exceeds the maximum."""


class NoLiquidity(SinkSwapError):
    """Raised when an operation needs reserves the pool does not have."""


class InsufficientLiquidity(SinkSwapError):
    """Raised when a quote asks for at least the whole opposing reserve."""


class InvalidFeeRate(SinkSwapError, ValueError):
    """Raised when a fee rate exceeds its configured maximum."""


class Unauthorized(SinkSwapError, PermissionError):
    """Raised when the caller is not the admin, royalty wallet or rewards manager."""


class InsufficientFunds(SinkSwapError):
    """Raised when a withdrawal or transfer exceeds the available balance."""


class MathError(SinkSwapError, ArithmeticError):
    """Raised on unsigned overflow, underflow or division by zero."""
