"""
Protocol-level configuration and administration.

The configuration is an explicit value, not ambient global state: every
administrative operation takes the current config and the caller's address
and returns a new config.
"""

from __future__ import annotations

from dataclasses import dataclass, replace

from ..errors import InvalidFeeRate, Unauthorized
from ..state.balances import Address


MAX_SWAP_FEE_BP = 100  # 1%

# Sweep thresholds in token A units.
PROTOCOL_SWEEP_THRESHOLD = 1_000_000
BURN_SWEEP_THRESHOLD = 1_000_000
ROYALTY_SWEEP_THRESHOLD = 1_000_000


def _require_address(name: str, value: object) -> None:
    if not isinstance(value, str) or not value:
        raise ValueError(f"{name} must be a non-empty string")


@dataclass(frozen=True)
class ProtocolConfig:
    """Shared across all pools."""

    admin: Address
    protocol_fee_address: Address
    rewards_manager: Address
    swap_fee_bp: int = 0

    def __post_init__(self) -> None:
        _require_address("admin", self.admin)
        _require_address("protocol_fee_address", self.protocol_fee_address)
        _require_address("rewards_manager", self.rewards_manager)
        if not isinstance(self.swap_fee_bp, int) or isinstance(self.swap_fee_bp, bool):
            raise TypeError("swap_fee_bp must be an int")
        if not (0 <= self.swap_fee_bp <= MAX_SWAP_FEE_BP):
            raise InvalidFeeRate(f"swap_fee_bp must be in [0, {MAX_SWAP_FEE_BP}]: {self.swap_fee_bp}")


@dataclass(frozen=True)
class SweepThresholds:
    protocol: int = PROTOCOL_SWEEP_THRESHOLD
    burn: int = BURN_SWEEP_THRESHOLD
    royalty: int = ROYALTY_SWEEP_THRESHOLD

    def __post_init__(self) -> None:
        for name, v in (("protocol", self.protocol), ("burn", self.burn), ("royalty", self.royalty)):
            if not isinstance(v, int) or isinstance(v, bool):
                raise TypeError(f"{name} threshold must be an int")
            if v <= 0:
                raise ValueError(f"{name} threshold must be positive: {v}")


def require_admin(config: ProtocolConfig, caller: Address) -> None:
    if caller != config.admin:
        raise Unauthorized(f"caller {caller!r} is not the protocol admin")


def require_rewards_manager(config: ProtocolConfig, caller: Address) -> None:
    if caller != config.rewards_manager:
        raise Unauthorized(f"caller {caller!r} is not the rewards manager")


def set_swap_fee(config: ProtocolConfig, caller: Address, swap_fee_bp: int) -> ProtocolConfig:
    require_admin(config, caller)
    return replace(config, swap_fee_bp=swap_fee_bp)


def set_protocol_fee_address(config: ProtocolConfig, caller: Address, address: Address) -> ProtocolConfig:
    require_admin(config, caller)
    return replace(config, protocol_fee_address=address)


def set_rewards_manager(config: ProtocolConfig, caller: Address, address: Address) -> ProtocolConfig:
    require_admin(config, caller)
    return replace(config, rewards_manager=address)


def set_admin(config: ProtocolConfig, caller: Address, new_admin: Address) -> ProtocolConfig:
    require_admin(config, caller)
    return replace(config, admin=new_admin)
