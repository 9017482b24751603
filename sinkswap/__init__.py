"""
SinkSwap: constant-product pools with a multi-sink fee model.

Layers:
- `sinkswap.kernels`: pure integer math (fixed point, swap pricing, LP math)
- `sinkswap.state`: pool state, canonical pair ordering, registry
- `sinkswap.core`: pool operations over immutable state
- `sinkswap.integration`: ledger/store/clock/event adapters and `PoolEngine`
"""

from .core import ProtocolConfig, SweepThresholds
from .errors import SinkSwapError
from .integration import PoolEngine
from .state import PoolFeeRates, PoolState

__version__ = "0.1.0"

__all__ = [
    "ProtocolConfig",
    "SweepThresholds",
    "SinkSwapError",
    "PoolEngine",
    "PoolFeeRates",
    "PoolState",
]
