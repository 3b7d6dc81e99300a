"""In-memory Bitcoin-backed stablecoin vault, UTXO storage, and Convex/Curve staking models."""

__version__ = "0.1.0"