"""Unspent transaction outputs and a keyed store for them."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field


@dataclass(frozen=True)
class Utxo:
    """An output identified by transaction id and index, with its value and spending script."""

    txid: bytes
    vout: int
    value: int
    script: bytes

    def __post_init__(self) -> None:
        object.__setattr__(self, "txid", bytes(self.txid))
        object.__setattr__(self, "script", bytes(self.script))


@dataclass
class UtxoStorage:
    """UTXOs keyed by ``(txid, vout)``."""

    _utxos: dict[tuple[bytes, int], Utxo] = field(default_factory=dict)

    def store_utxo(self, txid: bytes, vout: int, utxo: Utxo) -> None:
        """Store ``utxo`` under ``(txid, vout)``, replacing any earlier entry."""
        self._utxos[(bytes(txid), vout)] = utxo

    def remove_utxo(self, txid: bytes, vout: int) -> Utxo | None:
        """Remove and return the UTXO under ``(txid, vout)``, or None if absent."""
        return self._utxos.pop((bytes(txid), vout), None)

    def get(self, txid: bytes, vout: int) -> Utxo | None:
        """Return the UTXO under ``(txid, vout)``, or None if absent."""
        return self._utxos.get((bytes(txid), vout))

    def __len__(self) -> int:
        return len(self._utxos)

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, tuple) or len(key) != 2:
            return False
        txid, vout = key
        return (bytes(txid), vout) in self._utxos

    def __iter__(self) -> Iterator[Utxo]:
        return iter(self._utxos.values())