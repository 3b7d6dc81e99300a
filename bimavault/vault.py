"""Bitcoin-backed stablecoin vault state and the operations layered on it."""

from __future__ import annotations

import sys
from collections.abc import Sequence
from dataclasses import dataclass, field

U64_MAX = 2**64 - 1
DEFAULT_BTC_USD_RATE = 50_000


def get_btc_to_usd_rate() -> int:
    """Return the current BTC to USD exchange rate (fixed price feed)."""
    return DEFAULT_BTC_USD_RATE


def _checked_u64(value: int, what: str) -> int:
    if value < 0:
        raise ValueError(f"{what} must not be negative: {value}")
    if value > U64_MAX:
        raise OverflowError(f"{what} exceeds the 64-bit range: {value}")
    return value


@dataclass
class VaultState:
    """UTXOs held by the vault, its bitcoin balance and the stablecoin supply."""

    bitcoin_utxos: dict[str, int] = field(default_factory=dict)
    bitcoin_balance: int = 0
    stablecoin_supply: int = 0
    exchange_rate: int = field(default_factory=get_btc_to_usd_rate)

    def deposit_bitcoin_utxo(self, utxo_id: str, value: int) -> None:
        """Record a UTXO worth ``value`` satoshis and add it to the balance."""
        _checked_u64(value, "UTXO value")
        new_balance = _checked_u64(self.bitcoin_balance + value, "bitcoin balance")
        self.bitcoin_utxos[utxo_id] = value
        self.bitcoin_balance = new_balance

    def issue_stablecoin(self, btc_amount: int) -> int:
        """Mint stablecoins for ``btc_amount`` at a freshly fetched rate; return the minted amount."""
        _checked_u64(btc_amount, "BTC amount")
        self.exchange_rate = get_btc_to_usd_rate()
        minted = _checked_u64(btc_amount * self.exchange_rate, "stablecoin amount")
        self.stablecoin_supply = _checked_u64(
            self.stablecoin_supply + minted, "stablecoin supply"
        )
        return minted


@dataclass
class VaultOperations:
    """User-facing vault actions that report what they did."""

    vault: VaultState = field(default_factory=VaultState)

    def deposit_bitcoin_utxo(self, utxo_id: str, value: int) -> None:
        """Deposit a UTXO into the vault and report its value."""
        self.vault.deposit_bitcoin_utxo(utxo_id, value)
        print(f"Deposited UTXO with value: {value} bima")

    def issue_stablecoin(self, btc_amount: int) -> int:
        """Issue stablecoins for ``btc_amount`` and report how many were issued."""
        self.vault.issue_stablecoin(btc_amount)
        issued = btc_amount * self.vault.exchange_rate
        print(f"Issued {issued} stablecoins")
        return issued


def main(argv: Sequence[str] | None = None) -> int:
    """Run a short vault session: deposit one UTXO, issue stablecoins, show the totals."""
    del argv
    vault = VaultState()
    vault.deposit_bitcoin_utxo("utxo123", 1_000_000)
    vault.issue_stablecoin(1)
    print(f"BTC Balance: {vault.bitcoin_balance}")
    print(f"Stablecoin Supply: {vault.stablecoin_supply}")
    return 0


if __name__ == "__main__":
    sys.exit(main())