import pytest

from bimavault.vault import (
    VaultOperations,
    VaultState,
    get_btc_to_usd_rate,
    main,
)


def test_new_vault_state():
    vault = VaultState()
    assert vault.bitcoin_balance == 0
    assert vault.stablecoin_supply == 0
    assert vault.exchange_rate == 50000
    assert not vault.bitcoin_utxos


def test_deposit_bitcoin_utxo():
    vault = VaultState()
    vault.deposit_bitcoin_utxo("tx_id", 10000)
    assert vault.bitcoin_balance == 10000
    assert len(vault.bitcoin_utxos) == 1
    assert vault.bitcoin_utxos["tx_id"] == 10000


def test_deposits_accumulate():
    vault = VaultState()
    vault.deposit_bitcoin_utxo("a", 10000)
    vault.deposit_bitcoin_utxo("b", 2000000)
    assert vault.bitcoin_balance == 10000 + 2000000
    assert set(vault.bitcoin_utxos) == {"a", "b"}


def test_rate_matches_feed():
    assert get_btc_to_usd_rate() == 50000


def test_issue_stablecoin_uses_rate():
    vault = VaultState()
    minted = vault.issue_stablecoin(5)
    assert minted == 5 * get_btc_to_usd_rate()
    assert vault.stablecoin_supply == minted
    vault.issue_stablecoin(1)
    assert vault.stablecoin_supply == 6 * get_btc_to_usd_rate()


def test_negative_deposit_rejected():
    vault = VaultState()
    with pytest.raises(ValueError):
        vault.deposit_bitcoin_utxo("bad", -1)
    assert vault.bitcoin_balance == 0
    assert not vault.bitcoin_utxos


def test_balance_overflow_rejected():
    vault = VaultState()
    vault.deposit_bitcoin_utxo("big", 2**64 - 1)
    with pytest.raises(OverflowError):
        vault.deposit_bitcoin_utxo("more", 1)
    assert "more" not in vault.bitcoin_utxos


def test_operations_report(capsys):
    ops = VaultOperations()
    ops.deposit_bitcoin_utxo("utxo456", 2000000)
    issued = ops.issue_stablecoin(5)
    out = capsys.readouterr().out
    assert "Deposited UTXO with value: 2000000 bima" in out
    assert f"Issued {issued} stablecoins" in out
    assert ops.vault.bitcoin_balance == 2000000
    assert ops.vault.stablecoin_supply == issued


def test_main_prints_totals(capsys):
    assert main([]) == 0
    out = capsys.readouterr().out
    assert "BTC Balance: 1000000" in out
    assert f"Stablecoin Supply: {get_btc_to_usd_rate()}" in out