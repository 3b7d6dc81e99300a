# bimavault

An in-memory model of a Bitcoin-backed stablecoin vault. It also models the
pieces around it: UTXO bookkeeping, a factory for Convex deposit tokens, a
Curve proxy, and the reward accounting of Convex and Curve staking deposit
tokens. Everything is held in memory, and the package has no dependencies
outside the standard library.

## Installation

```
pip install .
```

To install the test tools as well:

```
pip install .[test]
```

## Command line

```
bimavault
```

This runs a short session on a fresh vault. It deposits the UTXO `utxo123`
worth 1,000,000 satoshis and issues stablecoins for 1 BTC. It then prints the
totals:

```
BTC Balance: 1000000
Stablecoin Supply: 50000
```

You can also run it with `python -m bimavault.vault`.

## Library

### Vault (`bimavault.vault`)

```python
from bimavault.vault import VaultOperations, VaultState, get_btc_to_usd_rate

vault = VaultState()
vault.deposit_bitcoin_utxo("utxo123", 1_000_000)
minted = vault.issue_stablecoin(1)   # 1 * get_btc_to_usd_rate() == 50000
```

`VaultState` has the following fields:

| Field | Meaning |
| --- | --- |
| `bitcoin_utxos` | Maps each UTXO id to its value. |
| `bitcoin_balance` | The vault's Bitcoin balance. |
| `stablecoin_supply` | The number of stablecoins issued. |
| `exchange_rate` | The BTC to USD rate. |

All amounts are kept within the unsigned 64-bit range. A negative amount
raises `ValueError`, and a result beyond that range raises `OverflowError`.

`issue_stablecoin` first refreshes `exchange_rate` from
`get_btc_to_usd_rate()`. It then returns the number of stablecoins minted.

`VaultOperations` wraps a `VaultState` and prints a line for each deposit and
each issuance. Its `issue_stablecoin` returns the number of coins issued.

`main(argv=None)` runs the session shown above and returns `0`.

### UTXOs (`bimavault.utxo`)

```python
from bimavault.utxo import Utxo, UtxoStorage

storage = UtxoStorage()
utxo = Utxo(txid=b"\x01\x02\x03\x04", vout=0, value=100, script=b"\x05\x06\x07\x08")
storage.store_utxo(utxo.txid, utxo.vout, utxo)
storage.get(utxo.txid, utxo.vout)          # -> utxo
(utxo.txid, utxo.vout) in storage          # -> True
storage.remove_utxo(utxo.txid, utxo.vout)  # -> utxo, or None if absent
```

`Utxo` is immutable. `UtxoStorage` keys its entries by `(txid, vout)`. It
supports `len()`, `in`, and iteration over the stored UTXOs.

### Convex factory (`bimavault.convex_factory`)

`ConvexFactory(babel_core, deposit_token_impl)` makes `babel_core` the owner.

`deploy_new_instance(pid, caller)` works only for the owner. For any other
caller it raises `OwnershipError`, a `PermissionError` with `code == 1`. On
success it copies the `DepositTokenTemplate`, initializes the copy with `pid`
and `caller`, and records the address under `pid`. The address is always 32
zero bytes. Each deployment is logged at INFO level.

`get_deposit_token(pid)` returns the recorded address, or `None` if nothing was
deployed for that `pid`.

### Convex deposit token (`bimavault.convex_deposit_token`)

`ConvexDepositToken` tracks deposits, withdrawals and per-account reward
integrals over three reward slots.

The caller supplies the collaborators as objects:

- The `babel`, `crv` and `cvx` token ledgers.
- A booster that provides `deposit` and `pool_info`.
- A curve proxy that provides `token_info`.
- A vault.

`initialize(pid)` raises `ValueError` when the pool reports no CVX rewards.

`deposit` and `withdraw` raise `ValueError` for amounts of zero or less.
Withdrawing more than the account's balance raises `ArithmeticError`.

`claim_reward(claimant, receiver)` pays the pending CRV and CVX to `receiver`
and returns the three pending amounts. `claimable_reward(account)` returns the
amounts the account has accrued since its last checkpoint.

`TokenLedger` keeps balances by account name. `DefaultRewardPool` accepts every
request and records the amounts withdrawn and the reward claims.

### Curve proxy (`bimavault.curve_proxy`)

`CurveProxy` works against the objects it is given: the babel core, the CRV
token, a gauge controller, a minter, a voting escrow and a fee distributor.

It covers the following:

- Locking CRV for the maximum duration: `lock_crv`.
- Minting CRV less a fee: `mint_crv`, which returns the amount sent.
- Setting the fee: `set_crv_fee_pct`, out of 10,000. A value above that raises
  `ValueError`.
- Claiming and forwarding fees: `claim_fees`.
- Gauge weight votes: `vote_for_gauge_weights`, which takes `GaugeWeightVote`
  records.
- Curve DAO votes: `vote_in_curve_dao`.
- Gauge deposits, reward receivers and withdrawals.
- Token transfers: `transfer_tokens`, which takes `TokenBalance` records.

`execute(caller, target, data)` lets the owner and the vote manager through.
Any other caller needs a permission for the call's 4-byte selector, granted
with `set_execute_permissions`. Without one it raises `PermissionError`. An
allowed call is passed to the optional `call_handler`, whose result is
returned.

### Curve deposit token (`bimavault.curve_deposit_token`)

`CurveDepositToken` stakes LP tokens in a liquidity gauge and streams BABEL and
CRV rewards over one-week periods.

Call `initialize(gauge)` first. Then call `notify_registered_id([emission_id])`
before the first deposit, because the first deposit fetches rewards from the
vault. Without an emission id this raises `RuntimeError`.

`claim_reward(claimant, receiver)` returns `(babel, crv)`, and so does
`claimable_reward(account)`.

### Time

Both deposit tokens and the proxy accept a `clock` callable that returns Unix
seconds. It defaults to the system time, and lets tests control time.

## What this package does not do

- **No live price feed.** `get_btc_to_usd_rate()` always returns 50,000.
- **No chain or network access.** Nothing here connects to a Bitcoin node or
  runs contracts on a chain.
- **No built-in contract implementations.** Tokens, gauges, boosters, minters,
  escrows and vaults are plain Python objects that you supply.
- **No persistent storage.** All state lives in memory.
- **No reward fetching in the Convex deposit token.** Its weekly reward fetch
  only brings the reward integrals up to date. It does not pull rewards from a
  pool.

## Tests

```
pip install .[test]
pytest
```