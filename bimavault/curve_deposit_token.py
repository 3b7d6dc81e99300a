"""Deposit token that stakes Curve LP tokens in a liquidity gauge and streams rewards."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Any, Protocol

logger = logging.getLogger(__name__)

WEEK = 604_800
REWARD_DURATION = WEEK
PRECISION = 10**18
REWARD_SLOTS = 2
U128_MAX = 2**128 - 1
DEFAULT_DECIMALS = 18
NO_ACCOUNT = "0"


def _now() -> int:
    return int(time.time())


def _zeros() -> list[int]:
    return [0] * REWARD_SLOTS


class _Token(Protocol):
    def approve(self, spender: Any, amount: int) -> Any: ...

    def symbol(self) -> str: ...

    def transfer(self, recipient: str, amount: int) -> Any: ...

    def transfer_from(self, sender: str, recipient: Any, amount: int) -> Any: ...


class _Gauge(Protocol):
    def lp_token(self) -> _Token: ...

    def deposit(self, amount: int, depositor: Any) -> Any: ...


class _Proxy(Protocol):
    def withdraw_from_gauge(self, gauge: _Gauge, lp_token: _Token, amount: int, receiver: str) -> Any: ...

    def mint_crv(self, gauge: _Gauge) -> int: ...


class _Vault(Protocol):
    def allocate_new_emissions(self, emission_id: int) -> int: ...

    def transfer_allocated_tokens(self, claimant: str, receiver: str, amount: int) -> Any: ...


@dataclass
class CurveDepositToken:
    """Tracks LP deposits into a Curve gauge and the BABEL and CRV rewards they accrue."""

    babel: _Token
    crv: _Token
    curve_proxy: _Proxy
    vault: _Vault
    clock: Callable[[], int] = _now

    gauge: _Gauge | None = None
    lp_token: _Token | None = None
    emission_id: int | None = None
    symbol: str = ""
    name: str = ""
    total_supply: int = 0
    decimals: int = DEFAULT_DECIMALS
    balance_of: dict[str, int] = field(default_factory=dict)
    allowance: dict[str, dict[str, int]] = field(default_factory=dict)
    reward_integral: list[int] = field(default_factory=_zeros)
    reward_rate: list[int] = field(default_factory=_zeros)
    last_update: int | None = None
    period_finish: int = 0
    reward_integral_for: dict[str, list[int]] = field(default_factory=dict)
    stored_pending_reward: dict[str, list[int]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.last_update is None:
            self.last_update = self.clock()

    def initialize(self, gauge: _Gauge) -> None:
        """Bind the token to ``gauge`` and derive its name and symbol from the LP token."""
        if self.gauge is not None:
            raise RuntimeError("Already initialized")

        lp_token = gauge.lp_token()
        self.lp_token = lp_token
        self.gauge = gauge

        lp_token.approve(gauge, U128_MAX)
        lp_symbol = lp_token.symbol()
        self.name = f"Babel {lp_symbol} Curve Deposit"
        self.symbol = f"babel-{lp_symbol}"
        self.period_finish = self.clock() - 1

    def notify_registered_id(self, assigned_ids: Sequence[int]) -> None:
        """Record the single emission id the vault assigned to this receiver."""
        if self.emission_id is not None:
            raise RuntimeError("Already registered")
        if len(assigned_ids) != 1:
            raise ValueError("Incorrect ID count")
        self.emission_id = assigned_ids[0]

    def deposit(self, receiver: str, amount: int) -> None:
        """Take ``amount`` LP tokens from ``receiver`` and stake them in the gauge."""
        if amount <= 0:
            raise ValueError("Cannot deposit zero")
        gauge, lp_token = self._require_initialized()

        lp_token.transfer_from(receiver, self.curve_proxy, amount)
        gauge.deposit(amount, self.curve_proxy)

        balance = self.balance_of.get(receiver, 0) + amount
        self.balance_of[receiver] = balance
        self.total_supply += amount

        self._update_integrals(receiver, balance, self.total_supply)
        self._fetch_rewards_if_needed()
        logger.info("Transfer event: %s deposited %d LP tokens.", receiver, amount)

    def withdraw(self, receiver: str, amount: int) -> None:
        """Withdraw ``amount`` LP tokens from the gauge back to ``receiver``."""
        if amount <= 0:
            raise ValueError("Cannot withdraw zero")
        balance = self.balance_of.get(receiver)
        if balance is None or balance < amount:
            raise ValueError("Insufficient balance")
        gauge, lp_token = self._require_initialized()

        self.curve_proxy.withdraw_from_gauge(gauge, lp_token, amount, receiver)

        balance -= amount
        self.balance_of[receiver] = balance
        self.total_supply -= amount

        self._update_integrals(receiver, balance, self.total_supply)
        self._fetch_rewards_if_needed()
        logger.info("Withdraw event: %s withdrew %d LP tokens.", receiver, amount)

    def claim_reward(self, claimant: str, receiver: str) -> tuple[int, int]:
        """Pay ``claimant``'s pending BABEL and CRV to ``receiver``; return ``(babel, crv)``."""
        self._update_integrals(claimant, self.balance_of.get(claimant, 0), self.total_supply)

        pending = self.stored_pending_reward.pop(claimant, _zeros())
        self.crv.transfer(receiver, pending[1])
        self.vault.transfer_allocated_tokens(claimant, receiver, pending[0])

        logger.info(
            "Reward claimed: %s received %d BABEL and %d CRV.", receiver, pending[0], pending[1]
        )
        return pending[0], pending[1]

    def claimable_reward(self, account: str) -> tuple[int, int]:
        """Return the ``(babel, crv)`` rewards ``account`` could claim now."""
        updated = min(self.period_finish, self.clock())
        duration = updated - self.last_update
        balance = self.balance_of.get(account, 0)
        checkpoints = self.reward_integral_for.get(account, _zeros())
        stored = self.stored_pending_reward.get(account, _zeros())

        amounts = []
        for integral, rate, checkpoint, pending in zip(
            self.reward_integral, self.reward_rate, checkpoints, stored
        ):
            if duration > 0 and self.total_supply > 0:
                integral += duration * rate * PRECISION // self.total_supply
            amounts.append(pending + balance * (integral - checkpoint) // PRECISION)
        return amounts[0], amounts[1]

    def _require_initialized(self) -> tuple[_Gauge, _Token]:
        if self.gauge is None or self.lp_token is None:
            raise RuntimeError("Not initialized")
        return self.gauge, self.lp_token

    def _fetch_rewards_if_needed(self) -> None:
        if self.clock() // WEEK >= self.period_finish // WEEK:
            self._fetch_rewards()

    def _fetch_rewards(self) -> None:
        if self.emission_id is None:
            raise RuntimeError("Not registered")
        gauge, _ = self._require_initialized()

        babel_amount = self.vault.allocate_new_emissions(self.emission_id)
        try:
            crv_amount = self.curve_proxy.mint_crv(gauge)
        except Exception:
            logger.warning("CRV mint failed; no CRV rewards this period", exc_info=True)
            crv_amount = 0

        now = self.clock()
        if now < self.period_finish:
            remaining = self.period_finish - now
            babel_amount += remaining * self.reward_rate[0]
            crv_amount += remaining * self.reward_rate[1]

        self.reward_rate[0] = babel_amount // REWARD_DURATION
        self.reward_rate[1] = crv_amount // REWARD_DURATION
        self.last_update = now
        self.period_finish = now + REWARD_DURATION

    def _update_integrals(self, account: str, balance: int, supply: int) -> None:
        now = self.clock()
        duration = min(self.period_finish, now) - self.last_update
        if duration > 0:
            self.last_update = now

        for i in range(REWARD_SLOTS):
            integral = self.reward_integral[i]
            if duration > 0 and supply > 0:
                integral += duration * self.reward_rate[i] * PRECISION // supply
                self.reward_integral[i] = integral

            if account != NO_ACCOUNT:
                checkpoint = self.reward_integral_for.get(account, _zeros())[i]
                if integral > checkpoint:
                    pending = balance * (integral - checkpoint) // PRECISION
                    self.stored_pending_reward.setdefault(account, _zeros())[i] += pending
                    self.reward_integral_for.setdefault(account, _zeros())[i] = integral