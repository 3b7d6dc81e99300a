"""Deposit token that stakes LP tokens in a Convex pool and tracks reward accrual."""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Protocol

WEEK = 604_800
PRECISION = 10**18
REWARD_SLOTS = 3


def _now() -> int:
    return int(time.time())


def _checked_sub(minuend: int, subtrahend: int, what: str) -> int:
    if subtrahend > minuend:
        raise ArithmeticError(f"{what} would underflow: {minuend} - {subtrahend}")
    return minuend - subtrahend


def _zeros() -> list[int]:
    return [0] * REWARD_SLOTS


class _Booster(Protocol):
    def deposit(self, pid: int, amount: int, stake: bool) -> bool: ...

    def pool_info(self, pid: int) -> tuple[str, str, str, str, str, bool]: ...


class _RewardPool(Protocol):
    def withdraw_and_unwrap(self, amount: int, claim: bool) -> bool: ...

    def get_reward(self, account: str, claim_extras: bool) -> bool: ...


class _StashInfo(Protocol):
    def token_info(self, token: str) -> tuple[str, str]: ...


@dataclass
class TokenLedger:
    """Token balances keyed by account name."""

    balance: dict[str, int] = field(default_factory=dict)

    def transfer_from(self, sender: str, recipient: str, amount: int) -> bool:
        """Move ``amount`` from ``sender`` to ``recipient``; False if the sender lacks funds."""
        self.balance.setdefault(sender, 0)
        self.balance.setdefault(recipient, 0)
        if self.balance[sender] < amount:
            return False
        self.balance[sender] -= amount
        self.balance[recipient] += amount
        return True

    def transfer(self, recipient: str, amount: int) -> bool:
        """Credit ``amount`` to ``recipient``."""
        self.balance[recipient] = self.balance.get(recipient, 0) + amount
        return True

    def balance_of(self, account: str) -> int:
        """Return the balance of ``account`` (zero if unknown)."""
        return self.balance.get(account, 0)


@dataclass
class DefaultRewardPool:
    """Reward pool that accepts every request and records what was asked of it."""

    withdrawn: int = 0
    reward_claims: list[tuple[str, bool]] = field(default_factory=list)

    def withdraw_and_unwrap(self, amount: int, claim: bool) -> bool:
        """Accept a withdrawal, adding ``amount`` to the withdrawn total."""
        self.withdrawn += amount
        if claim:
            self.reward_claims.append(("", False))
        return True

    def get_reward(self, account: str, claim_extras: bool) -> bool:
        """Accept a reward claim for ``account`` and record it."""
        self.reward_claims.append((account, claim_extras))
        return True


@dataclass
class ConvexDepositToken:
    """Tracks LP deposits into a Convex pool and the rewards they accrue."""

    babel: TokenLedger
    crv: TokenLedger
    cvx: TokenLedger
    booster: _Booster
    curve_proxy: _StashInfo
    vault: object
    clock: Callable[[], int] = _now

    lp_token: TokenLedger = field(default_factory=TokenLedger)
    deposit_pid: int = 0
    crv_rewards: _RewardPool = field(default_factory=DefaultRewardPool)
    cvx_rewards: _RewardPool = field(default_factory=DefaultRewardPool)

    emission_id: int = 0
    symbol: str = ""
    name: str = ""
    total_supply: int = 0

    balance_of: dict[str, int] = field(default_factory=dict)
    allowance: dict[tuple[str, str], int] = field(default_factory=dict)

    reward_integral: list[int] = field(default_factory=_zeros)
    reward_rate: list[int] = field(default_factory=_zeros)
    last_crv_balance: int = 0
    last_cvx_balance: int = 0
    last_update: int = 0
    period_finish: int = 0

    reward_integral_for: dict[str, list[int]] = field(default_factory=dict)
    stored_pending_reward: dict[str, list[int]] = field(default_factory=dict)

    def initialize(self, pid: int) -> None:
        """Bind the token to Convex pool ``pid`` and derive its name and symbol."""
        if self.lp_token.balance:
            raise RuntimeError("Already initialized")

        lp_token, _, _, _crv_rewards, stash, _ = self.booster.pool_info(pid)

        self.deposit_pid = pid
        self.lp_token = TokenLedger()
        self.crv_rewards = DefaultRewardPool()

        _, rewards = self.curve_proxy.token_info(stash)
        if rewards == "":
            raise ValueError("Pool has no CVX rewards")
        self.cvx_rewards = DefaultRewardPool()

        self.symbol = f"babel-{lp_token}"
        self.name = f"Babel {lp_token} Convex Deposit"
        self.period_finish = self.clock() - 1

    def deposit(self, receiver: str, amount: int) -> bool:
        """Take ``amount`` LP tokens from ``receiver`` and stake them in the booster."""
        if amount <= 0:
            raise ValueError("Cannot deposit zero")
        self.lp_token.transfer_from(receiver, self.symbol, amount)
        self.booster.deposit(self.deposit_pid, amount, True)

        balance = self.balance_of.get(receiver, 0) + amount
        self.balance_of[receiver] = balance
        self.total_supply += amount

        self._update_integrals(receiver, balance, self.total_supply)
        if self._rewards_due():
            self._fetch_rewards()
        return True

    def withdraw(self, receiver: str, amount: int) -> bool:
        """Return ``amount`` LP tokens to ``receiver``."""
        if amount <= 0:
            raise ValueError("Cannot withdraw zero")
        balance = _checked_sub(self.balance_of.get(receiver, 0), amount, "balance")
        self.balance_of[receiver] = balance
        self.total_supply = _checked_sub(self.total_supply, amount, "total supply")

        self.crv_rewards.withdraw_and_unwrap(amount, False)
        self.lp_token.transfer(receiver, amount)

        self._update_integrals(receiver, balance, self.total_supply)
        if self._rewards_due():
            self._fetch_rewards()
        return True

    def claim_reward(self, claimant: str, receiver: str) -> tuple[int, int, int]:
        """Pay ``claimant``'s pending CRV and CVX to ``receiver``; return the pending amounts."""
        self._update_integrals(claimant, self.balance_of[claimant], self.total_supply)
        pending = list(self.stored_pending_reward.get(claimant, _zeros()))
        self.stored_pending_reward[claimant] = _zeros()
        self.last_crv_balance = _checked_sub(self.last_crv_balance, pending[1], "CRV balance")
        self.last_cvx_balance = _checked_sub(self.last_cvx_balance, pending[2], "CVX balance")

        self.crv.transfer(receiver, pending[1])
        self.cvx.transfer(receiver, pending[2])
        return tuple(pending)

    def claimable_reward(self, account: str) -> tuple[int, int, int]:
        """Return the rewards ``account`` has accrued since its last checkpoint."""
        balance = self.balance_of[account]
        integral_for = self.reward_integral_for.get(account, _zeros())
        return tuple(
            balance * (integral - checkpoint) // PRECISION
            for integral, checkpoint in zip(self.reward_integral, integral_for)
        )

    def _rewards_due(self) -> bool:
        return self.clock() // WEEK >= self.period_finish // WEEK

    def _update_integrals(self, account: str, balance: int, supply: int) -> None:
        current_time = self.clock()
        duration = _checked_sub(current_time, self.last_update, "elapsed time")
        self.last_update = current_time

        for i in range(REWARD_SLOTS):
            if duration > 0 and supply > 0:
                self.reward_integral[i] += duration * self.reward_rate[i] * PRECISION // supply

            checkpoint = self.reward_integral_for.get(account, _zeros())[i]
            if self.reward_integral[i] > checkpoint:
                diff = self.reward_integral[i] - checkpoint
                stored = self.stored_pending_reward.setdefault(account, _zeros())
                stored[i] += balance * diff // PRECISION
                self.reward_integral_for.setdefault(account, _zeros())[i] = self.reward_integral[i]

    def _fetch_rewards(self) -> None:
        if not self._rewards_due():
            raise RuntimeError("Can only fetch once per week")
        self._update_integrals("", 0, self.total_supply)