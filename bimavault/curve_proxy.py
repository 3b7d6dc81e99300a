"""Proxy that holds veCRV, locks CRV, votes on gauges and relays gauge operations."""

from __future__ import annotations

import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any, Protocol

WEEK = 604_800
MAX_LOCK_DURATION = 4 * 365 * 86_400
BIMA_100_PCT = 10_000
U64_MAX = 2**64 - 1
SELECTOR_LENGTH = 4


class _Erc20(Protocol):
    def approve(self, spender: str, amount: int) -> Any: ...

    def balance_of(self, account: str) -> int: ...

    def transfer(self, recipient: str, amount: int) -> Any: ...


class _BabelCore(Protocol):
    owner: str
    fee_receiver: str
    address: str


class _GaugeController(Protocol):
    def vote_for_gauge_weights(self, gauge: str, weight: int) -> Any: ...


class _Minter(Protocol):
    def mint(self, gauge: str) -> Any: ...

    def approve_deposit(self, gauge: str, depositor: str, approved: bool) -> Any: ...

    def set_rewards_receiver(self, gauge: str, receiver: str) -> Any: ...

    def withdraw_from_gauge(self, gauge: str, amount: int) -> Any: ...


class _VotingEscrow(Protocol):
    address: str

    def create_lock(self, amount: int, unlock_time: int) -> Any: ...

    def increase_amount(self, amount: int) -> Any: ...

    def increase_unlock_time(self, unlock_time: int) -> Any: ...


class _FeeDistributor(Protocol):
    def token(self) -> _Erc20: ...

    def claim(self) -> Any: ...


class _Aragon(Protocol):
    def vote(self, vote_id: int, support: bool, executes_if_decided: bool) -> Any: ...


@dataclass(frozen=True)
class GaugeWeightVote:
    """A vote weight to assign to a gauge."""

    gauge: str
    weight: int


@dataclass(frozen=True)
class TokenBalance:
    """An amount of a specific token."""

    token: _Erc20
    amount: int


def _now() -> int:
    return int(time.time())


class CurveProxy:
    """Holds locked CRV and acts on Curve contracts for the protocol."""

    WEEK = WEEK
    MAX_LOCK_DURATION = MAX_LOCK_DURATION

    def __init__(
        self,
        babel_core: _BabelCore,
        crv: _Erc20,
        gauge_controller: _GaugeController,
        minter: _Minter,
        voting_escrow: _VotingEscrow,
        fee_distributor: _FeeDistributor,
        *,
        clock: Callable[[], int] = _now,
        call_handler: Callable[[str, bytes], Any] | None = None,
    ) -> None:
        self.babel_core = babel_core
        self.crv = crv
        self.gauge_controller = gauge_controller
        self.minter = minter
        self.voting_escrow = voting_escrow
        self.fee_distributor = fee_distributor
        self.fee_token = fee_distributor.token()
        self.clock = clock
        self.call_handler = call_handler

        self.crv_fee_pct = 0
        self.unlock_time = 0
        self.vote_manager: str | None = None
        self.deposit_manager: str | None = None
        self.per_gauge_approval: dict[str, str] = {}
        self.execute_permissions: dict[str, dict[str, dict[bytes, bool]]] = {}

        crv.approve(voting_escrow.address, U64_MAX)

    @property
    def address(self) -> str:
        """The address this proxy holds tokens under."""
        return self.babel_core.address

    def _is_owner_or_vote_manager(self, caller: str) -> bool:
        return caller == (self.vote_manager or "") or caller == self.babel_core.owner

    def _is_deposit_manager(self, caller: str) -> bool:
        return caller == (self.deposit_manager or "")

    def _is_approved_for_gauge(self, caller: str, gauge: str) -> bool:
        return self.per_gauge_approval.get(caller) == gauge or self._is_deposit_manager(caller)

    def set_execute_permissions(
        self, caller: str, target: str, selectors: Iterable[bytes], permitted: bool
    ) -> None:
        """Allow or deny ``caller`` to execute the given function selectors on ``target``."""
        entries = [bytes(selector) for selector in selectors]
        for selector in entries:
            if len(selector) != SELECTOR_LENGTH:
                raise ValueError(f"selector must be {SELECTOR_LENGTH} bytes: {selector.hex()}")
        permissions = self.execute_permissions.setdefault(caller, {}).setdefault(target, {})
        for selector in entries:
            permissions[selector] = permitted

    def set_crv_fee_pct(self, fee_pct: int) -> None:
        """Set the share of minted CRV kept as a fee, in units of BIMA_100_PCT."""
        if fee_pct > BIMA_100_PCT:
            raise ValueError("Invalid setting")
        self.crv_fee_pct = fee_pct

    def set_vote_manager(self, vote_manager: str) -> None:
        """Set the account allowed to vote alongside the owner."""
        self.vote_manager = vote_manager

    def set_deposit_manager(self, deposit_manager: str) -> None:
        """Set the account allowed to manage deposits on every gauge."""
        self.deposit_manager = deposit_manager

    def set_per_gauge_approval(self, caller: str, gauge: str) -> None:
        """Approve ``caller`` to act on ``gauge``."""
        self.per_gauge_approval[caller] = gauge

    def claim_fees(self) -> int:
        """Claim distributor fees and forward them to the fee receiver; return the amount."""
        self.fee_distributor.claim()
        amount = self.fee_token.balance_of(self.address)
        self.fee_token.transfer(self.babel_core.fee_receiver, amount)
        return amount

    def lock_crv(self) -> None:
        """Lock all CRV held by the proxy for the maximum duration."""
        amount = self.crv.balance_of(self.address)
        self._update_lock(amount, self.unlock_time, self._max_unlock())

    def mint_crv(self, gauge: str, receiver: str) -> int:
        """Mint CRV from ``gauge``, send it less the fee to ``receiver``; return the amount sent."""
        initial = self.crv.balance_of(self.address)
        self.minter.mint(gauge)
        minted = self.crv.balance_of(self.address) - initial
        if minted < 0:
            raise ArithmeticError("CRV balance decreased while minting")

        fee = minted * self.crv_fee_pct // BIMA_100_PCT
        amount = minted - fee
        self.crv.transfer(receiver, amount)

        max_unlock = self._max_unlock()
        if self.unlock_time < max_unlock:
            self._update_lock(initial + fee, self.unlock_time, max_unlock)
        return amount

    def vote_for_gauge_weights(self, votes: Iterable[GaugeWeightVote]) -> None:
        """Submit each gauge weight vote to the gauge controller."""
        for vote in votes:
            self.gauge_controller.vote_for_gauge_weights(vote.gauge, vote.weight)

    def vote_in_curve_dao(self, aragon: _Aragon, vote_id: int, support: bool) -> None:
        """Cast a vote in a Curve DAO proposal."""
        aragon.vote(vote_id, support, False)

    def approve_gauge_deposit(self, gauge: str, depositor: str) -> None:
        """Allow ``depositor`` to deposit into ``gauge`` on behalf of the proxy."""
        self.minter.approve_deposit(gauge, depositor, True)

    def set_gauge_rewards_receiver(self, gauge: str, receiver: str) -> None:
        """Direct ``gauge``'s extra rewards to ``receiver``."""
        self.minter.set_rewards_receiver(gauge, receiver)

    def withdraw_from_gauge(self, gauge: str, lp_token: _Erc20, amount: int, receiver: str) -> None:
        """Withdraw ``amount`` LP tokens from ``gauge`` and send them to ``receiver``."""
        self.minter.withdraw_from_gauge(gauge, amount)
        lp_token.transfer(receiver, amount)

    def transfer_tokens(self, receiver: str, balances: Iterable[TokenBalance]) -> None:
        """Send each token balance to ``receiver``, failing on any refused transfer."""
        for balance in balances:
            if balance.token.transfer(receiver, balance.amount) is False:
                raise RuntimeError(f"Token transfer of {balance.amount} to {receiver} failed")

    def execute(self, caller: str, target: str, data: bytes) -> Any:
        """Relay a call to ``target`` if ``caller`` may run its function selector."""
        data = bytes(data)
        if len(data) < SELECTOR_LENGTH:
            raise ValueError("call data shorter than a function selector")
        selector = data[:SELECTOR_LENGTH]
        if not self._is_owner_or_vote_manager(caller):
            permitted = (
                self.execute_permissions.get(caller, {}).get(target, {}).get(selector, False)
            )
            if not permitted:
                raise PermissionError("Not permitted")
        if self.call_handler is None:
            return None
        return self.call_handler(target, data)

    def _max_unlock(self) -> int:
        return self.clock() // WEEK * WEEK + MAX_LOCK_DURATION

    def _update_lock(self, amount: int, unlock: int, max_unlock: int) -> None:
        if amount > 0:
            if unlock == 0:
                self.voting_escrow.create_lock(amount, max_unlock)
                self.unlock_time = max_unlock
                return
            self.voting_escrow.increase_amount(amount)
        if unlock < max_unlock:
            self.voting_escrow.increase_unlock_time(max_unlock)
            self.unlock_time = max_unlock