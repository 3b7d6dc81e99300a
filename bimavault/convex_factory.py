"""Factory that deploys Convex deposit tokens, one per pool id."""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

PUBKEY_LENGTH = 32
ONLY_OWNER_ERROR_CODE = 1


class OwnershipError(PermissionError):
    """Raised when a caller other than the owner attempts an owner-only action."""

    code = ONLY_OWNER_ERROR_CODE

    def __init__(self, caller: bytes) -> None:
        super().__init__(f"Only owner (custom error {self.code}): caller {bytes(caller).hex()}")
        self.caller = caller


@dataclass
class DepositTokenTemplate:
    """Deposit token settings that are cloned for every deployment."""

    pid: int = 0
    owner: bytes = bytes(PUBKEY_LENGTH)

    def initialize(self, pid: int, owner: bytes) -> None:
        """Bind the token to a pool id and an owner."""
        self.pid = pid
        self.owner = owner


@dataclass
class BabelOwnable:
    """Ownership record for a contract under the Babel core."""

    babel_core: bytes
    owner: bytes

    def only_owner(self, caller: bytes) -> None:
        """Raise OwnershipError unless ``caller`` is the owner."""
        if caller != self.owner:
            raise OwnershipError(caller)


@dataclass
class ConvexFactory:
    """Deploys ConvexDepositToken clones and records their addresses by pid."""

    babel_core: bytes
    deposit_token_impl: DepositTokenTemplate
    babel_ownable: BabelOwnable = field(init=False)
    deployed_tokens: dict[int, bytes] = field(default_factory=dict, init=False)

    def __post_init__(self) -> None:
        self.babel_ownable = BabelOwnable(self.babel_core, self.babel_core)

    def deploy_new_instance(self, pid: int, caller: bytes) -> bytes:
        """Deploy a token for ``pid`` on behalf of the owner and return its address."""
        self.babel_ownable.only_owner(caller)

        new_token = dataclasses.replace(self.deposit_token_impl)
        new_token.initialize(pid, caller)

        address = self._create_deterministic_address(pid)
        self.deployed_tokens[pid] = address
        logger.info("NewDeployment: pid: %d, deposit_token: %s", pid, address.hex())
        return address

    def get_deposit_token(self, pid: int) -> bytes | None:
        """Return the address deployed for ``pid``, or None."""
        return self.deployed_tokens.get(pid)

    def _create_deterministic_address(self, pid: int) -> bytes:
        # Address derivation is fixed: every pool id maps to the all-zero key.
        del pid
        return bytes(PUBKEY_LENGTH)