"""
Vault Access — Permission lattice and share-mutation rules.

Every decision here is made on an in-memory vault snapshot fetched by the
caller; nothing in this module touches storage. The owner holds implicit
write access and is never represented in ``shared_with``.
"""
import logging
from enum import Enum
from collections.abc import Callable, Iterable
from typing import NamedTuple

from ..models import Vault
from ..exceptions import (
    ForbiddenAccess,
    InvalidPermissionLevel,
    CannotShareWithSelf,
    NotShared,
    NoShareTargets,
)

logger = logging.getLogger("vaultify.vault")


class PermissionLevel(str, Enum):
    """Access level granted to a non-owner. ``WRITE`` implies ``READ``."""

    READ = "read"
    WRITE = "write"

    @property
    def rank(self) -> int:
        return _RANKS[self]

    def satisfies(self, required: "PermissionLevel") -> bool:
        """True if holding this level is enough for ``required``."""
        return self.rank >= PermissionLevel(required).rank


_RANKS = {
    PermissionLevel.READ: 1,
    PermissionLevel.WRITE: 2,
}


def validate_permission_level(value) -> PermissionLevel:
    """Coerce ``value`` to a PermissionLevel.

    Raises:
        InvalidPermissionLevel: If value is not ``read`` or ``write``.
    """
    try:
        return PermissionLevel(value)
    except ValueError:
        raise InvalidPermissionLevel(
            f"Invalid permission level: {value!r}"
        ) from None


def evaluate(vault: Vault, requester: str, required) -> bool:
    """Decide whether ``requester`` may act on ``vault`` at ``required`` level.

    Args:
        vault: Vault snapshot (owner and sharing map).
        requester: Identity asking for access.
        required: ``read`` or ``write``.

    Returns:
        True when access is allowed.

    Raises:
        ForbiddenAccess: Requester is not the owner and lacks a sufficient
            share.
        InvalidPermissionLevel: ``required`` or the stored level is not a
            known level.
    """
    required = validate_permission_level(required)
    if requester == vault.owner_id:
        return True
    stored = vault.shared_with.get(requester)
    if stored is None:
        raise ForbiddenAccess(
            f"User '{requester}' does not have access to vault '{vault.id}'"
        )
    try:
        granted = PermissionLevel(stored)
    except ValueError:
        logger.error(
            "Vault %s holds unknown permission level for user=%s",
            vault.id, requester,
        )
        raise InvalidPermissionLevel(
            f"Stored permission level {stored!r} on vault '{vault.id}' is invalid"
        ) from None
    if not granted.satisfies(required):
        raise ForbiddenAccess(
            f"User '{requester}' has '{granted.value}' permission, but "
            f"requires '{required.value}' for vault '{vault.id}'"
        )
    return True


# ---------------------------------------------------------------------------
# Share mutation rules
# ---------------------------------------------------------------------------

def validate_share_target(vault: Vault, target: str) -> None:
    """Raise CannotShareWithSelf if ``target`` is the vault owner."""
    if target == vault.owner_id:
        raise CannotShareWithSelf(
            f"Cannot change the owner's own access to vault '{vault.id}'"
        )


def require_existing_share(vault: Vault, target: str) -> str:
    """Return the stored level of ``target``, raising NotShared if absent."""
    if target not in vault.shared_with:
        raise NotShared(
            f"User '{target}' is not currently shared on vault '{vault.id}'"
        )
    return vault.shared_with[target]


class SharePlan(NamedTuple):
    """Outcome of a batch share before it is persisted."""

    shared_with: dict[str, str]
    granted: list[str]
    skipped: dict[str, str]


def plan_share(
    vault: Vault,
    targets: Iterable[str],
    level,
    user_exists: Callable[[str], bool],
) -> SharePlan:
    """Apply a batch share to a copy of the vault's sharing map.

    Targets are processed one at a time: the owner and unknown users are
    skipped, everyone else is granted ``level`` (overwriting any previous
    level). The vault itself is not modified.

    Args:
        vault: Vault snapshot.
        targets: User IDs to share with.
        level: Permission level to grant.
        user_exists: Predicate telling whether a target user exists.

    Returns:
        SharePlan with the new sharing map, granted IDs and skipped IDs
        mapped to the skip reason.

    Raises:
        InvalidPermissionLevel: If level is not ``read`` or ``write``.
        CannotShareWithSelf: If the only requested target is the owner.
        NoShareTargets: If a non-empty request granted nobody.
    """
    level = validate_permission_level(level)
    targets = list(targets)
    shared_with = dict(vault.shared_with)
    granted: list[str] = []
    skipped: dict[str, str] = {}

    for target in targets:
        if target == vault.owner_id:
            logger.warning(
                "User %s attempted to share vault %s with themselves, skipping",
                vault.owner_id, vault.id,
            )
            skipped[target] = "self"
            continue
        if not user_exists(target):
            logger.warning(
                "Target user %s not found for sharing vault %s, skipping",
                target, vault.id,
            )
            skipped[target] = "not_found"
            continue
        shared_with[target] = level.value
        if target not in granted:
            granted.append(target)

    if targets and not granted:
        if len(targets) == 1 and targets[0] == vault.owner_id:
            raise CannotShareWithSelf(
                f"Cannot share vault '{vault.id}' with its owner"
            )
        raise NoShareTargets(
            f"No valid target users found to share vault '{vault.id}' with"
        )
    return SharePlan(shared_with, granted, skipped)
