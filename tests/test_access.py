"""
Tests for the vault permission model.

Tests cover:
- PermissionLevel ordering (write implies read)
- evaluate() decision table for owner, readers, writers and strangers
- Share mutation validation (level, self-share, existing share)
- Batch share planning with per-target skips
"""
import pytest

from vaultify.exceptions import (
    CannotShareWithSelf,
    ForbiddenAccess,
    InvalidPermissionLevel,
    NoShareTargets,
    NotShared,
)
from vaultify.models import Vault
from vaultify.vault.access import (
    PermissionLevel,
    evaluate,
    plan_share,
    require_existing_share,
    validate_permission_level,
    validate_share_target,
)


def make_vault(**shared) -> Vault:
    return Vault(id="V", owner_id="U1", name="infra", shared_with=shared)


# --- Permission lattice ---

class TestPermissionLevel:
    """write ⊇ read."""

    def test_write_satisfies_both(self):
        assert PermissionLevel.WRITE.satisfies(PermissionLevel.READ)
        assert PermissionLevel.WRITE.satisfies(PermissionLevel.WRITE)

    def test_read_satisfies_only_read(self):
        assert PermissionLevel.READ.satisfies(PermissionLevel.READ)
        assert not PermissionLevel.READ.satisfies(PermissionLevel.WRITE)

    def test_ordering(self):
        assert PermissionLevel.WRITE.rank > PermissionLevel.READ.rank

    def test_string_values(self):
        assert PermissionLevel("read") is PermissionLevel.READ
        assert PermissionLevel.WRITE == "write"

    def test_validate_level(self):
        assert validate_permission_level("write") is PermissionLevel.WRITE
        with pytest.raises(InvalidPermissionLevel):
            validate_permission_level("admin")
        with pytest.raises(InvalidPermissionLevel):
            validate_permission_level("READ")
        with pytest.raises(InvalidPermissionLevel):
            validate_permission_level(None)


# --- evaluate() ---

class TestEvaluate:
    """Decision table for vault access."""

    def test_owner_write_on_empty_vault(self):
        assert evaluate(make_vault(), "U1", "write") is True

    def test_owner_read(self):
        assert evaluate(make_vault(), "U1", PermissionLevel.READ) is True

    def test_owner_skips_map_lookup(self):
        # a corrupted entry for someone else never matters to the owner
        vault = make_vault(U2="admin")
        assert evaluate(vault, "U1", "write") is True

    def test_stranger_is_forbidden(self):
        with pytest.raises(ForbiddenAccess):
            evaluate(make_vault(), "U2", "read")

    def test_reader_cannot_write(self):
        with pytest.raises(ForbiddenAccess):
            evaluate(make_vault(U2="read"), "U2", "write")

    def test_reader_can_read(self):
        assert evaluate(make_vault(U2="read"), "U2", "read") is True

    def test_writer_can_read_and_write(self):
        vault = make_vault(U2="write")
        assert evaluate(vault, "U2", "read") is True
        assert evaluate(vault, "U2", "write") is True

    def test_unknown_stored_level(self):
        with pytest.raises(InvalidPermissionLevel):
            evaluate(make_vault(U2="admin"), "U2", "read")

    def test_unknown_required_level(self):
        with pytest.raises(InvalidPermissionLevel):
            evaluate(make_vault(), "U1", "admin")

    def test_does_not_mutate_vault(self):
        vault = make_vault(U2="read")
        evaluate(vault, "U2", "read")
        assert vault.shared_with == {"U2": "read"}


# --- Share mutation rules ---

class TestShareValidation:
    """Checks applied before a sharing change is persisted."""

    def test_self_share_rejected(self):
        with pytest.raises(CannotShareWithSelf):
            validate_share_target(make_vault(), "U1")

    def test_other_target_accepted(self):
        validate_share_target(make_vault(), "U2")

    def test_existing_share_required(self):
        with pytest.raises(NotShared):
            require_existing_share(make_vault(), "U2")

    def test_not_shared_is_not_forbidden(self):
        with pytest.raises(NotShared) as exc:
            require_existing_share(make_vault(), "U2")
        assert not isinstance(exc.value, ForbiddenAccess)

    def test_existing_share_returns_level(self):
        assert require_existing_share(make_vault(U2="write"), "U2") == "write"


# --- Batch share ---

class TestPlanShare:
    """Best-effort batch sharing."""

    known = {"U2", "U3"}.__contains__

    def test_grants_all_valid_targets(self):
        plan = plan_share(make_vault(), ["U2", "U3"], "read", self.known)
        assert plan.granted == ["U2", "U3"]
        assert plan.shared_with == {"U2": "read", "U3": "read"}
        assert plan.skipped == {}

    def test_skips_owner_and_unknown(self):
        plan = plan_share(make_vault(), ["U1", "U2", "U9"], "write", self.known)
        assert plan.granted == ["U2"]
        assert plan.skipped == {"U1": "self", "U9": "not_found"}
        assert "U1" not in plan.shared_with

    def test_overwrites_existing_level(self):
        plan = plan_share(make_vault(U2="read"), ["U2"], "write", self.known)
        assert plan.shared_with == {"U2": "write"}

    def test_keeps_other_entries(self):
        plan = plan_share(make_vault(U3="write"), ["U2"], "read", self.known)
        assert plan.shared_with == {"U2": "read", "U3": "write"}

    def test_does_not_mutate_vault(self):
        vault = make_vault()
        plan_share(vault, ["U2"], "read", self.known)
        assert vault.shared_with == {}

    def test_duplicate_targets_granted_once(self):
        plan = plan_share(make_vault(), ["U2", "U2"], "read", self.known)
        assert plan.granted == ["U2"]

    def test_invalid_level(self):
        with pytest.raises(InvalidPermissionLevel):
            plan_share(make_vault(), ["U2"], "admin", self.known)

    def test_only_self(self):
        with pytest.raises(CannotShareWithSelf):
            plan_share(make_vault(), ["U1"], "read", self.known)

    def test_repeated_self_is_not_self_share(self):
        with pytest.raises(NoShareTargets):
            plan_share(make_vault(), ["U1", "U1"], "read", self.known)

    def test_nothing_granted(self):
        with pytest.raises(NoShareTargets):
            plan_share(make_vault(), ["U1", "U9"], "read", self.known)

    def test_empty_request(self):
        plan = plan_share(make_vault(), [], "read", self.known)
        assert plan.granted == []
