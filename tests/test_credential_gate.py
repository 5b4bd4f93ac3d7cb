"""
Credential gate: credential checks, geofence lockout and session recording.
"""

from datetime import timedelta
from unittest.mock import MagicMock

import pytest

from privatediary.core.config import BlockListMode
from privatediary.db.repositories.session_repository import SessionRepository
from privatediary.db.repositories.user_repository import UserRepository
from privatediary.models.base import utcnow
from privatediary.models.login_activity import GeoLocation
from privatediary.services.access_control import AccessPolicy, DeviceInfo
from privatediary.services.credential_gate import CredentialGate, verify_password, hash_password
from privatediary.services.exceptions import (
    InvalidCredentials, AccountLocked, LocationRequired, AccessBlocked
)
from privatediary.services.lockout_policy import LockoutPolicy, LOCKOUT_DURATION
from privatediary.services.session_ledger import SessionLedger

from tests.helpers import PASSWORD, BACKUP_PASSWORD

DEVICE = DeviceInfo(device_id="d1", device_name="Pixel", ip="10.0.0.5")
LOCATION = GeoLocation(lat=26.14, lon=91.73, accuracy=12.0)


# =============================================================================
# Successful login
# =============================================================================


async def test_login_with_location_succeeds_and_records_active_session(gate, alice, session_manager):
    result = await gate.authenticate("alice", PASSWORD, False, DEVICE, LOCATION)

    assert result.username == "alice"
    assert result.requires_notification_permission is True
    assert session_manager.validate_session(result.session_token)[0] is True

    sessions = await SessionRepository.get_by_device("d1")
    assert len(sessions) == 1
    assert sessions[0].is_active is True
    assert sessions[0].is_suspicious is False
    assert sessions[0].location == LOCATION

    stored = await UserRepository.get_by_username("alice")
    assert stored.last_login is not None
    assert stored.emergency_lock_until is None


async def test_backup_password_is_accepted(gate, alice):
    result = await gate.authenticate("alice", BACKUP_PASSWORD, True, DEVICE, LOCATION)
    assert result.username == "alice"


async def test_notification_permission_flag_reported(gate, alice):
    await UserRepository.update_permissions(alice.id, notification_permission=True)

    result = await gate.authenticate("alice", PASSWORD, False, DEVICE, LOCATION)

    assert result.requires_notification_permission is False


# =============================================================================
# Invalid credentials
# =============================================================================


async def test_unknown_user_and_wrong_password_are_indistinguishable(gate, alice):
    with pytest.raises(InvalidCredentials) as unknown:
        await gate.authenticate("mallory", PASSWORD, False, DEVICE, LOCATION)
    with pytest.raises(InvalidCredentials) as wrong:
        await gate.authenticate("alice", "nope", False, DEVICE, LOCATION)

    assert str(unknown.value) == str(wrong.value)


async def test_primary_password_rejected_as_backup(gate, alice):
    with pytest.raises(InvalidCredentials):
        await gate.authenticate("alice", PASSWORD, True, DEVICE, LOCATION)


async def test_wrong_password_does_not_lock_or_record(gate, alice):
    with pytest.raises(InvalidCredentials):
        await gate.authenticate("alice", "nope", False, DEVICE, None)

    stored = await UserRepository.get_by_username("alice")
    assert stored.emergency_lock_until is None
    assert await SessionRepository.get_by_device("d1") == []


# =============================================================================
# Geofence lockout
# =============================================================================


async def test_login_without_location_locks_account_for_fifteen_minutes(gate, alice):
    before = utcnow()

    with pytest.raises(LocationRequired) as exc:
        await gate.authenticate("alice", PASSWORD, False, DeviceInfo(device_id="d1"), None)

    stored = await UserRepository.get_by_username("alice")
    expected = before + LOCKOUT_DURATION
    assert abs((stored.emergency_lock_until - expected).total_seconds()) <= 1
    assert exc.value.until == stored.emergency_lock_until

    sessions = await SessionRepository.get_by_device("d1")
    assert len(sessions) == 1
    assert sessions[0].is_suspicious is True
    assert sessions[0].location is None


async def test_backup_password_does_not_bypass_lock(gate, alice):
    with pytest.raises(LocationRequired):
        await gate.authenticate("alice", PASSWORD, False, DeviceInfo(device_id="d1"), None)

    with pytest.raises(AccountLocked):
        await gate.authenticate("alice", BACKUP_PASSWORD, True, DEVICE, LOCATION)

    with pytest.raises(AccountLocked):
        await gate.authenticate("alice", PASSWORD, False, DEVICE, LOCATION)


async def test_lock_check_precedes_credential_verification(gate, alice):
    await UserRepository.set_emergency_lock(alice.id, utcnow() + timedelta(minutes=5))

    with pytest.raises(AccountLocked):
        await gate.authenticate("alice", "wrong", False, DEVICE, LOCATION)


async def test_expired_lock_no_longer_blocks(gate, alice):
    await UserRepository.set_emergency_lock(alice.id, utcnow() - timedelta(seconds=1))

    result = await gate.authenticate("alice", PASSWORD, False, DEVICE, LOCATION)

    assert result.username == "alice"


async def test_new_trigger_overwrites_prior_lock(alice, database):
    policy = LockoutPolicy()
    far_future = utcnow() + timedelta(days=1)
    await UserRepository.set_emergency_lock(alice.id, far_future)

    now = utcnow()
    until = await policy.trigger_lockout(alice, now)

    stored = await UserRepository.get_by_username("alice")
    assert until == now + LOCKOUT_DURATION
    assert stored.emergency_lock_until == until


# =============================================================================
# Block-list hook
# =============================================================================


async def test_block_list_hook_invoked_for_every_attempt(database, alice, session_manager):
    policy = MagicMock(spec=AccessPolicy)
    gate = CredentialGate(
        lockout_policy=LockoutPolicy(),
        session_ledger=SessionLedger(),
        access_policy=policy,
        session_manager=session_manager
    )

    await gate.authenticate("alice", PASSWORD, False, DEVICE, LOCATION)
    with pytest.raises(InvalidCredentials):
        await gate.authenticate("alice", "wrong", False, DEVICE, LOCATION)
    with pytest.raises(LocationRequired):
        await gate.authenticate("alice", PASSWORD, False, DEVICE, None)
    with pytest.raises(AccountLocked):
        await gate.authenticate("alice", PASSWORD, False, DEVICE, LOCATION)

    assert policy.check.call_count == 4
    user_arg, device_arg = policy.check.call_args.args
    assert user_arg.username == "alice"
    assert device_arg == DEVICE


async def test_blocked_ip_only_logged_in_observe_mode(gate, alice):
    await UserRepository.add_blocked_ip(alice.id, DEVICE.ip)

    result = await gate.authenticate("alice", PASSWORD, False, DEVICE, LOCATION)

    assert result.username == "alice"


async def test_blocked_device_rejected_in_enforce_mode(database, alice, session_manager):
    gate = CredentialGate(
        lockout_policy=LockoutPolicy(),
        session_ledger=SessionLedger(),
        access_policy=AccessPolicy(BlockListMode.ENFORCE),
        session_manager=session_manager
    )
    await UserRepository.add_blocked_device(alice.id, "d1")

    with pytest.raises(AccessBlocked):
        await gate.authenticate("alice", PASSWORD, False, DEVICE, LOCATION)

    assert await SessionRepository.get_by_device("d1") == []


# =============================================================================
# Registration and hashing
# =============================================================================


async def test_register_user_hashes_both_passwords(gate, database):
    user = await gate.register_user("bob", "pw-one", backup_password="pw-two", user_id="u-bob")

    stored = await UserRepository.get_by_username("bob")
    assert stored.id == "u-bob" == user.id
    assert stored.password_hash != "pw-one"
    assert verify_password("pw-one", stored.password_hash)
    assert verify_password("pw-two", stored.backup_password_hash)


async def test_register_duplicate_username_rejected(gate, alice):
    with pytest.raises(ValueError):
        await gate.register_user("alice", "whatever")


def test_verify_password_handles_missing_or_malformed_hash():
    assert verify_password("x", None) is False
    assert verify_password("x", "not-a-bcrypt-hash") is False
    assert verify_password("x", hash_password("x")) is True
