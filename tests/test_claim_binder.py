"""
Tests for claim code redemption
"""

from datetime import timedelta

import pytest

from src.database.schemas import claim_code_path, gig_tester_path, install_path, device_path
from src.security.errors import (
    NotFound, FailedPrecondition, DeadlineExceeded, PermissionDenied, AlreadyExists
)

from conftest import NOW, PACKAGE, add_tester, add_claim_code, heartbeat_payload


@pytest.fixture
def provisioned(store):
    add_tester(store, "gig1", "alice")
    add_tester(store, "gig1", "bob")
    add_claim_code(store, "CODE-A", "gig1", "alice")
    add_claim_code(store, "CODE-B", "gig1", "bob")
    return store


class TestRedeem:

    def test_successful_redemption(self, provisioned, claims):
        result = claims.redeem("CODE-A", "install-a", "device-a", PACKAGE, False)
        assert result == {'gigId': "gig1", 'testerId': "alice"}

        code = provisioned.read(claim_code_path("CODE-A"))
        assert code['used'] is True
        assert code['usedAt'] == NOW
        assert code['usedByInstallId'] == "install-a"

        tester = provisioned.read(gig_tester_path("gig1", "alice"))
        assert tester['deviceId'] == "device-a"
        assert tester['installId'] == "install-a"

        assert provisioned.read(install_path("install-a"))['testerId'] == "alice"
        assert provisioned.read(device_path("device-a"))['gigTesters'] == {"gig1": "alice"}

    def test_unknown_code(self, provisioned, claims):
        with pytest.raises(NotFound):
            claims.redeem("NOPE", "install-a", "device-a", PACKAGE, False)

    def test_code_cannot_be_redeemed_twice(self, provisioned, claims):
        claims.redeem("CODE-A", "install-a", "device-a", PACKAGE, False)
        with pytest.raises(FailedPrecondition):
            claims.redeem("CODE-A", "install-a", "device-a", PACKAGE, False)

    def test_expired_code(self, provisioned, claims):
        add_claim_code(provisioned, "OLD", "gig1", "alice", expires_at=NOW - timedelta(seconds=1))
        with pytest.raises(DeadlineExceeded):
            claims.redeem("OLD", "install-a", "device-a", PACKAGE, False)

    def test_expiry_wins_over_other_failures(self, provisioned, claims):
        claims.redeem("CODE-B", "install-b", "device-b", PACKAGE, False)
        add_claim_code(provisioned, "OLD", "gig1", "alice", expires_at=NOW - timedelta(days=3))
        with pytest.raises(DeadlineExceeded):
            claims.redeem("OLD", "install-b", "device-b", "com.wrong.app", False)

    def test_expiry_as_iso_string_and_epoch_millis(self, provisioned, claims):
        add_claim_code(provisioned, "ISO", "gig1", "alice", expires_at="2024-01-13T00:00:00Z")
        with pytest.raises(DeadlineExceeded):
            claims.redeem("ISO", "install-a", "device-a", PACKAGE, False)

        future_ms = int((NOW + timedelta(hours=1)).timestamp() * 1000)
        add_claim_code(provisioned, "EPOCH", "gig1", "alice", expires_at=future_ms)
        assert claims.redeem("EPOCH", "install-a", "device-a", PACKAGE, False)['testerId'] == "alice"

    @pytest.mark.parametrize("expires_at", ["2023-13-40T00:00:00Z", "next week", [1, 2]])
    def test_unreadable_expiry_is_expired(self, provisioned, claims, expires_at):
        add_claim_code(provisioned, "BAD", "gig1", "alice", expires_at=expires_at)
        with pytest.raises(DeadlineExceeded):
            claims.redeem("BAD", "install-a", "device-a", PACKAGE, False)
        assert provisioned.read(claim_code_path("BAD"))['used'] is False

    def test_expired_by_clock(self, provisioned, claims, clock):
        clock.advance(days=2)
        with pytest.raises(DeadlineExceeded):
            claims.redeem("CODE-A", "install-a", "device-a", PACKAGE, False)

    def test_package_mismatch(self, provisioned, claims):
        with pytest.raises(PermissionDenied):
            claims.redeem("CODE-A", "install-a", "device-a", "com.other.app", False)
        assert provisioned.read(claim_code_path("CODE-A"))['used'] is False

    def test_install_bound_to_other_tester(self, provisioned, claims):
        claims.redeem("CODE-A", "install-a", "device-a", PACKAGE, False)
        with pytest.raises(AlreadyExists):
            claims.redeem("CODE-B", "install-a", "device-b", PACKAGE, False)

    def test_device_used_by_other_tester(self, provisioned, claims):
        claims.redeem("CODE-A", "install-a", "device-a", PACKAGE, False)
        with pytest.raises(PermissionDenied):
            claims.redeem("CODE-B", "install-b", "device-a", PACKAGE, False)
        assert provisioned.read(claim_code_path("CODE-B"))['used'] is False
        assert provisioned.read(gig_tester_path("gig1", "bob")).get('deviceId') is None

    def test_device_released_after_reclaim_on_new_device(self, provisioned, claims, heartbeat):
        claims.redeem("CODE-A", "install-a1", "device-1", PACKAGE, False)
        add_claim_code(provisioned, "CODE-A2", "gig1", "alice")
        claims.redeem("CODE-A2", "install-a2", "device-2", PACKAGE, False)
        assert provisioned.read(gig_tester_path("gig1", "alice"))['deviceId'] == "device-2"

        result = heartbeat.process(heartbeat_payload(
            testerId="bob", deviceId="device-1", installId="install-b"
        ))

        assert result.multi_account_detected is False
        assert provisioned.read(gig_tester_path("gig1", "bob"))['locked'] is False
        assert provisioned.read(device_path("device-1"))['gigTesters'] == {"gig1": "bob"}

    def test_same_device_in_another_gig_is_allowed(self, provisioned, claims):
        claims.redeem("CODE-A", "install-a", "device-a", PACKAGE, False)
        add_tester(provisioned, "gig2", "bob")
        add_claim_code(provisioned, "CODE-G2", "gig2", "bob", package="com.example.second")
        result = claims.redeem("CODE-G2", "install-g2", "device-a", "com.example.second", False)
        assert result == {'gigId': "gig2", 'testerId': "bob"}

    def test_reclaim_by_same_tester_is_idempotent(self, provisioned, claims):
        claims.redeem("CODE-A", "install-a", "device-a", PACKAGE, False)
        add_claim_code(provisioned, "CODE-A2", "gig1", "alice")
        result = claims.redeem("CODE-A2", "install-a", "device-a", PACKAGE, False)
        assert result == {'gigId': "gig1", 'testerId': "alice"}
        assert provisioned.read(device_path("device-a"))['testerIds'] == ["alice"]

    def test_unprovisioned_tester(self, provisioned, claims):
        add_claim_code(provisioned, "GHOST", "gig1", "ghost")
        with pytest.raises(NotFound):
            claims.redeem("GHOST", "install-g", "device-g", PACKAGE, False)
        assert provisioned.read(claim_code_path("GHOST"))['used'] is False
        assert provisioned.read(install_path("install-g")) is None

    def test_code_without_expiry_never_expires(self, provisioned, claims, clock):
        provisioned.merge_write(claim_code_path("FOREVER"), {
            'gigId': "gig1", 'testerId': "alice", 'packageName': PACKAGE, 'used': False
        })
        clock.advance(days=365)
        assert claims.redeem("FOREVER", "install-a", "device-a", PACKAGE, False)['gigId'] == "gig1"
