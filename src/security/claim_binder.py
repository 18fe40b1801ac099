import logging
from src.database.models import ClaimCode
from src.database.schemas import claim_code_path, gig_tester_path
from src.database.store import SERVER_TIMESTAMP
from src.security.errors import (
    NotFound, FailedPrecondition, DeadlineExceeded, PermissionDenied, AlreadyExists
)
from src.utils.clock import SystemClock

logger = logging.getLogger(__name__)


class ClaimBinder:
    """Redeems one-time claim codes and establishes the initial binding.

    Checks that only need the claim code run first; collision checks that
    cost extra reads come after.
    """

    def __init__(self, store, registry, clock=None):
        self.store = store
        self.registry = registry
        self.clock = clock or SystemClock()

    def redeem(self, claim_code, install_id, device_id, package_name, is_emulator):
        data = self.store.read(claim_code_path(claim_code))
        if not data:
            raise NotFound("Claim code not found")
        code = ClaimCode(claim_code, data)

        if code.used:
            raise FailedPrecondition("Claim code already used")
        if code.is_expired(self.clock.now()):
            if code.expires_at is None:
                logger.warning(f"Claim code {claim_code} has unreadable expiresAt {code.raw_expires_at!r}")
            raise DeadlineExceeded("Claim code expired")
        if code.package_name != package_name:
            logger.warning(
                f"Package mismatch for claim code {claim_code}: "
                f"expected {code.package_name}, got {package_name}"
            )
            raise PermissionDenied("Package name does not match this gig")

        gig_id, tester_id = code.gig_id, code.tester_id

        if self.registry.check_install_collision(gig_id, install_id, tester_id).collision:
            raise AlreadyExists("Install already bound to another tester")

        device_check = self.registry.check_device_collision(gig_id, device_id, tester_id)
        if device_check.collision:
            logger.warning(
                f"Device {device_id} already used by tester {device_check.other_tester_id} "
                f"in gig {gig_id}; rejected claim for {tester_id}"
            )
            raise PermissionDenied("Device already used by another tester in this gig")

        if not self.store.read(gig_tester_path(gig_id, tester_id)):
            raise NotFound("Tester not assigned to gig")

        self.registry.bind(gig_id, tester_id, device_id, install_id, is_emulator,
                           package_name, claimed=True)
        self.store.merge_write(claim_code_path(claim_code), {
            'used': True,
            'usedAt': SERVER_TIMESTAMP,
            'usedByInstallId': install_id
        })

        logger.info(f"Claim code {claim_code} redeemed by install {install_id} for tester {tester_id}")
        return {'gigId': gig_id, 'testerId': tester_id}
