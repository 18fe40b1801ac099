import logging
from collections import namedtuple
from src.database.models import Device, Install
from src.database.schemas import gig_tester_path, device_path, install_path
from src.database.store import ArrayUnion, SERVER_TIMESTAMP

logger = logging.getLogger(__name__)

CollisionResult = namedtuple('CollisionResult', ['collision', 'other_tester_id'])

NO_COLLISION = CollisionResult(False, None)


class BindingRegistry:
    """Tracks which tester holds which device and install inside a gig.

    The Device record keeps a ``gigTesters`` map (gig id -> tester id) that acts
    as the secondary index for collision checks. The marked holder's own
    record is read back to confirm it is still bound to the device, so a
    check costs at most two document reads instead of a scan over the gig.
    """

    def __init__(self, store):
        self.store = store

    def check_device_collision(self, gig_id, device_id, tester_id):
        data = self.store.read(device_path(device_id))
        if not data:
            return NO_COLLISION
        holder = Device(device_id, data).tester_for_gig(gig_id)
        if not holder or holder == tester_id:
            return NO_COLLISION
        # The marker goes stale once the holder re-binds to another device
        holder_data = self.store.read(gig_tester_path(gig_id, holder))
        if holder_data and holder_data.get('deviceId') == device_id:
            return CollisionResult(True, holder)
        return NO_COLLISION

    def check_install_collision(self, gig_id, install_id, tester_id):
        data = self.store.read(install_path(install_id))
        if not data:
            return NO_COLLISION
        install = Install(install_id, data)
        # An install belongs to exactly one (gig, tester) pair
        if install.tester_id and (install.gig_id, install.tester_id) != (gig_id, tester_id):
            return CollisionResult(True, install.tester_id)
        return NO_COLLISION

    def bind(self, gig_id, tester_id, device_id, install_id, is_emulator, package_name,
             session_id=None, claimed=False):
        """Record the binding. Callers must run the collision checks first.

        ``claimed`` marks a claim-code redemption and stamps ``claimedAt``;
        heartbeats pass a ``session_id`` instead.
        """
        tester_fields = {
            'deviceId': device_id,
            'installId': install_id,
            'isEmulator': is_emulator,
            'updatedAt': SERVER_TIMESTAMP
        }
        install_fields = {
            'gigId': gig_id,
            'testerId': tester_id,
            'deviceId': device_id
        }
        if package_name:
            tester_fields['packageName'] = package_name
            install_fields['packageName'] = package_name
        if session_id:
            tester_fields['lastSessionId'] = session_id
            tester_fields['lastSeen'] = SERVER_TIMESTAMP
        if claimed:
            tester_fields['claimedAt'] = SERVER_TIMESTAMP
            install_fields['claimedAt'] = SERVER_TIMESTAMP

        self.store.merge_write(gig_tester_path(gig_id, tester_id), tester_fields)
        self.store.merge_write(install_path(install_id), install_fields)

        self._associate_device(device_id, gig_id, tester_id, is_emulator=is_emulator,
                               assign=True)
        logger.info(f"Bound tester {tester_id} in gig {gig_id} to device {device_id}")

    def lock(self, gig_id, tester_id, suspicious_device_id, session_id):
        """Lock the tester and flag the device everywhere. Not undone here."""
        self.store.merge_write(gig_tester_path(gig_id, tester_id), {
            'locked': True,
            'suspiciousDevice': suspicious_device_id,
            'lastSessionId': session_id,
            'updatedAt': SERVER_TIMESTAMP
        })
        self._associate_device(suspicious_device_id, gig_id, tester_id, flagged=True)
        logger.warning(
            f"Locked tester {tester_id} in gig {gig_id} "
            f"(device {suspicious_device_id}, session {session_id})"
        )

    def _associate_device(self, device_id, gig_id, tester_id, is_emulator=None,
                          flagged=False, assign=False):
        fields = {
            'testerIds': ArrayUnion([tester_id]),
            'gigIds': ArrayUnion([gig_id]),
            'lastUsed': SERVER_TIMESTAMP
        }
        if assign:
            fields['gigTesters'] = {gig_id: tester_id}
        if is_emulator is not None:
            fields['isEmulator'] = is_emulator
        if flagged:
            fields['flagged'] = True
        self.store.merge_write(device_path(device_id), fields)
