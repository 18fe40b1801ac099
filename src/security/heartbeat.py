import logging
from collections import namedtuple
from src.database.models import DayBucket, Tester
from src.database.schemas import gig_tester_path, day_path
from src.database.store import Increment, ArrayUnion, SERVER_TIMESTAMP
from src.security.errors import NotFound
from src.utils.clock import SystemClock, utc_date_key
from src.utils.validators import validate_payload, HEARTBEAT_SCHEMA

logger = logging.getLogger(__name__)


class HeartbeatResult(namedtuple('HeartbeatResult', ['completed', 'multi_account_detected', 'device_mismatch'])):

    def to_dict(self):
        return {
            'completed': self.completed,
            'multiAccountDetected': self.multi_account_detected,
            'deviceMismatch': self.device_mismatch
        }


class HeartbeatProcessor:
    """Validates a liveness signal from a bound install and records engagement.

    A heartbeat either locks the tester (binding violation) or writes the
    day's engagement, never both.
    """

    def __init__(self, store, registry, evaluator, clock=None):
        self.store = store
        self.registry = registry
        self.evaluator = evaluator
        self.clock = clock or SystemClock()

    def process(self, payload):
        validate_payload(payload, HEARTBEAT_SCHEMA)

        gig_id = payload['gigId']
        tester_id = payload['testerId']
        device_id = payload['deviceId']
        install_id = payload['installId']
        session_id = payload['sessionId']

        data = self.store.read(gig_tester_path(gig_id, tester_id))
        if data is None:
            raise NotFound("Tester not assigned to gig")
        tester = Tester(tester_id, data)

        # Testers that skipped the claim flow adopt the binding on first contact
        device_mismatch = bool(
            (tester.device_id and tester.device_id != device_id) or
            (tester.install_id and tester.install_id != install_id)
        )

        multi_account = device_mismatch
        if not device_mismatch:
            device_check = self.registry.check_device_collision(gig_id, device_id, tester_id)
            install_check = self.registry.check_install_collision(gig_id, install_id, tester_id)
            if device_check.collision or install_check.collision:
                other = device_check.other_tester_id or install_check.other_tester_id
                logger.warning(
                    f"Tester {tester_id} in gig {gig_id} shares device {device_id} "
                    f"or install {install_id} with tester {other}"
                )
                multi_account = True

        if multi_account:
            self.registry.lock(gig_id, tester_id, device_id, session_id)
            return HeartbeatResult(False, True, device_mismatch)

        package_name = None
        if not tester.is_bound:
            package_name = (payload.get('device') or {}).get('appPackageName')
        self.registry.bind(gig_id, tester_id, device_id, install_id, payload['isEmulator'],
                           package_name, session_id=session_id)

        self.record_opens(gig_id, tester_id, payload['timestamps'])

        completed = self.evaluator.evaluate(gig_id, tester_id)
        return HeartbeatResult(completed, False, False)

    def record_opens(self, gig_id, tester_id, timestamps):
        """Merge timestamps into today's bucket, counting only unseen ones"""
        date_key = utc_date_key(self.clock.now())
        path = day_path(gig_id, tester_id, date_key)
        existing = self.store.read(path)
        seen = set(DayBucket(date_key, existing).timestamps) if existing else set()
        fresh = [ts for ts in dict.fromkeys(timestamps) if ts not in seen]

        self.store.merge_write(path, {
            'opens': Increment(len(fresh)),
            'timestamps': ArrayUnion(timestamps),
            'lastUpdated': SERVER_TIMESTAMP
        })
        return len(fresh)
