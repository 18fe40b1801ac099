from src.utils.conversions import to_utc_datetime, parse_date_key


class Tester:
    def __init__(self, tester_id, data):
        self.tester_id = tester_id
        self.device_id = data.get('deviceId')
        self.install_id = data.get('installId')
        self.locked = bool(data.get('locked', False))
        self.last_session_id = data.get('lastSessionId')
        self.is_emulator = data.get('isEmulator')
        self.package_name = data.get('packageName')
        self.suspicious_device = data.get('suspiciousDevice')
        self.last_seen = data.get('lastSeen')

    @property
    def is_bound(self):
        return bool(self.device_id or self.install_id)

class DayBucket:
    def __init__(self, date_key, data):
        self.date_key = date_key
        self.date = parse_date_key(date_key)
        self.opens = data.get('opens', 0) or 0
        self.timestamps = data.get('timestamps', [])
        self.last_updated = data.get('lastUpdated')

class Device:
    def __init__(self, device_id, data):
        self.device_id = device_id
        self.tester_ids = data.get('testerIds', [])
        self.gig_ids = data.get('gigIds', [])
        self.gig_testers = data.get('gigTesters', {})
        self.flagged = bool(data.get('flagged', False))
        self.last_used = data.get('lastUsed')

    def tester_for_gig(self, gig_id):
        return self.gig_testers.get(gig_id)

class Install:
    def __init__(self, install_id, data):
        self.install_id = install_id
        self.gig_id = data.get('gigId')
        self.tester_id = data.get('testerId')
        self.device_id = data.get('deviceId')
        self.package_name = data.get('packageName')
        self.claimed_at = data.get('claimedAt')

class ClaimCode:
    def __init__(self, code, data):
        self.code = code
        self.gig_id = data.get('gigId')
        self.tester_id = data.get('testerId')
        self.package_name = data.get('packageName')
        self.raw_expires_at = data.get('expiresAt')
        self.expires_at = to_utc_datetime(self.raw_expires_at)
        self.used = bool(data.get('used', False))
        self.used_at = data.get('usedAt')
        self.used_by_install_id = data.get('usedByInstallId')

    def is_expired(self, now):
        # No expiry recorded means the code never expires
        if self.raw_expires_at is None:
            return False
        # An expiry that cannot be read is treated as already passed
        if self.expires_at is None:
            return True
        return now > self.expires_at
