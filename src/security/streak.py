import logging
from datetime import timedelta
from src.database.models import DayBucket
from src.database.schemas import days_collection
from src.utils.clock import SystemClock
from src.utils.conversions import to_utc_datetime

logger = logging.getLogger(__name__)

STREAK_LENGTH_DAYS = 14


class StreakEvaluator:
    """Certifies an unbroken run of active days ending today.

    Only the most recently updated ``streak_days`` buckets are inspected. They
    must cover exactly the trailing calendar window (today and the days before
    it) with at least one open each. A longer history elsewhere does not help.
    """

    def __init__(self, store, clock=None, streak_days=STREAK_LENGTH_DAYS):
        self.store = store
        self.clock = clock or SystemClock()
        self.streak_days = streak_days

    def fetch_recent_buckets(self, gig_id, tester_id):
        docs = self.store.query(
            days_collection(gig_id, tester_id),
            order_by='lastUpdated',
            descending=True,
            limit=self.streak_days
        )
        return [DayBucket(doc_id, data) for doc_id, data in docs]

    def evaluate(self, gig_id, tester_id, now=None) -> bool:
        buckets = self.fetch_recent_buckets(gig_id, tester_id)
        if len(buckets) < self.streak_days:
            return False

        # Ids that are not calendar dates can never match the window
        if any(bucket.date is None for bucket in buckets):
            logger.warning(f"Tester {tester_id} in gig {gig_id} has malformed day buckets")
            return False
        buckets.sort(key=lambda bucket: bucket.date)

        today = to_utc_datetime(now or self.clock.now()).date()
        cutoff = today - timedelta(days=self.streak_days - 1)
        for offset, bucket in enumerate(buckets):
            if bucket.opens <= 0:
                return False
            if bucket.date != cutoff + timedelta(days=offset):
                return False

        logger.info(f"Tester {tester_id} in gig {gig_id} completed a {self.streak_days}-day streak")
        return True
