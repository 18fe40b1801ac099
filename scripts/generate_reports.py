import argparse
import csv
import logging
import os
from datetime import datetime, timezone
from src.database.firebase import initialize_firebase, FirestoreRecordStore
from src.database.models import Tester
from src.database.schemas import testers_collection
from src.security.streak import StreakEvaluator
from src.utils.logger import setup_logger
from config import config

logger = setup_logger(__name__)

def generate_gig_report(store, gig_id, report_dir="reports/gigs", evaluator=None):
    """Write the streak and lock status of every tester in a gig"""
    evaluator = evaluator or StreakEvaluator(store, streak_days=config.STREAK_LENGTH_DAYS)
    now = evaluator.clock.now()

    report_data = []
    completed_count = 0
    eligible_count = 0
    locked_count = 0
    for tester_id, data in store.query(testers_collection(gig_id)):
        tester = Tester(tester_id, data)
        completed = evaluator.evaluate(gig_id, tester_id, now=now)
        # Locked testers keep their streak result but are never eligible for payout
        eligible = completed and not tester.locked
        completed_count += completed
        eligible_count += eligible
        locked_count += tester.locked
        report_data.append({
            'tester_id': tester_id,
            'device_id': tester.device_id or '',
            'install_id': tester.install_id or '',
            'locked': tester.locked,
            'suspicious_device': tester.suspicious_device or '',
            'completed': completed,
            'eligible': eligible
        })

    os.makedirs(report_dir, exist_ok=True)

    report_date = now.astimezone(timezone.utc).strftime("%Y-%m-%d")
    filename = os.path.join(report_dir, f"{gig_id}_{report_date}.csv")

    with open(filename, 'w', newline='') as csvfile:
        fieldnames = ['tester_id', 'device_id', 'install_id', 'locked', 'suspicious_device', 'completed', 'eligible']
        writer = csv.DictWriter(csvfile, fieldnames=fieldnames)

        writer.writeheader()
        for row in report_data:
            writer.writerow(row)

    summary = f"""Gig Report - {gig_id} - {report_date}

Testers: {len(report_data)}
Completed Streaks: {completed_count}
Eligible Testers: {eligible_count}
Locked Testers: {locked_count}
Generated: {datetime.now(timezone.utc).isoformat()}
"""

    with open(os.path.join(report_dir, f"{gig_id}_{report_date}_summary.txt"), 'w') as f:
        f.write(summary)

    logger.info(f"Generated gig report: {filename}")
    return filename

if __name__ == '__main__':
    parser = argparse.ArgumentParser(description="Streak and lock report for a gig")
    parser.add_argument('gig_id')
    parser.add_argument('--out', default='reports/gigs')
    args = parser.parse_args()

    if not initialize_firebase(config.FIREBASE_CREDS, config.FIREBASE_PROJECT_ID):
        raise SystemExit("Firebase initialization failed")
    generate_gig_report(FirestoreRecordStore(), args.gig_id, args.out)
