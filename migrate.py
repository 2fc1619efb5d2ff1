import logging
import sys

from db import ProfileRepository, StatsRepository
from gamification_service import GamificationService

logger = logging.getLogger(__name__)


def migrate(db_path="training.db", default_availability=3):
    """Fold each user's profile preferences and availability into the stats record.

    Returns the number of stats records written.
    """
    migrated = 0
    for user_id in ProfileRepository(db_path).fetch_user_ids():
        profile = ProfileRepository(db_path, user_id).fetch_raw()
        stats_repo = StatsRepository(db_path, user_id)
        merged = GamificationService.merge_stats(
            profile, stats_repo.fetch_raw(), default_availability
        )
        stats_repo.save(merged)
        migrated += 1
    logger.info("merged profile into stats for %d users", migrated)
    return migrated


if __name__ == '__main__':
    logging.basicConfig(level=logging.INFO)
    path = sys.argv[1] if len(sys.argv) > 1 else 'training.db'
    migrate(path)
