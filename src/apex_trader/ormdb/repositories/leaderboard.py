"""Repository for leaderboard persistence."""

from typing import TYPE_CHECKING, List, Sequence

from sqlalchemy.exc import SQLAlchemyError

from ...config.logging import get_logger
from ..models import LeaderboardEntryRecord
from .base import BaseRepository

if TYPE_CHECKING:
    from ...services.trading.models import LeaderboardEntry

logger = get_logger(__name__)


class LeaderboardRepository(BaseRepository):
    """Repository for the global leaderboard."""

    def get_entries(self) -> List[LeaderboardEntryRecord]:
        """Get all stored entries in list order."""
        return (
            self.session.query(LeaderboardEntryRecord)
            .order_by(LeaderboardEntryRecord.sort_order)
            .all()
        )

    def replace_entries(self, entries: Sequence["LeaderboardEntry"]) -> None:
        """Replace the stored leaderboard with ``entries`` in one transaction."""
        try:
            self.session.query(LeaderboardEntryRecord).delete()
            self.session.flush()
            for index, entry in enumerate(entries):
                self.session.add(
                    LeaderboardEntryRecord(
                        user_id=entry.user_id,
                        username=entry.username,
                        portfolio_value=entry.portfolio_value,
                        rank=entry.rank,
                        sort_order=index,
                    )
                )
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error("Leaderboard write rolled back", error=str(e))
            raise
