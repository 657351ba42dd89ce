"""Submitter activity statistics for suggestion moderation.

Flags users who submit unusually many suggestions within any 24-hour span.
"""

import logging
from collections import defaultdict
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Protocol

from suggestion_insights.services.suggestion_store import SubmissionEvent

logger = logging.getLogger(__name__)

# More than this many suggestions in one 24-hour window is suspicious
SUSPICIOUS_DAILY_THRESHOLD = 5
ACTIVITY_WINDOW = timedelta(hours=24)


class SubmitterProfile(Protocol):
    """Fields of a user needed for activity statistics."""
    id: object
    email: str | None
    avatar_url: str | None
    is_blocked: bool

    @property
    def full_name(self) -> str: ...


@dataclass(frozen=True)
class SubmitterActivity:
    """Suggestion activity of one user."""
    user_id: str
    name: str
    email: str | None
    avatar_url: str | None
    total_suggestions: int
    max_suggestions_in_one_day: int
    status: str
    is_blocked: bool
    has_hidden_suggestions: bool


def max_in_window(timestamps: Sequence[datetime], window: timedelta = ACTIVITY_WINDOW) -> int:
    """Largest number of timestamps inside any sliding window.

    Two-pointer scan over the sorted timestamps; endpoints exactly one window
    apart still count as the same window.
    """
    ordered = sorted(timestamps)
    best = 0
    left = 0
    for right in range(len(ordered)):
        while ordered[right] - ordered[left] > window:
            left += 1
        best = max(best, right - left + 1)
    return best


class SubmitterActivityAnalyzer:
    """Computes per-user suggestion volume and burst statistics."""

    def __init__(self, suspicious_threshold: int = SUSPICIOUS_DAILY_THRESHOLD):
        self.suspicious_threshold = suspicious_threshold

    def analyze(
        self,
        users: Sequence[SubmitterProfile],
        events: Sequence[SubmissionEvent],
    ) -> list[SubmitterActivity]:
        """Build one activity entry per user, in the order users are given."""
        timestamps: dict[str, list[datetime]] = defaultdict(list)
        hidden: set[str] = set()
        for event in events:
            timestamps[event.user_id].append(event.created_at)
            if event.is_hidden:
                hidden.add(event.user_id)

        results: list[SubmitterActivity] = []
        for user in users:
            user_id = str(user.id)
            user_times = timestamps.get(user_id, [])
            max_in_day = max_in_window(user_times)
            results.append(
                SubmitterActivity(
                    user_id=user_id,
                    name=user.full_name,
                    email=user.email,
                    avatar_url=user.avatar_url,
                    total_suggestions=len(user_times),
                    max_suggestions_in_one_day=max_in_day,
                    status="Suspicious" if max_in_day > self.suspicious_threshold else "Normal",
                    is_blocked=bool(user.is_blocked),
                    has_hidden_suggestions=user_id in hidden,
                )
            )

        suspicious = sum(1 for r in results if r.status == "Suspicious")
        logger.info(
            f"Submitter activity: {len(results)} users, {len(events)} suggestions, "
            f"{suspicious} suspicious"
        )
        return results
