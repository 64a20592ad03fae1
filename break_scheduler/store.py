"""
JSON file storage for committed break schedules.

Layout:
    {
      "2026-10-19": {
        "U001": {"shift_type": "AM", "intervals": {"10:00": "HB1", "12:00": "B", ...}},
        ...
      },
      ...
    }
"""
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from .models import BREAK_KINDS, BreakScheduleUpdateRequest, SiblingSchedule
from .time_utils import normalize_time

logger = logging.getLogger(__name__)


class BreakScheduleStore:
    """Committed break schedules kept in a single JSON file."""

    def __init__(self, path: str):
        self.path = Path(path)

    def load(self) -> Dict[str, Dict[str, Any]]:
        """Load all schedules; a missing file means no schedules yet."""
        if not self.path.exists():
            return {}
        with open(self.path, 'r', encoding='utf-8') as f:
            return json.load(f)

    def _write(self, data: Dict[str, Dict[str, Any]]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2, ensure_ascii=False)

    def get_schedule(self, user_id: str, schedule_date: str) -> Optional[Dict[str, Any]]:
        """Committed entry {shift_type, intervals} of one agent, or None."""
        return self.load().get(schedule_date, {}).get(user_id)

    def list_schedules(self, schedule_date: str) -> List[Dict[str, Any]]:
        """All committed schedules of a date, sorted by user id."""
        day = self.load().get(schedule_date, {})
        return [
            {'user_id': user_id, 'shift_type': entry.get('shift_type'), 'intervals': entry.get('intervals', {})}
            for user_id, entry in sorted(day.items())
        ]

    def get_sibling_schedules(self, schedule_date: str, exclude_user_id: Optional[str] = None) -> List[SiblingSchedule]:
        """Other agents' committed breaks for the date."""
        return [
            SiblingSchedule.from_dict(entry)
            for entry in self.list_schedules(schedule_date)
            if entry['user_id'] != exclude_user_id
        ]

    def save_schedule(self, request: BreakScheduleUpdateRequest, shift_type: Optional[str]) -> Dict[str, Any]:
        """
        Apply a request on top of the agent's committed schedule.

        Setting a break kind replaces every committed slot of that kind;
        an IN slot clears whatever break was committed at that time.

        Returns:
            The agent's updated entry
        """
        data = self.load()
        day = data.setdefault(request.schedule_date, {})
        entry = day.get(request.user_id, {'shift_type': shift_type, 'intervals': {}})
        intervals = dict(entry.get('intervals', {}))

        replaced_kinds = {i.break_type for i in request.intervals if i.break_type in BREAK_KINDS}
        intervals = {t: kind for t, kind in intervals.items() if kind not in replaced_kinds}

        for interval in request.intervals:
            start = normalize_time(interval.interval_start)
            if interval.break_type == 'IN':
                intervals.pop(start, None)
            else:
                intervals[start] = interval.break_type

        entry = {
            'shift_type': shift_type if shift_type is not None else entry.get('shift_type'),
            'intervals': dict(sorted(intervals.items()))
        }
        day[request.user_id] = entry
        self._write(data)

        logger.info("Saved break schedule for %s on %s (%d break slots)",
                    request.user_id, request.schedule_date, len(entry['intervals']))
        return entry
