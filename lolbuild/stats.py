# lolbuild/stats.py - In-memory command usage statistics
import time
from collections import Counter, deque
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple


@dataclass
class CommandStat:
    command: str
    user_id: int
    guild_id: Optional[int]
    timestamp: float
    success: bool
    error: Optional[str] = None


class CommandStats:
    """Ring buffer of the most recent command invocations"""

    def __init__(self, max_entries: int = 1000):
        self.entries: deque = deque(maxlen=max_entries)
        self.started_at = time.time()

    def record(self, command: str, user_id: int, guild_id: Optional[int],
               success: bool, error: Optional[str] = None):
        self.entries.append(CommandStat(command, user_id, guild_id, time.time(), success, error))

    def _relevant(self, command: Optional[str], window: Optional[float]) -> List[CommandStat]:
        now = time.time()
        return [
            stat for stat in self.entries
            if (command is None or stat.command == command)
            and (window is None or now - stat.timestamp < window)
        ]

    def usage_count(self, command: Optional[str] = None, window: Optional[float] = None) -> int:
        return len(self._relevant(command, window))

    def success_rate(self, command: Optional[str] = None, window: Optional[float] = None) -> float:
        relevant = self._relevant(command, window)
        if not relevant:
            return 0.0
        return sum(1 for stat in relevant if stat.success) / len(relevant) * 100

    def most_used(self, limit: int = 10) -> List[Tuple[str, int]]:
        return Counter(stat.command for stat in self.entries).most_common(limit)

    def summary(self) -> Dict[str, object]:
        return {
            "total": self.usage_count(),
            "last_hour": self.usage_count(window=3600),
            "last_day": self.usage_count(window=86400),
            "success_rate": f"{self.success_rate():.1f}%",
            "unique_users": len({stat.user_id for stat in self.entries}),
            "most_used": self.most_used(5),
            "uptime": time.time() - self.started_at,
        }

    def forget_user(self, user_id: int) -> int:
        kept = [stat for stat in self.entries if stat.user_id != user_id]
        removed = len(self.entries) - len(kept)
        self.entries = deque(kept, maxlen=self.entries.maxlen)
        return removed

    def clear(self):
        self.entries.clear()
