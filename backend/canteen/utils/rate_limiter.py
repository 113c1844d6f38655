from datetime import datetime, timedelta, timezone
from collections import defaultdict, deque
from typing import Deque, Dict
import threading


class RateLimiter:
    """IP等の識別子ごとのスライディングウィンドウ制限（ブルートフォース対策）"""

    def __init__(self, max_attempts: int = 5, window_seconds: int = 300):
        self.max_attempts = max_attempts
        self.window = timedelta(seconds=window_seconds)
        self.attempts: Dict[str, Deque[datetime]] = defaultdict(deque)
        self.lock = threading.Lock()

    def _prune(self, identifier: str, now: datetime):
        history = self.attempts[identifier]
        while history and history[0] <= now - self.window:
            history.popleft()

    def is_allowed(self, identifier: str) -> bool:
        """許可されれば試行を記録して True"""
        now = datetime.now(timezone.utc)
        with self.lock:
            self._prune(identifier, now)
            if len(self.attempts[identifier]) >= self.max_attempts:
                return False
            self.attempts[identifier].append(now)
            return True

    def get_remaining_time(self, identifier: str) -> int:
        """ブロックが解除されるまでの秒数"""
        with self.lock:
            history = self.attempts.get(identifier)
            if not history or len(history) < self.max_attempts:
                return 0
            remaining = (history[0] + self.window - datetime.now(timezone.utc)).total_seconds()
        return max(0, int(remaining))
