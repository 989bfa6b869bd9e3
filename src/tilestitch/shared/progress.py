import asyncio
import logging
import time

from tilestitch.domain.models import TileFetchOutcome

logger = logging.getLogger(__name__)


class ConsoleProgress:
    """Прогресс загрузки тайлов: подписчик на события завершения каждого тайла."""

    def __init__(
        self,
        total: int,
        label: str = 'Tiles',
        log: logging.Logger | None = None,
    ) -> None:
        self.total = max(1, int(total))
        self.done = 0
        self.succeeded = 0
        self.failed = 0
        self.start = time.monotonic()
        self.label = label
        self._log = log or logger
        self._lock = asyncio.Lock()

    @property
    def percent(self) -> float:
        return self.done * 100.0 / self.total

    def _format_eta(self, remaining: float) -> str:
        if remaining == float('inf'):
            return '--:--'
        m, s = divmod(int(remaining), 60)
        h, m = divmod(m, 60)
        if h > 0:
            return f'{h:02d}:{m:02d}:{s:02d}'
        return f'{m:02d}:{s:02d}'

    def _render(self) -> None:
        elapsed = max(1e-6, time.monotonic() - self.start)
        rps = self.done / elapsed
        remaining = (self.total - self.done) / rps if rps > 0 else float('inf')
        self._log.info(
            '%s: %.2f%% (%d/%d, %d failed) | %.1f/s | ETA %s',
            self.label,
            self.percent,
            self.done,
            self.total,
            self.failed,
            rps,
            self._format_eta(remaining),
        )

    async def on_tile(self, outcome: TileFetchOutcome) -> None:
        """Колбэк для TileFetcher: учитывает и успешные, и пропущенные тайлы."""
        async with self._lock:
            self.done = min(self.total, self.done + 1)
            if outcome.ok:
                self.succeeded += 1
            else:
                self.failed += 1
            self._render()
