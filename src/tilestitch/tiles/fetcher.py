from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from tilestitch.domain.models import PlacedTile, TileFetchOutcome
from tilestitch.errors import TileFetchError
from tilestitch.shared.constants import ASYNC_MAX_CONCURRENCY, HTTP_OK

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Iterable

    from tilestitch.domain.models import TilePlan, TileRequest

    FetchBytes = Callable[[str], Awaitable[tuple[int, bytes]]]
    OnComplete = Callable[[TileFetchOutcome], Awaitable[None]]

logger = logging.getLogger(__name__)


def format_tile_url(template: str, zoom: int, tx: int, ty: int) -> str:
    """Substitute every ``{z}``, ``{x}`` and ``{y}`` literally; nothing is URL-encoded."""
    return (
        template.replace('{z}', str(zoom))
        .replace('{x}', str(tx))
        .replace('{y}', str(ty))
    )


class TileFetcher:
    """
    Bounded-concurrency tile downloader.

    ``fetch_bytes`` maps a URL to ``(status, body)`` and raises
    :class:`TileFetchError` on transport failure. A tile that does not come
    back with 200 is reported as a failed outcome and left out of the canvas.
    """

    def __init__(
        self,
        fetch_bytes: FetchBytes,
        *,
        concurrency: int = ASYNC_MAX_CONCURRENCY,
    ):
        if concurrency < 1:
            msg = f'concurrency must be positive, got {concurrency}'
            raise ValueError(msg)
        self._fetch = fetch_bytes
        self._concurrency = concurrency

    @property
    def concurrency(self) -> int:
        return self._concurrency

    async def fetch_one(
        self,
        idx: int,
        request: TileRequest,
        *,
        plan: TilePlan,
        url_template: str,
    ) -> TileFetchOutcome:
        url = format_tile_url(url_template, plan.zoom, request.tx, request.ty)
        try:
            status, body = await self._fetch(url)
        except TileFetchError as e:
            return TileFetchOutcome(idx, request, error=e)
        if status != HTTP_OK:
            err = TileFetchError(f'HTTP {status} for {url}', url=url, status=status)
            return TileFetchOutcome(idx, request, error=err)
        left, top = plan.placement(request)
        return TileFetchOutcome(idx, request, placed=PlacedTile(body, left, top))

    async def fetch_many(
        self,
        plan: TilePlan,
        url_template: str,
        *,
        on_complete: OnComplete | None = None,
    ) -> list[TileFetchOutcome]:
        """Fetch every tile of ``plan``; outcomes come back in request order."""
        sem = asyncio.Semaphore(self._concurrency)

        async def _worker(idx: int, request: TileRequest) -> TileFetchOutcome:
            async with sem:
                outcome = await self.fetch_one(
                    idx, request, plan=plan, url_template=url_template
                )
            if outcome.error is not None:
                logger.debug('Tile %s/%s skipped: %s', request.tx, request.ty, outcome.error)
            if on_complete is not None:
                try:
                    await on_complete(outcome)
                except Exception:
                    logger.exception('Progress subscriber failed')
            return outcome

        requests = plan.tile_requests()
        return list(
            await asyncio.gather(*(_worker(i, r) for i, r in enumerate(requests)))
        )


def placed_tiles(outcomes: Iterable[TileFetchOutcome]) -> list[PlacedTile]:
    """Keep only successfully fetched tiles."""
    return [o.placed for o in outcomes if o.placed is not None]
