# origaspect/services/reconcile/service.py
from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Iterable, Optional

from origaspect.common.logging import get_logger
from origaspect.common.settings import get_settings
from origaspect.domain.dataclasses.reconcile import ReconcileConfig, Skip, Write
from origaspect.domain.dataclasses.reports import ReconcileReport
from origaspect.domain.entities.video_item import VideoItem
from origaspect.services.reconcile.engine import ReconcileCancelled, ReconciliationEngine

logger = get_logger(__name__)


class ReconcileService:
    """
    Runs the engine over many items on a bounded thread pool. Items are
    independent; they share only the read-only config snapshot and the
    cancel event.
    """

    def __init__(self, engine: ReconciliationEngine, config: Optional[ReconcileConfig] = None):
        self.engine = engine
        self.cfg = get_settings()
        self.config = config or self.cfg.aspect.to_reconcile_config()

    def run(
        self,
        items: Iterable[VideoItem],
        *,
        workers: Optional[int] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> ReconcileReport:
        rep = ReconcileReport()
        rep.start()

        todo = list(items)
        rep.planned = len(todo)
        if not todo:
            rep.stop()
            return rep

        # Thread cap: at least 1, no more than cfg
        max_workers_cfg = int(getattr(self.cfg.concurrency, "max_reconcile_workers", 4) or 4)
        max_workers = max(1, min(int(workers or 1), max_workers_cfg))

        with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="reconcile") as pool:
            futures = {
                pool.submit(self.engine.reconcile, item, self.config, cancel_event): item
                for item in todo
            }
            for fut in as_completed(futures):
                item = futures[fut]
                try:
                    decision = fut.result()
                except ReconcileCancelled:
                    rep.cancelled += 1
                    continue
                except Exception as e:
                    rep.errors += 1
                    rep.add_error(item.name, str(e))
                    logger.exception("Reconcile failed for %s", item.name)
                    continue

                if isinstance(decision, Write):
                    rep.written += 1
                    rep.writes[item.name] = decision.aspect_ratio
                elif isinstance(decision, Skip):
                    rep.bump_skip(str(decision.reason))

        rep.stop()
        logger.info(
            "Reconciled %d items: %d written, %d skipped, %d cancelled, %d errors.",
            rep.planned, rep.written, rep.skipped, rep.cancelled, rep.errors,
        )
        return rep
