"""
Recurring job: run the LinkedIn ETL, then send the positions created in the
last few hours to WhatsApp.

Fires once on start() and then every SCHEDULER_INTERVAL_HOURS. Ticks are not
queued: if the previous job is still running when a tick fires, that tick is
skipped. Nothing raised inside the job escapes it.
"""
from __future__ import annotations

import asyncio
import logging
import os
import threading
from typing import Optional, Set

from channels.whatsapp.client import to_jid
from channels.whatsapp.config import WhatsAppConfig, load_whatsapp_config
from channels.whatsapp.notifier import notifier as default_notifier
from core.db.positions import get_open_positions_created_in_last_hours
from core.etl.process import etl_process

# -------- CONFIG --------
SCHEDULER_INTERVAL_HOURS = float(os.getenv("SCHEDULER_INTERVAL_HOURS", "6"))
NOTIFY_WINDOW_HOURS = float(os.getenv("NOTIFY_WINDOW_HOURS", "6"))
# ------------------------

log = logging.getLogger("scheduler")


def resolve_whatsapp_jid(config: WhatsAppConfig) -> str:
    """The group wins over the single target; empty when neither is configured."""
    return to_jid(config.group_id) or to_jid(config.target_jid)


class Scheduler:
    def __init__(
        self,
        *,
        etl=etl_process,
        notifier=default_notifier,
        fetch_recent=get_open_positions_created_in_last_hours,
        config_loader=load_whatsapp_config,
        interval_seconds: float = SCHEDULER_INTERVAL_HOURS * 3600,
        notify_window_hours: float = NOTIFY_WINDOW_HOURS,
    ):
        self._etl = etl
        self._notifier = notifier
        self._fetch_recent = fetch_recent
        self._config_loader = config_loader
        self.interval_seconds = interval_seconds
        self.notify_window_hours = notify_window_hours
        self._guard = threading.Lock()
        self._task: Optional[asyncio.Task] = None
        self._ticks: Set[asyncio.Task] = set()

    @property
    def running(self) -> bool:
        return self._guard.locked()

    async def run_scheduled_job(self) -> bool:
        """
        Run ETL then notify. Returns False when skipped because a previous
        job was still in progress.
        """
        if not self._guard.acquire(blocking=False):
            log.warning("Previous run still in progress, skipping this tick.")
            return False

        try:
            etl_result = await self._etl.run_once()
            if etl_result.error:
                log.warning("ETL failed: %s", etl_result.error)
            else:
                log.info(
                    "ETL done: extracted=%d transformed=%d created=%d skipped=%d",
                    etl_result.extracted,
                    etl_result.transformed,
                    etl_result.created,
                    etl_result.skipped,
                )

            jid = resolve_whatsapp_jid(self._config_loader())
            if not jid:
                log.info("No WHATSAPP_GROUP_ID or WHATSAPP_TARGET_JID set, skipping WhatsApp send.")
                return True

            hours = self.notify_window_hours
            positions = await asyncio.to_thread(self._fetch_recent, hours)
            result = await self._notifier.send_positions_list(
                jid, positions, f"Last {hours:g}h open positions (DB)"
            )
            if result.sent:
                log.info("WhatsApp send OK: %s", result.message or "sent")
            elif result.timed_out:
                log.warning("WhatsApp send timed out: %s", result.error)
            else:
                log.warning("WhatsApp send failed: %s", result.error or result.message)
        except Exception:
            log.exception("Scheduled job failed")
        finally:
            self._guard.release()

        return True

    def _fire(self) -> None:
        tick = asyncio.ensure_future(self.run_scheduled_job())
        self._ticks.add(tick)
        tick.add_done_callback(self._ticks.discard)

    async def _loop(self) -> None:
        while True:
            # Each tick runs on its own so a slow job never delays the next tick.
            self._fire()
            await asyncio.sleep(self.interval_seconds)

    def start(self) -> asyncio.Task:
        """Start ticking on the running event loop. Returns the loop handle."""
        if self._task is not None and not self._task.done():
            return self._task
        log.info("Scheduler started: every %gs", self.interval_seconds)
        self._task = asyncio.get_running_loop().create_task(self._loop())
        return self._task

    def stop(self) -> None:
        if self._task is not None:
            self._task.cancel()
            self._task = None
        for tick in list(self._ticks):
            tick.cancel()
        log.info("Scheduler stopped")

    async def run_forever(self) -> None:
        task = self.start()
        try:
            await task
        except asyncio.CancelledError:
            pass


__all__ = [
    "SCHEDULER_INTERVAL_HOURS",
    "NOTIFY_WINDOW_HOURS",
    "Scheduler",
    "resolve_whatsapp_jid",
]
