# rollcall/realtime/client.py
"""Observer client: keeps a local view of today's roll call converged.

Any push from the server triggers a fresh pull of the status snapshot; a
periodic poll covers pushes lost while disconnected.
"""
import argparse
import asyncio
import json
import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional

import httpx
import websockets
from pydantic import ValidationError
from websockets.exceptions import WebSocketException

from rollcall.config import settings
from rollcall.core.logging import configure_logging
from rollcall.realtime.observer import ConnectionState, ObserverStateMachine, ReconnectPolicy
from rollcall.services.status import StaffStatusRecord, summarize

logger = logging.getLogger(__name__)


@dataclass
class Snapshot:
    staff: List[StaffStatusRecord] = field(default_factory=list)
    visitors: int = 0

    @property
    def counts(self) -> dict:
        return summarize(self.staff)


def websocket_url(base_url: str) -> str:
    base = base_url.rstrip("/")
    if base.startswith("https://"):
        return "wss://" + base[len("https://"):] + "/ws"
    if base.startswith("http://"):
        return "ws://" + base[len("http://"):] + "/ws"
    return base + "/ws"


class StatusWatcher:
    def __init__(
        self,
        base_url: str,
        on_snapshot: Optional[Callable[[Snapshot], None]] = None,
        *,
        policy: Optional[ReconnectPolicy] = None,
        refresh_interval: float = 30.0,
        http: Optional[httpx.AsyncClient] = None,
        connect=None,
        sleep=asyncio.sleep,
    ):
        self.base_url = base_url.rstrip("/")
        self.ws_url = websocket_url(base_url)
        self.on_snapshot = on_snapshot
        self.refresh_interval = refresh_interval
        self.fsm = ObserverStateMachine(policy)
        self.snapshot = Snapshot()
        self._http = http or httpx.AsyncClient(timeout=10.0)
        self._connect = connect or websockets.connect
        self._sleep = sleep
        self._stopping = False
        self._listener: Optional[asyncio.Task] = None

    async def refresh(self) -> Snapshot:
        staff = await self._http.get(f"{self.base_url}/api/staff-status")
        staff.raise_for_status()
        visitors = await self._http.get(f"{self.base_url}/api/visitor-count")
        visitors.raise_for_status()

        self.snapshot = Snapshot(
            staff=[StaffStatusRecord(**row) for row in staff.json()],
            visitors=visitors.json()["count"],
        )
        if self.on_snapshot:
            self.on_snapshot(self.snapshot)
        return self.snapshot

    async def _safe_refresh(self) -> None:
        try:
            await self.refresh()
        except httpx.HTTPError as e:
            logger.warning("Snapshot refresh failed: %s", e)
        except (ValidationError, ValueError, KeyError, TypeError) as e:
            logger.warning("Malformed snapshot from server: %r", e)

    def _log_event(self, raw) -> None:
        try:
            message = json.loads(raw)
        except (TypeError, ValueError):
            message = None
        if not isinstance(message, dict):
            logger.warning("Malformed realtime message: %r", raw)
            return
        logger.debug("Realtime event %s %s", message.get("type"), message.get("data"))

    async def listen(self) -> None:
        """Drive the reconnection cycle until stopped or out of attempts."""
        self.fsm.start()
        while self.fsm.state is ConnectionState.CONNECTING:
            try:
                async with self._connect(self.ws_url) as ws:
                    self.fsm.connected()
                    logger.info("Realtime connected to %s", self.ws_url)
                    await self._safe_refresh()
                    async for raw in ws:
                        self._log_event(raw)
                        # The payload is only a hint; always pull the truth
                        await self._safe_refresh()
            except (OSError, asyncio.TimeoutError, WebSocketException) as e:
                logger.warning("Realtime connection failed: %s", e)

            if self._stopping:
                break
            delay = self.fsm.connection_lost()
            if delay is None:
                logger.error("Max reconnection attempts reached; polling only")
                break
            logger.info(
                "Attempting to reconnect... (%d/%d) in %.1fs",
                self.fsm.attempts, self.fsm.policy.max_attempts, delay,
            )
            await self._sleep(delay)
            self.fsm.retry()

    async def poll(self) -> None:
        while not self._stopping:
            await self._sleep(self.refresh_interval)
            await self._safe_refresh()

    def reconnect(self) -> bool:
        """External trigger: restart the cycle if it has given up."""
        if self.fsm.state is not ConnectionState.DISCONNECTED or self._stopping:
            return False
        self._listener = asyncio.get_running_loop().create_task(self.listen())
        return True

    async def run(self) -> None:
        poller = asyncio.create_task(self.poll())
        self._listener = asyncio.create_task(self.listen())
        try:
            await poller
        finally:
            poller.cancel()
            if self._listener:
                self._listener.cancel()
            await self._http.aclose()

    def stop(self) -> None:
        self._stopping = True
        self.fsm.stop()
        if self._listener:
            self._listener.cancel()


def print_snapshot(snapshot: Snapshot) -> None:
    counts = snapshot.counts
    print(
        f"total={counts['total']} present={counts['present']} absent={counts['absent']} "
        f"non_working={counts['non_working']} unaccounted={counts['unaccounted']} "
        f"visitors={snapshot.visitors}",
        flush=True,
    )


def main(argv=None) -> None:
    parser = argparse.ArgumentParser(description="Follow today's roll call from a running server.")
    parser.add_argument("--url", default=f"http://localhost:{settings.PORT}", help="server base URL")
    parser.add_argument("--interval", type=float, default=settings.REFRESH_INTERVAL_SECONDS)
    args = parser.parse_args(argv)

    configure_logging(settings.LOG_LEVEL)
    watcher = StatusWatcher(
        args.url,
        print_snapshot,
        policy=ReconnectPolicy(settings.WS_RECONNECT_BASE_DELAY, settings.WS_MAX_RECONNECT_ATTEMPTS),
        refresh_interval=args.interval,
    )
    try:
        asyncio.run(watcher.run())
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
