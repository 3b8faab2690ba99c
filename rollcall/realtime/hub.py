# rollcall/realtime/hub.py
import asyncio
import logging
from typing import List, Protocol, Set

from rollcall.realtime.events import MutationEvent

logger = logging.getLogger(__name__)


class Observer(Protocol):
    async def send_json(self, data: dict) -> None: ...

    async def close(self, code: int = 1000) -> None: ...


class ConnectionHub:
    """Live observer registry and best-effort fan-out.

    Created on application startup and closed on shutdown. Delivery to an
    observer is attempted once; an observer that fails or does not accept
    the message within `send_timeout` seconds is dropped.
    """

    def __init__(self, send_timeout: float = 5.0):
        self.send_timeout = send_timeout
        self._observers: Set[Observer] = set()
        self._lock = asyncio.Lock()
        self._pending: Set[asyncio.Task] = set()

    def __len__(self) -> int:
        return len(self._observers)

    async def register(self, observer: Observer) -> None:
        async with self._lock:
            self._observers.add(observer)
            count = len(self._observers)
        logger.info("Observer connected (%d live)", count)

    async def unregister(self, observer: Observer) -> bool:
        async with self._lock:
            known = observer in self._observers
            self._observers.discard(observer)
            count = len(self._observers)
        if known:
            logger.info("Observer disconnected (%d live)", count)
        return known

    async def _snapshot(self) -> List[Observer]:
        async with self._lock:
            return list(self._observers)

    async def broadcast(self, event: MutationEvent) -> int:
        """Deliver to every live observer; returns how many were reached."""
        observers = await self._snapshot()
        if not observers:
            return 0

        message = event.wire()
        results = await asyncio.gather(
            *(asyncio.wait_for(observer.send_json(message), self.send_timeout) for observer in observers),
            return_exceptions=True,
        )

        delivered = 0
        for observer, result in zip(observers, results):
            if isinstance(result, BaseException):
                logger.warning("Dropping observer after failed %s delivery: %r", event.type.value, result)
                await self.unregister(observer)
            else:
                delivered += 1
        logger.debug("Broadcast %s to %d observer(s)", event.type.value, delivered)
        return delivered

    def emit(self, event: MutationEvent) -> asyncio.Task:
        """Fire-and-forget broadcast; the caller never waits on delivery."""
        task = asyncio.get_running_loop().create_task(self.broadcast(event))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def drain(self) -> None:
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    async def close(self) -> None:
        await self.drain()
        async with self._lock:
            observers = list(self._observers)
            self._observers.clear()

        for observer in observers:
            try:
                await asyncio.wait_for(observer.close(code=1001), self.send_timeout)
            except Exception as e:
                logger.warning("Observer did not close cleanly: %r", e)
        logger.info("Hub closed, %d observer(s) released", len(observers))
