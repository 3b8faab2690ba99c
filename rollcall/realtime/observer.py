# rollcall/realtime/observer.py
"""Reconnection state machine for an observer's realtime connection.

    DISCONNECTED --start--> CONNECTING --connected--> CONNECTED
         ^                    ^    |                      |
         |                  retry  +---connection_lost----+
         |                    |    v
         +--(attempts used)-- RECONNECTING

No timers or sockets live here; the watcher asks for the delay and sleeps.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class ConnectionState(str, Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    RECONNECTING = "reconnecting"


class InvalidTransition(Exception):
    """Raised when an event is not valid in the current state."""


@dataclass(frozen=True)
class ReconnectPolicy:
    base_delay: float = 1.0
    max_attempts: int = 5

    def delay_for(self, attempt: int) -> float:
        return self.base_delay * attempt


class ObserverStateMachine:
    def __init__(self, policy: Optional[ReconnectPolicy] = None):
        self.policy = policy or ReconnectPolicy()
        self.state = ConnectionState.DISCONNECTED
        self.attempts = 0

    def _require(self, event: str, *allowed: ConnectionState) -> None:
        if self.state not in allowed:
            raise InvalidTransition(f"{event} not allowed while {self.state.value}")

    @property
    def exhausted(self) -> bool:
        return self.state is ConnectionState.DISCONNECTED and self.attempts >= self.policy.max_attempts

    def start(self) -> None:
        """External trigger (first run, manual refresh) that restarts the cycle."""
        self._require("start", ConnectionState.DISCONNECTED)
        self.attempts = 0
        self.state = ConnectionState.CONNECTING

    def connected(self) -> None:
        self._require("connected", ConnectionState.CONNECTING)
        self.attempts = 0
        self.state = ConnectionState.CONNECTED

    def connection_lost(self) -> Optional[float]:
        """Unexpected close or failed connect.

        Returns the delay before the next attempt, or None once the attempt
        budget is spent (the machine is then DISCONNECTED).
        """
        self._require("connection_lost", ConnectionState.CONNECTED, ConnectionState.CONNECTING)
        if self.attempts >= self.policy.max_attempts:
            self.state = ConnectionState.DISCONNECTED
            return None
        self.attempts += 1
        self.state = ConnectionState.RECONNECTING
        return self.policy.delay_for(self.attempts)

    def retry(self) -> None:
        self._require("retry", ConnectionState.RECONNECTING)
        self.state = ConnectionState.CONNECTING

    def stop(self) -> None:
        """Deliberate close; no reconnect follows."""
        self.state = ConnectionState.DISCONNECTED
