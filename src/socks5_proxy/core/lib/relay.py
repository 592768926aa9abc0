"""Bidirectional byte relay between a client and its target.

Once the success reply is sent, the session becomes an unframed duplex
stream. ``RelayEngine`` runs one copy loop per direction in its own thread:

- A connection reset or broken pipe makes the loop wait ``attempt + 1``
  retry delays (1s, 2s, 3s by default) and copy again, up to three attempts,
  before it reports ``MaxRetriesExceededError``.
- Any other socket error is reported immediately.
- End of stream from the source is a clean finish.

The session ends on the first outcome from either direction. The other
direction is not drained; it stops when the supervisor closes both sockets.
Half-close is not supported.

Example:
    engine = RelayEngine(client, target, log=session_log)
    engine.run()
"""

import queue
import socket
import threading
from typing import TYPE_CHECKING, Final

from loguru import logger

from socks5_proxy.core.exceptions import MaxRetriesExceededError, RelayError
from socks5_proxy.core.utils.utils import format_bytes

if TYPE_CHECKING:
    from loguru import Logger

BUFFER_SIZE: Final = 32 * 1024
MAX_RETRIES: Final = 3
RETRY_DELAY: Final = 1.0  # Seconds, multiplied by attempt number

UPSTREAM: Final = "client->target"
DOWNSTREAM: Final = "target->client"


def is_connection_reset(error: BaseException | None) -> bool:
    """Return True for the transient errors the relay retries on."""
    return isinstance(error, (ConnectionResetError, BrokenPipeError))


class RelayEngine:
    """Copy bytes both ways between two connected sockets."""

    def __init__(
        self,
        client: socket.socket,
        target: socket.socket,
        log: "Logger" = logger,
        *,
        max_retries: int = MAX_RETRIES,
        retry_delay: float = RETRY_DELAY,
        buffer_size: int = BUFFER_SIZE,
    ) -> None:
        self.client = client
        self.target = target
        self.log = log
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.buffer_size = buffer_size
        self.transferred = {UPSTREAM: 0, DOWNSTREAM: 0}
        self._outcomes: queue.Queue[tuple[str, BaseException | None]] = queue.Queue()
        self._stopped = threading.Event()

    def _copy(self, src: socket.socket, dst: socket.socket, direction: str) -> None:
        while True:
            data = src.recv(self.buffer_size)
            if not data:
                return
            dst.sendall(data)
            self.transferred[direction] += len(data)

    def _copy_with_retry(self, src: socket.socket, dst: socket.socket, direction: str) -> BaseException | None:
        for attempt in range(self.max_retries):
            try:
                self._copy(src, dst, direction)
            except OSError as e:
                if not is_connection_reset(e):
                    return e
                delay = self.retry_delay * (attempt + 1)
                self.log.debug(f"Relay {direction} interrupted ({e}), retrying in {delay:g}s")
                # Session already over; stop waiting
                if self._stopped.wait(delay):
                    return e
            else:
                return None
        return MaxRetriesExceededError(direction, self.max_retries)

    def _pump(self, src: socket.socket, dst: socket.socket, direction: str) -> None:
        try:
            outcome = self._copy_with_retry(src, dst, direction)
        except Exception as e:
            outcome = e
        self._outcomes.put((direction, outcome))

    def run(self) -> None:
        """Relay until the first direction finishes.

        Raises:
            MaxRetriesExceededError: A direction kept hitting resets
            RelayError: A direction failed with any other transport error
        """
        for src, dst, direction in ((self.client, self.target, UPSTREAM), (self.target, self.client, DOWNSTREAM)):
            threading.Thread(
                target=self._pump,
                args=(src, dst, direction),
                name=f"relay {direction}",
                daemon=True,
            ).start()

        direction, outcome = self._outcomes.get()
        self._stopped.set()

        self.log.debug(
            f"Relay ended by {direction}: "
            f"{format_bytes(self.transferred[UPSTREAM])} up, "
            f"{format_bytes(self.transferred[DOWNSTREAM])} down"
        )

        if outcome is None:
            return
        if is_connection_reset(outcome):
            self.log.debug(f"Connection reset, treating as normal close: {outcome}")
            return
        if isinstance(outcome, RelayError):
            raise outcome
        raise RelayError(f"Relay {direction} failed: {outcome}") from outcome
