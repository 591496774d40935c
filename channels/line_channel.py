"""Line-delivery channels: buffered line framing over a byte source."""

from __future__ import annotations

import logging
import threading
import time
from abc import ABC, abstractmethod
from enum import IntEnum
from typing import BinaryIO, Optional

from errors import ChannelConnectionError, ChannelReadError, ChannelStateError
from settings import get_settings

logger = logging.getLogger(__name__)

_TERMINATORS = (b"\n", b"\r")


class BaudRate(IntEnum):
    """Transmission rates accepted by ``LineChannel.open``."""

    B9600 = 9600
    B19200 = 19200
    B38400 = 38400
    B57600 = 57600
    B115200 = 115200

    @classmethod
    def coerce(cls, value: int | str | None) -> BaudRate:
        """Resolve ``value`` to a supported rate, falling back to 9600."""
        if value is None:
            return cls.B9600
        try:
            return cls(int(value))
        except (TypeError, ValueError):
            logger.warning(
                "Unsupported baud rate, using %d", cls.B9600.value,
                extra={"baud_rate": value},
            )
            return cls.B9600


class LineChannel(ABC):
    """Blocking reader of newline or carriage-return terminated lines.

    Subclasses supply the transport through ``_connect``, ``_read_chunk`` and
    ``_disconnect``; this class owns the open/closed state and line framing.
    """

    def __init__(self, poll_interval: Optional[float] = None) -> None:
        if poll_interval is None:
            poll_interval = get_settings().poll_interval
        self.poll_interval = poll_interval
        self.address: Optional[str] = None
        self.baud_rate: Optional[BaudRate] = None
        self._buffer = bytearray()
        self._is_open = False

    def open(self, address: str, baud_rate: int | str | None = BaudRate.B9600) -> None:
        if self._is_open:
            raise ChannelStateError(f"Channel is already open on {self.address!r}.")
        rate = BaudRate.coerce(baud_rate)
        self._connect(address, rate)
        self._buffer.clear()
        self.address = address
        self.baud_rate = rate
        self._is_open = True
        logger.info(
            "Channel opened",
            extra={"address": address, "baud_rate": rate.value},
        )

    def read_line(self, cancel: Optional[threading.Event] = None) -> Optional[str]:
        """Block until a complete non-empty line is available.

        Returns ``None`` at end of stream or once ``cancel`` is set.
        """
        if not self._is_open:
            raise ChannelStateError("Cannot read from a closed channel.")

        while True:
            line = self._take_line()
            if line is not None:
                return line
            if cancel is not None and cancel.is_set():
                return None

            chunk = self._read_chunk()
            if chunk is None:
                return self._drain_remainder()
            if not chunk:
                time.sleep(self.poll_interval)
                continue
            self._buffer.extend(chunk)

    def is_open(self) -> bool:
        return self._is_open

    def close(self) -> None:
        if not self._is_open:
            return
        try:
            self._disconnect()
        finally:
            self._is_open = False
            self._buffer.clear()
            logger.info("Channel closed", extra={"address": self.address})

    def _take_line(self) -> Optional[str]:
        while True:
            positions = [
                index
                for index in (self._buffer.find(terminator) for terminator in _TERMINATORS)
                if index >= 0
            ]
            if not positions:
                return None
            end = min(positions)
            raw = bytes(self._buffer[:end])
            del self._buffer[: end + 1]
            if raw:
                return raw.decode("utf-8", errors="replace")

    def _drain_remainder(self) -> Optional[str]:
        if not self._buffer:
            return None
        raw = bytes(self._buffer)
        self._buffer.clear()
        return raw.decode("utf-8", errors="replace")

    @abstractmethod
    def _connect(self, address: str, baud_rate: BaudRate) -> None:
        """Open the transport or raise ``ChannelConnectionError``."""

    @abstractmethod
    def _read_chunk(self) -> Optional[bytes]:
        """Return available bytes, ``b""`` when none are waiting, ``None`` at end of stream."""

    @abstractmethod
    def _disconnect(self) -> None:
        """Release the transport."""

    def __enter__(self) -> LineChannel:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


class StreamLineChannel(LineChannel):
    """Channel over a file or any readable binary stream."""

    def __init__(self, poll_interval: Optional[float] = None, chunk_size: int = 4096) -> None:
        super().__init__(poll_interval=poll_interval)
        self.chunk_size = chunk_size
        self._stream: Optional[BinaryIO] = None
        self._owns_stream = False

    @classmethod
    def from_stream(
        cls,
        stream: BinaryIO,
        name: str = "<stream>",
        poll_interval: Optional[float] = None,
    ) -> StreamLineChannel:
        """Wrap an already open binary stream; closing the channel leaves it open."""
        channel = cls(poll_interval=poll_interval)
        channel._stream = stream
        channel._owns_stream = False
        channel.address = name
        channel._is_open = True
        return channel

    def _connect(self, address: str, baud_rate: BaudRate) -> None:
        try:
            self._stream = open(address, "rb")
        except FileNotFoundError as exc:
            raise ChannelConnectionError(address, "device not found") from exc
        except PermissionError as exc:
            raise ChannelConnectionError(address, "permission denied") from exc
        except OSError as exc:
            raise ChannelConnectionError(address, str(exc)) from exc
        self._owns_stream = True

    def _read_chunk(self) -> Optional[bytes]:
        assert self._stream is not None
        try:
            data = self._stream.read(self.chunk_size)
        except OSError as exc:
            raise ChannelReadError(f"Failed reading from {self.address!r}: {exc}") from exc
        if not data:
            return None
        return data

    def _disconnect(self) -> None:
        stream, self._stream = self._stream, None
        if stream is not None and self._owns_stream:
            stream.close()
