"""Serial-port line channel backed by pyserial."""

from __future__ import annotations

import errno
import logging
import time
from typing import Any, Callable, Optional

import serial

from channels.line_channel import BaudRate, LineChannel
from errors import ChannelConnectionError, ChannelReadError
from settings import get_settings

logger = logging.getLogger(__name__)


def _describe_open_failure(exc: OSError) -> str:
    code = exc.errno
    if code in (errno.ENOENT, errno.ENODEV, errno.ENXIO):
        return "device not found"
    if code in (errno.EACCES, errno.EPERM):
        return "permission denied"
    return str(exc) or exc.__class__.__name__


class SerialLineChannel(LineChannel):
    """Reads lines from a serial device configured as 8N1 without flow control.

    After the port opens, pending input is discarded and the channel waits
    ``settle_seconds`` for boards that reset on connect.
    """

    def __init__(
        self,
        poll_interval: Optional[float] = None,
        settle_seconds: Optional[float] = None,
        serial_factory: Optional[Callable[..., Any]] = None,
    ) -> None:
        super().__init__(poll_interval=poll_interval)
        if settle_seconds is None:
            settle_seconds = get_settings().settle_seconds
        self.settle_seconds = settle_seconds
        self._serial_factory = serial_factory or serial.Serial
        self._port: Any = None

    def _connect(self, address: str, baud_rate: BaudRate) -> None:
        try:
            port = self._serial_factory(
                port=address,
                baudrate=baud_rate.value,
                bytesize=serial.EIGHTBITS,
                parity=serial.PARITY_NONE,
                stopbits=serial.STOPBITS_ONE,
                timeout=0,
                xonxoff=False,
                rtscts=False,
            )
        except OSError as exc:
            reason = _describe_open_failure(exc)
            logger.error(
                "Unable to open serial device",
                extra={"address": address, "reason": reason},
            )
            raise ChannelConnectionError(address, reason) from exc

        try:
            port.reset_input_buffer()
            if self.settle_seconds > 0:
                time.sleep(self.settle_seconds)
        except OSError as exc:
            port.close()
            reason = _describe_open_failure(exc)
            logger.error(
                "Serial device failed while settling",
                extra={"address": address, "reason": reason},
            )
            raise ChannelConnectionError(address, reason) from exc
        except KeyboardInterrupt:
            port.close()
            raise
        self._port = port

    def _read_chunk(self) -> Optional[bytes]:
        try:
            waiting = self._port.in_waiting
            if not waiting:
                return b""
            return self._port.read(waiting)
        except OSError as exc:
            raise ChannelReadError(f"Failed reading from {self.address!r}: {exc}") from exc

    def _disconnect(self) -> None:
        port, self._port = self._port, None
        if port is not None:
            port.close()
