"""Serial transport for SW-AV switchers.

The switcher is a plain RS-232 device: 9600 baud, 8 data bits, no parity,
one stop bit and no flow control.
"""

import logging
import os
from abc import ABC, abstractmethod
from typing import Optional

import serial

from pyswav.exceptions import TransportError

DEFAULT_BAUDRATE = 9600
DEFAULT_READ_TIMEOUT = 0.5   # seconds to wait for the first byte of a read
DEFAULT_WRITE_TIMEOUT = 0.5  # seconds before a blocked write gives up
READ_BUFFER_SIZE = 1024


def channel_to_port_name(channel: int) -> str:
    """Map a 1-based channel number to the OS serial device name.

    Channel 1 is COM1 on Windows and /dev/ttyS0 elsewhere.
    """
    if os.name == "nt":
        return f"COM{channel}"
    return f"/dev/ttyS{channel - 1}"


class SwitcherTransport(ABC):
    """Duplex byte channel the protocol engine talks through."""

    @abstractmethod
    def write(self, data: bytes):
        pass

    @abstractmethod
    def flush(self):
        pass

    @abstractmethod
    def read(self, size: int = READ_BUFFER_SIZE) -> bytes:
        """Read up to size bytes. Returns b"" when the read timed out."""
        pass

    @abstractmethod
    def close(self):
        pass

    @property
    @abstractmethod
    def is_open(self) -> bool:
        pass


class SerialTransport(SwitcherTransport):
    """SwitcherTransport backed by a pyserial port."""

    def __init__(
        self,
        port_name: str,
        baudrate: int = DEFAULT_BAUDRATE,
        read_timeout: float = DEFAULT_READ_TIMEOUT,
        write_timeout: float = DEFAULT_WRITE_TIMEOUT,
    ):
        """Open and configure the serial port.

        Args:
            port_name: Serial device (e.g. "COM1", "/dev/ttyS0", "/dev/ttyUSB0")
            baudrate: Line speed, the switcher ships at 9600
            read_timeout: Seconds to wait for data before a read returns empty
            write_timeout: Seconds before a write is abandoned
        """
        self._logger = logging.getLogger(__name__)
        self.port_name = port_name
        self.baudrate = baudrate
        self.read_timeout = read_timeout
        self.write_timeout = write_timeout
        self._serial: Optional[serial.Serial] = None

        self._logger.info(f"Opening serial port {port_name} at {baudrate} baud")
        try:
            self._serial = serial.Serial(
                port=port_name,
                baudrate=baudrate,
                bytesize=serial.EIGHTBITS,
                parity=serial.PARITY_NONE,
                stopbits=serial.STOPBITS_ONE,
                xonxoff=False,
                rtscts=False,
                dsrdtr=False,
                timeout=read_timeout,
                write_timeout=write_timeout,
                inter_byte_timeout=None,
            )
        except serial.SerialException as e:
            raise TransportError(f"Failed to open {port_name}: {e}") from e

    @property
    def is_open(self) -> bool:
        return self._serial is not None and self._serial.is_open

    def _require_open(self) -> serial.Serial:
        if not self.is_open:
            raise TransportError(f"Serial port {self.port_name} is not open")
        return self._serial

    def write(self, data: bytes):
        port = self._require_open()
        try:
            port.write(data)
        except serial.SerialException as e:
            raise TransportError(f"Serial write failed on {self.port_name}: {e}") from e

    def flush(self):
        port = self._require_open()
        try:
            port.flush()
        except serial.SerialException as e:
            raise TransportError(f"Serial flush failed on {self.port_name}: {e}") from e

    def read(self, size: int = READ_BUFFER_SIZE) -> bytes:
        port = self._require_open()
        try:
            # Block for the first byte, then take whatever else already arrived
            data = port.read(1)
            if data and size > 1:
                waiting = min(port.in_waiting, size - 1)
                if waiting:
                    data += port.read(waiting)
        except serial.SerialException as e:
            raise TransportError(f"Serial read failed on {self.port_name}: {e}") from e
        return data

    def close(self):
        if self._serial is None:
            return
        port = self._serial
        self._serial = None
        if port.is_open:
            port.close()
        self._logger.info(f"Closed serial port {self.port_name}")
