"""SW-AV switcher - blocking control of an SW-6AV/SW-12AV style A/V switcher.

This module contains the high-level switcher abstraction:
- Opening and owning the serial transport
- Input selection (audio, video, both) with range checking
- Front panel switch mode and audio/video mute, read fresh from the device
- Reply validation for every command
- Listener registration for unsolicited notifications

The device state mirror (signal presence, selected ports) lives in the
SwitcherProtocol instance this class creates."""

import logging
from enum import Enum
from typing import Optional

from pyswav.exceptions import ConfigurationError, PortRangeError, ProtocolError
from pyswav.listener import LoggingListener, MultiplexingListener, SwitcherListener
from pyswav.protocol import SwitcherProtocol
from pyswav.state import SwitcherState
from pyswav.transport import (
    DEFAULT_BAUDRATE,
    DEFAULT_READ_TIMEOUT,
    DEFAULT_WRITE_TIMEOUT,
    SerialTransport,
    SwitcherTransport,
    channel_to_port_name,
)


class SwitchMode(Enum):
    """Front panel switching mode."""
    NORMAL = 1
    AUTO = 2


def _parse_flag(text: str) -> Optional[bool]:
    """Decode a 0/1 flag as sent by the switcher. Returns None if it is neither."""
    if text == "0":
        return False
    if text == "1":
        return True
    return None


class SWAVSwitcher:
    """Blocking client for one SW-AV switcher on one serial channel.

    Construction opens the channel and requests the signal status, which also
    tells us how many inputs the switcher has. Each operation writes one
    command and blocks until the reply, a device error, or the read timeout.
    Access from several threads must be serialized by the caller.
    """

    def __init__(
        self,
        channel: int,
        port_name: Optional[str] = None,
        baudrate: int = DEFAULT_BAUDRATE,
        read_timeout: float = DEFAULT_READ_TIMEOUT,
        write_timeout: float = DEFAULT_WRITE_TIMEOUT,
        transport: Optional[SwitcherTransport] = None,
        listener: Optional[SwitcherListener] = None,
    ):
        """Open the switcher.

        Args:
            channel: Serial channel number, 1 is COM1 (/dev/ttyS0)
            port_name: Serial device to use instead of the channel mapping
            baudrate: Line speed
            read_timeout: Seconds to wait for a reply before giving up
            write_timeout: Seconds before a write is abandoned
            transport: Already open transport, used instead of opening a serial port
            listener: Extra listener for unsolicited notifications
        """
        if isinstance(channel, bool) or not isinstance(channel, int) or channel <= 0:
            raise ConfigurationError(f"Invalid channel {channel!r}, must be a positive integer")

        self._logger = logging.getLogger(__name__)
        self._channel = channel
        self._closed = False

        # Notifications are logged by default, external listeners get them too
        self._multiplex_callback = MultiplexingListener()
        self._multiplex_callback.register_listener(LoggingListener(self._logger))
        if listener is not None:
            self._multiplex_callback.register_listener(listener)

        if transport is None:
            transport = SerialTransport(
                port_name or channel_to_port_name(channel),
                baudrate=baudrate,
                read_timeout=read_timeout,
                write_timeout=write_timeout,
            )
        self._transport = transport
        self._protocol = SwitcherProtocol(self._transport, self._multiplex_callback)

        try:
            self.request_input_status()
        except Exception:
            self.close()
            raise
        self._logger.info(f"Switcher on channel {channel} has {self.ports} inputs")

    def close(self):
        """Close the serial channel. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        self._transport.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.close()

    def register_listener(self, listener: SwitcherListener):
        """Register external listener for switcher notifications."""
        self._multiplex_callback.register_listener(listener)

    def unregister_listener(self, listener: SwitcherListener):
        """Unregister external listener."""
        self._multiplex_callback.unregister_listener(listener)

    # ========== Mirrored state ==========

    @property
    def state(self) -> SwitcherState:
        return self._protocol.state

    @property
    def channel(self) -> int:
        return self._channel

    @property
    def ports(self) -> int:
        """Number of inputs, from the last signal status report."""
        return self.state.port_count or 0

    @property
    def selected_audio_port(self) -> int:
        return self.state.selected_audio_port

    @property
    def selected_video_port(self) -> int:
        return self.state.selected_video_port

    @property
    def signal_status(self) -> tuple[bool, ...]:
        """Signal presence per input from the last report, index 0 is port 1."""
        return self.state.signal_status

    # ========== Identity ==========

    @property
    def part_number(self) -> str:
        reply = self._protocol.transact(SwitcherProtocol.command_query_part_number())
        if not reply:
            raise ProtocolError("Invalid part number response")
        return reply

    @property
    def firmware_version(self) -> str:
        reply = self._protocol.transact(SwitcherProtocol.command_query_firmware_version())
        if not reply:
            raise ProtocolError("Invalid version response")
        return reply

    # ========== Front panel switch mode ==========

    @property
    def switch_mode(self) -> SwitchMode:
        reply = self._protocol.transact(SwitcherProtocol.command_query_switch_mode())
        tokens = reply.split(" ")
        if not reply.startswith("V*") or len(tokens) != 4:
            raise ProtocolError(f"Invalid panel mode response '{reply}'")
        # V*<video> A*<audio> <x><y><mode> ...
        mode = tokens[2][2:3]
        if mode == "1":
            return SwitchMode.NORMAL
        if mode == "2":
            return SwitchMode.AUTO
        raise ProtocolError(f"Invalid panel mode response '{reply}'")

    @switch_mode.setter
    def switch_mode(self, mode: SwitchMode):
        if not isinstance(mode, SwitchMode):
            raise ValueError(f"Invalid switch mode {mode!r}")
        reply = self._protocol.transact(
            SwitcherProtocol.command_set_switch_mode(mode == SwitchMode.AUTO)
        )
        if len(reply) != 2 or not reply.startswith("F"):
            raise ProtocolError(f"Invalid panel mode response '{reply}'")
        if reply[1] not in ("1", "2"):
            raise ProtocolError(f"Invalid panel mode response '{reply}'")
        if int(reply[1]) != mode.value:
            raise ProtocolError(
                f"Switcher reported panel mode '{reply}' after {mode.name} was requested"
            )

    # ========== Mute ==========

    @property
    def video_muted(self) -> bool:
        return self._query_mute(SwitcherProtocol.command_query_video_mute())

    @video_muted.setter
    def video_muted(self, muted: bool):
        self._set_mute(SwitcherProtocol.command_set_video_mute(muted), "Vmt", muted)

    @property
    def audio_muted(self) -> bool:
        return self._query_mute(SwitcherProtocol.command_query_audio_mute())

    @audio_muted.setter
    def audio_muted(self, muted: bool):
        self._set_mute(SwitcherProtocol.command_set_audio_mute(muted), "Amt", muted)

    def _query_mute(self, command: bytes) -> bool:
        reply = self._protocol.transact(command)
        muted = _parse_flag(reply) if len(reply) == 1 else None
        if muted is None:
            raise ProtocolError(f"Invalid muted response '{reply}'")
        return muted

    def _set_mute(self, command: bytes, prefix: str, muted: bool):
        reply = self._protocol.transact(command)
        if not reply.startswith(prefix):
            raise ProtocolError(f"Invalid muted response '{reply}'")
        echoed = _parse_flag(reply[len(prefix):])
        if echoed is None:
            raise ProtocolError(f"Invalid muted response '{reply}'")
        if echoed != bool(muted):
            raise ProtocolError(f"Invalid muted status '{reply}'")

    # ========== Input status and selection ==========

    def _validate_port(self, port):
        if not self.state.is_valid_port(port):
            raise PortRangeError(port, self.state.port_count)

    def request_input_status(self, port: Optional[int] = None) -> Optional[bool]:
        """Query signal presence.

        Without a port, requests the full Sig report, which refreshes
        signal_status and the port count, and returns None. With a port,
        returns whether that input has an active signal.
        """
        if port is None:
            self._protocol.request_signal_status()
            return None

        self._validate_port(port)
        reply = self._protocol.transact(SwitcherProtocol.command_query_signal_status(port))
        active = _parse_flag(reply)
        if active is None:
            raise ProtocolError(f"Invalid input status response '{reply}'")
        return active

    def select_input_audio(self, port: int):
        """Route audio from port. The switcher echoes In<port> Aud."""
        self._validate_port(port)
        self._logger.info(f"Selecting audio input {port}")
        self._protocol.send(SwitcherProtocol.command_select_audio(port))

    def select_input_video(self, port: int):
        """Route video from port. The switcher echoes In<port> Vid."""
        self._validate_port(port)
        self._logger.info(f"Selecting video input {port}")
        self._protocol.send(SwitcherProtocol.command_select_video(port))

    def select_input_audio_video(self, port: int):
        """Route audio and video from port. The switcher echoes In<port> All."""
        self._validate_port(port)
        self._logger.info(f"Selecting audio and video input {port}")
        self._protocol.send(SwitcherProtocol.command_select_audio_video(port))

    def poll(self) -> bool:
        """Process anything the switcher sent since the last command.

        Blocks for at most the read timeout. Returns whether data arrived.
        """
        return self._protocol.poll()
