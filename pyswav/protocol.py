import logging
import re
from collections import deque
from enum import Enum
from typing import Optional

from pyswav.exceptions import DeviceError, NoResponseError, ProtocolError
from pyswav.listener import SwitcherListener
from pyswav.state import SwitcherState
from pyswav.transport import READ_BUFFER_SIZE, SwitcherTransport

# SW-AV switchers answer with CR/LF terminated ASCII lines. Replies carry no
# command id, so anything that is not one of the notifications below is taken
# to be the reply to the command in flight.

# Sent after power-up or reboot: (C) Copyright 2002, Extron Electronics SW6AV, V1.02
BANNER_PREFIX = "(C)"

# Error line: E01, E10, E13, E14
ERROR_RESPONSE = re.compile(r"^E(\d+)$")

# Front panel selected a port for audio and video: C3
PORT_CHANGED_RESPONSE = re.compile(r"^C(\d+)$")

# Full signal presence report, one flag per input: Sig 1 0 1 0 0 1
SIGNAL_STATUS_PREFIX = "Sig"

# Input selection echo: In3 All, In3 Aud, In3 Vid
INPUT_SELECTED_PREFIX = "In"

# Audio automatic gain readjustment started
RECONFIG_PREFIX = "Reconfig"

# Selection kind -> (audio, video)
SELECTION_KINDS = {
    "All": (True, True),
    "Aud": (True, False),
    "Vid": (False, True),
}


class MessageType(Enum):
    BANNER = "banner"
    ERROR = "error"
    PORT_CHANGED = "port_changed"
    SIGNAL_STATUS = "signal_status"
    INPUT_SELECTED = "input_selected"
    RECONFIG = "reconfig"
    EMPTY = "empty"
    REPLY = "reply"


def classify_line(line: str) -> MessageType:
    """Classify a framed line by prefix, first match wins."""
    if not line:
        return MessageType.EMPTY
    if line.startswith(BANNER_PREFIX):
        return MessageType.BANNER
    if ERROR_RESPONSE.match(line):
        return MessageType.ERROR
    if PORT_CHANGED_RESPONSE.match(line):
        return MessageType.PORT_CHANGED
    if line.startswith(SIGNAL_STATUS_PREFIX):
        return MessageType.SIGNAL_STATUS
    if line.startswith(INPUT_SELECTED_PREFIX):
        return MessageType.INPUT_SELECTED
    if line.startswith(RECONFIG_PREFIX):
        return MessageType.RECONFIG
    return MessageType.REPLY


def split_lines(data: bytes) -> list[str]:
    """Decode one raw read into newline separated lines.

    Carriage returns and the null padding some firmware sends are dropped.
    Empty segments are kept; the classifier ignores them.
    """
    text = data.decode("ascii", errors="ignore")
    text = text.replace("\r", "").replace("\0", "")
    return text.split("\n")


class LineFramer:
    """Turns transport reads into complete lines.

    A read can end in the middle of a line; that tail is held until the rest
    arrives, or until flush() when the device went quiet.
    """

    def __init__(self):
        self._partial: str = ""
        self._lines: deque[str] = deque()

    @property
    def has_partial(self) -> bool:
        return bool(self._partial)

    def feed(self, data: bytes):
        segments = split_lines(data)
        segments[0] = self._partial + segments[0]
        self._partial = segments.pop()
        self._lines.extend(segments)

    def flush(self) -> bool:
        """Promote a held partial line to a complete one. Returns whether there was one."""
        if not self._partial:
            return False
        self._lines.append(self._partial)
        self._partial = ""
        return True

    def next_line(self) -> Optional[str]:
        if not self._lines:
            return None
        return self._lines.popleft()


class SwitcherProtocol:
    """SW-AV command encoder and response classifier.

    One command is in flight at a time. Sending a command first processes any
    lines already framed from earlier reads, then the read cycle runs until
    the reply, a device error, or a read timeout.
    """

    _state: SwitcherState
    _callback: SwitcherListener

    def __init__(
        self,
        transport: SwitcherTransport,
        callback: SwitcherListener,
        state: Optional[SwitcherState] = None,
    ):
        self._logger = logging.getLogger(__name__)
        self._transport = transport
        self._callback = callback
        self._state = state if state is not None else SwitcherState()
        self._framer = LineFramer()

    @property
    def state(self) -> SwitcherState:
        return self._state

    # ========== Command encoding ==========

    @staticmethod
    def _port_digit(port: int) -> bytes:
        # The SW-AV command set takes a single digit input number
        digit = str(port)[0]
        if port >= 10:
            logging.getLogger(__name__).warning(
                f"Input {port} is encoded as its first digit '{digit}'"
            )
        return digit.encode("ascii")

    @staticmethod
    def command_query_part_number() -> bytes:
        return b"N"

    @staticmethod
    def command_query_firmware_version() -> bytes:
        return b"Q"

    @staticmethod
    def command_query_all_signal_status() -> bytes:
        return b"0S"

    @staticmethod
    def command_query_signal_status(port: int) -> bytes:
        return SwitcherProtocol._port_digit(port) + b"S"

    @staticmethod
    def command_select_audio(port: int) -> bytes:
        return SwitcherProtocol._port_digit(port) + b"$"

    @staticmethod
    def command_select_video(port: int) -> bytes:
        return SwitcherProtocol._port_digit(port) + b"&"

    @staticmethod
    def command_select_audio_video(port: int) -> bytes:
        return SwitcherProtocol._port_digit(port) + b"!"

    @staticmethod
    def command_set_switch_mode(auto: bool) -> bytes:
        return b"2#" if auto else b"1#"

    @staticmethod
    def command_query_switch_mode() -> bytes:
        return b"I"

    @staticmethod
    def command_set_video_mute(muted: bool) -> bytes:
        return b"1B" if muted else b"0B"

    @staticmethod
    def command_query_video_mute() -> bytes:
        return b"B"

    @staticmethod
    def command_set_audio_mute(muted: bool) -> bytes:
        return b"1Z" if muted else b"0Z"

    @staticmethod
    def command_query_audio_mute() -> bytes:
        return b"Z"

    # ========== Request / response ==========

    def send(self, command: bytes):
        """Write one command and flush it to the line.

        Lines still buffered from earlier reads are applied first. If one of
        them is a device error or a malformed notification, that error is
        raised here and the command is not written.
        """
        self._process_buffered_lines()
        self._logger.info(f"SEND: {command!r}")
        self._transport.write(command)
        self._transport.flush()

    def transact(self, command: bytes) -> str:
        """Send a command and return its reply line."""
        self.send(command)
        return self._run_until(MessageType.REPLY)

    def request_signal_status(self):
        """Send 0S and wait until the Sig report has been applied."""
        self.send(self.command_query_all_signal_status())
        self._run_until(MessageType.SIGNAL_STATUS)

    def poll(self) -> bool:
        """Process whatever the switcher sent unprompted.

        Keeps reading while a line is only partly received, so a notification
        split across reads is applied in one call. Returns whether any data
        arrived. A timeout is not an error here.
        """
        data = self._transport.read(READ_BUFFER_SIZE)
        if data:
            self._logger.debug(f"RECV: {data!r}")
            self._framer.feed(data)
        elif not self._framer.flush():
            return False
        while self._framer.has_partial:
            data = self._transport.read(READ_BUFFER_SIZE)
            if not data:
                self._framer.flush()
                break
            self._logger.debug(f"RECV: {data!r}")
            self._framer.feed(data)
        self._process_buffered_lines()
        return True

    def _process_buffered_lines(self):
        line = self._framer.next_line()
        while line is not None:
            if self._process_received_line(line) == MessageType.REPLY:
                self._logger.warning(f"RECV: Reply with no command pending: {line!r}")
                self._callback.unexpected_reply(line)
            line = self._framer.next_line()

    def _run_until(self, terminal: MessageType) -> Optional[str]:
        while True:
            line = self._framer.next_line()
            if line is None:
                self._read_into_framer()
                continue
            message_type = self._process_received_line(line)
            if message_type == terminal:
                return line
            if message_type == MessageType.REPLY:
                self._logger.warning(f"RECV: Ignoring reply while waiting for {terminal.value}: {line!r}")
                self._callback.unexpected_reply(line)

    def _read_into_framer(self):
        data = self._transport.read(READ_BUFFER_SIZE)
        if data:
            self._logger.debug(f"RECV: {data!r}")
            self._framer.feed(data)
            return
        # Quiet line: a reply without its newline is still a reply
        if not self._framer.flush():
            raise NoResponseError("No response from switcher before the read timed out")

    # ========== Classification ==========

    def _process_received_line(self, line: str) -> MessageType:
        """Apply one framed line and return what kind of message it was.

        Notifications update the state mirror and notify the listener only
        once they have been fully validated.
        """
        message_type = classify_line(line)

        if message_type == MessageType.EMPTY:
            pass

        elif message_type == MessageType.BANNER:
            self._logger.info(f"RECV: Reboot banner: {line}")
            self._callback.rebooted(line)

        elif message_type == MessageType.ERROR:
            code = int(ERROR_RESPONSE.match(line).group(1))
            self._logger.error(f"RECV: Device error: {line}")
            raise DeviceError(code)

        elif message_type == MessageType.PORT_CHANGED:
            port = int(PORT_CHANGED_RESPONSE.match(line).group(1))
            if not self._state.is_valid_port(port):
                raise ProtocolError(f"Invalid 'C' selected port {port}: {line!r}")
            self._logger.info(f"RECV: Selected port changed: {port}")
            self._state.select(port, audio=True, video=True)
            self._callback.input_selected(port, True, True)

        elif message_type == MessageType.SIGNAL_STATUS:
            status = self._parse_signal_status(line)
            self._logger.info(f"RECV: Signal status: {line}")
            self._state.replace_signal_status(status)
            self._callback.signal_status_changed(self._state.signal_status)

        elif message_type == MessageType.INPUT_SELECTED:
            port, audio, video = self._parse_input_selected(line)
            self._logger.info(f"RECV: Input selected: {line}")
            self._state.select(port, audio=audio, video=video)
            self._callback.input_selected(port, audio, video)

        elif message_type == MessageType.RECONFIG:
            self._logger.info(f"RECV: Reconfig: {line}")
            self._callback.reconfig_started()

        else:
            self._logger.info(f"RECV: Reply: {line!r}")

        return message_type

    @staticmethod
    def _parse_signal_status(line: str) -> list[bool]:
        tokens = line.split(" ")
        if tokens[0] != SIGNAL_STATUS_PREFIX or len(tokens) < 2:
            raise ProtocolError(f"Invalid 'Sig' message: {line!r}")
        status = []
        for port, token in enumerate(tokens[1:], start=1):
            if token == "0":
                status.append(False)
            elif token == "1":
                status.append(True)
            else:
                raise ProtocolError(f"Invalid 'Sig' status on port {port}: {line!r}")
        return status

    def _parse_input_selected(self, line: str) -> tuple[int, bool, bool]:
        tokens = line.split(" ")
        if len(tokens) != 2:
            raise ProtocolError(f"Invalid 'In' message: {line!r}")
        port_str = tokens[0][len(INPUT_SELECTED_PREFIX):]
        if not port_str.isdigit():
            raise ProtocolError(f"Invalid 'In' message: {line!r}")
        port = int(port_str)
        port_count = self._state.port_count
        if port == 0 or (port_count is not None and port > port_count):
            raise ProtocolError(f"Invalid input {port} specified: {line!r}")
        kind = tokens[1]
        if kind not in SELECTION_KINDS:
            raise ProtocolError(f"Invalid selection type '{kind}': {line!r}")
        audio, video = SELECTION_KINDS[kind]
        return port, audio, video
