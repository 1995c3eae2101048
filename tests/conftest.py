"""Shared pytest fixtures for the pyswav test suite.

FakeSwitcherTransport stands in for the serial port. It behaves like an
SW-6AV: every write is logged and answered the way the switcher would, and
each queued chunk is handed out by exactly one read() call.
"""

import sys
from collections import deque
from pathlib import Path
from typing import Callable, Dict, List, Optional, Union

import pytest

# Ensure the project root is in the path for imports
PROJECT_ROOT = Path(__file__).parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from pyswav.listener import SwitcherListener
from pyswav.switcher import SWAVSwitcher
from pyswav.transport import SwitcherTransport

Reply = Union[None, bytes, List[bytes], Callable[[], Optional[bytes]]]


class FakeSwitcherTransport(SwitcherTransport):
    """Scripted SW-AV device on the other end of the line."""

    def __init__(self, signal=(True, False, True, False, False, True)):
        self.signal: List[bool] = list(signal)
        self.part = "60-310-01"
        self.firmware = "1.02"
        self.mode = 1
        self.video_muted = False
        self.audio_muted = False
        self.audio_port = 1
        self.video_port = 1

        self.written: List[bytes] = []
        self.flush_count = 0
        self.close_count = 0
        # Replies that replace the emulated answer for a command. None means silence.
        self.overrides: Dict[bytes, Reply] = {}
        self._chunks: deque = deque()
        self._open = True

    # ---- test control ----

    def push(self, *chunks: bytes):
        """Queue data as if the switcher sent it unprompted."""
        self._chunks.extend(chunks)

    @property
    def pending_chunks(self) -> int:
        return len(self._chunks)

    # ---- SwitcherTransport ----

    @property
    def is_open(self) -> bool:
        return self._open

    def write(self, data: bytes):
        if not self._open:
            raise IOError("Port not open")
        self.written.append(data)
        if data in self.overrides:
            reply = self.overrides[data]
            if callable(reply):
                reply = reply()
        else:
            reply = self._emulate(data.decode("ascii"))
        if reply is None:
            return
        if isinstance(reply, list):
            self.push(*reply)
        else:
            self.push(reply)

    def flush(self):
        self.flush_count += 1

    def read(self, size: int = 1024) -> bytes:
        if not self._chunks:
            return b""
        return self._chunks.popleft()[:size]

    def close(self):
        self.close_count += 1
        self._open = False

    # ---- device behaviour ----

    def _emulate(self, command: str) -> Optional[bytes]:
        reply = self._answer(command)
        if reply is None:
            return None
        return f"{reply}\r\n".encode("ascii")

    def _answer(self, command: str) -> Optional[str]:
        if command == "N":
            return self.part
        if command == "Q":
            return self.firmware
        if command == "0S":
            return "Sig " + " ".join("1" if s else "0" for s in self.signal)
        if command == "I":
            return f"V*{self.video_port} A*{self.audio_port} F*{self.mode} Vmt{int(self.video_muted)}"
        if command in ("1#", "2#"):
            self.mode = int(command[0])
            return f"F{self.mode}"
        if command == "B":
            return str(int(self.video_muted))
        if command in ("0B", "1B"):
            self.video_muted = command[0] == "1"
            return f"Vmt{int(self.video_muted)}"
        if command == "Z":
            return str(int(self.audio_muted))
        if command in ("0Z", "1Z"):
            self.audio_muted = command[0] == "1"
            return f"Amt{int(self.audio_muted)}"
        if len(command) == 2 and command[0].isdigit() and command[1] in "S$&!":
            port = int(command[0])
            if not 1 <= port <= len(self.signal):
                return "E01"
            if command[1] == "S":
                return str(int(self.signal[port - 1]))
            if command[1] in "$!":
                self.audio_port = port
            if command[1] in "&!":
                self.video_port = port
            kind = {"$": "Aud", "&": "Vid", "!": "All"}[command[1]]
            return f"In{port} {kind}"
        return "E10"


class RecordingListener(SwitcherListener):
    """Keeps every notification it receives."""

    def __init__(self):
        self.events = []

    def signal_status_changed(self, signal_status):
        self.events.append(("signal_status_changed", signal_status))

    def input_selected(self, port, audio, video):
        self.events.append(("input_selected", port, audio, video))

    def rebooted(self, banner):
        self.events.append(("rebooted", banner))

    def reconfig_started(self):
        self.events.append(("reconfig_started",))

    def unexpected_reply(self, line):
        self.events.append(("unexpected_reply", line))


@pytest.fixture
def transport() -> FakeSwitcherTransport:
    return FakeSwitcherTransport()


@pytest.fixture
def listener() -> RecordingListener:
    return RecordingListener()


@pytest.fixture
def switcher(transport, listener) -> SWAVSwitcher:
    """A switcher that has completed its initial status query."""
    switcher = SWAVSwitcher(1, transport=transport, listener=listener)
    yield switcher
    switcher.close()
