"""A chess engine driven over the UCI protocol."""

from __future__ import annotations

import logging
import os
import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Sequence

from .options import OptionType, UCIOptions, parse_option_line
from .process import Line, Process, Status, Stream

__all__ = ["EngineConfig", "ScoreType", "UciEngine"]

_log = logging.getLogger(__name__)

# Limits how many engines may be starting up at the same time.
_START_SEMAPHORE = threading.BoundedSemaphore(16)


@dataclass
class EngineConfig:
    """How to launch an engine and which options to give it."""

    name: str = ""
    cmd: str = ""
    dir: str = "."
    args: str = ""
    options: list[tuple[str, str]] = field(default_factory=list)
    chess960: bool = False

    @property
    def path(self) -> str:
        """The program to run: ``cmd`` inside ``dir``."""
        return os.path.join(self.dir, self.cmd)


class ScoreType(Enum):
    """How the score in an info line is expressed."""

    CP = "cp"
    MATE = "mate"
    ERR = "err"


def _find_element(tokens: Sequence[str], key: str) -> Optional[str]:
    """The token that follows ``key``, or None."""
    try:
        index = tokens.index(key)
    except ValueError:
        return None
    return tokens[index + 1] if index + 1 < len(tokens) else None


def _find_int(tokens: Sequence[str], key: str) -> Optional[int]:
    value = _find_element(tokens, key)
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        return None


class UciEngine:
    """A running engine with the UCI handshake and command helpers."""

    STARTUP_TIME = 10.0
    UCINEWGAME_TIME = 60.0
    PING_TIME = 60.0

    def __init__(self, config: EngineConfig, realtime_logging: bool = True) -> None:
        self.config = config
        self.realtime_logging = realtime_logging
        self.uci_options = UCIOptions()
        self._output: list[Line] = []
        self._process = Process(realtime_logging)
        self._initialized = False

    def __enter__(self) -> "UciEngine":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    @property
    def output(self) -> list[Line]:
        """The lines read by the last :meth:`read_engine`."""
        return self._output

    def close(self) -> None:
        """Send quit and stop the process."""
        self.quit()
        self._process.kill()

    def start(self) -> bool:
        """Start the engine and perform the uci handshake; only once."""
        if self._initialized:
            return True

        with _START_SEMAPHORE:
            path = self.config.path
            _log.debug("Starting engine %s at %s", self.config.name, path)

            if self._process.start(self.config.dir, path, self.config.args, self.config.name) is not Status.OK:
                _log.warning("Warning: Cannot start engine %s:", self.config.name)
                _log.warning("Cannot execute command: %s", path)
                return False

            if not self.uci() or not self.uciok(self.STARTUP_TIME):
                _log.warning("Engine %s didn't respond to uci with uciok after startup.", self.config.name)
                return False

            self._initialized = True
            return True

    def refresh_uci(self) -> bool:
        """Restart the engine if needed and reapply the configured options."""
        _log.debug("Refreshing engine %s", self.config.name)

        if not self.ucinewgame():
            _log.debug("Engine %s failed to refresh. Restarting engine.", self.config.name)
            self._process.restart()

            if not self.uci() or not self.uciok():
                return False

            if not self.ucinewgame():
                _log.debug("Engine %s responded to uci but not to ucinewgame/isready.", self.config.name)
                return False

        for name, value in self.config.options:
            self.send_setoption(name, value)

        if self.config.chess960:
            self.send_setoption("UCI_Chess960", "true")

        if not self.ucinewgame():
            _log.debug("Engine %s didn't respond to ucinewgame.", self.config.name)
            return False

        return True

    def _id_field(self, key: str) -> Optional[str]:
        if not self.uci() or not self.uciok():
            _log.warning("Warning; Engine %s didn't respond to uci.", self.config.name)
            return None

        for line in self._output:
            index = line.line.find(key)
            if index != -1:
                return line.line[index + len(key) + 1:]
        return None

    def id_name(self) -> Optional[str]:
        """The name the engine reports in ``id name``."""
        return self._id_field("id name")

    def id_author(self) -> Optional[str]:
        """The author the engine reports in ``id author``."""
        return self._id_field("id author")

    def uci(self) -> bool:
        """Send ``uci``."""
        _log.debug("Sending uci to engine %s", self.config.name)
        if not self.write_engine("uci"):
            _log.debug("Failed to send uci to engine %s", self.config.name)
            return False
        return True

    def uciok(self, timeout: float = PING_TIME) -> bool:
        """Wait for ``uciok`` and record the options the engine announced."""
        _log.debug("Waiting for uciok from engine %s", self.config.name)

        ok = self.read_engine("uciok", timeout) is Status.OK

        for line in self._output:
            if not self.realtime_logging:
                self._log_line(line)
            option = parse_option_line(line.line)
            if option is not None:
                self.uci_options.add(option)

        if not ok:
            _log.debug("Engine %s did not respond to uciok in time.", self.config.name)
        return ok

    def ucinewgame(self) -> bool:
        """Send ``ucinewgame`` and wait until the engine is ready."""
        _log.debug("Sending ucinewgame to engine %s", self.config.name)
        if not self.write_engine("ucinewgame"):
            _log.debug("Failed to send ucinewgame to engine %s", self.config.name)
            return False
        return self.isready(self.UCINEWGAME_TIME) is Status.OK

    def isready(self, timeout: float = PING_TIME) -> Status:
        """Ping the engine with ``isready`` and wait for ``readyok``."""
        status = self._process.alive()
        if status is not Status.OK:
            return status

        _log.debug("Pinging engine %s", self.config.name)
        self.write_engine("isready")

        status, lines = self._process.read_until("readyok", timeout)

        if not self.realtime_logging:
            for line in lines:
                self._log_line(line)

        if status is not Status.OK:
            _log.debug("Engine %s didn't respond to isready.", self.config.name)
            _log.warning("Warning; Engine %s is not responsive.", self.config.name)
            return status

        _log.debug("Engine %s is responsive.", self.config.name)
        return status

    def position(self, moves: Sequence[str], fen: str) -> bool:
        """Send a ``position`` command for ``fen`` (or ``startpos``) and moves."""
        command = "position " + ("startpos" if fen == "startpos" else f"fen {fen}")
        if moves:
            command += " moves " + " ".join(moves)
        return self.write_engine(command)

    def quit(self) -> None:
        """Send ``quit`` if the engine was started."""
        if not self._initialized:
            return
        _log.debug("Sending quit to engine %s", self.config.name)
        self.write_engine("quit")

    def write_engine(self, line: str) -> bool:
        """Write one line to the engine; False on failure."""
        _log.debug("[%s] ---> %s", self.config.name, line)
        return self._process.write(line + "\n") is Status.OK

    def read_engine(self, last_word: str, timeout: float = PING_TIME) -> Status:
        """Read output until a line starts with ``last_word`` or time runs out."""
        status, self._output = self._process.read_until(last_word, timeout)
        return status

    def send_setoption(self, name: str, value: str) -> None:
        """Set an option the engine announced, if ``value`` is valid for it."""
        option = self.uci_options.get(name)
        if option is None:
            _log.info("Warning: %s doesn't have option %s", self.config.name, name)
            return

        if not option.is_valid(value):
            _log.info("Warning: Invalid value for option %s: %s", name, value)
            return

        _log.debug("Sending setoption to engine %s %s %s", self.config.name, name, value)

        if option.type is OptionType.BUTTON:
            if value != "true":
                return
            if not self.write_engine(f"setoption name {name}"):
                _log.debug("Failed to send setoption to engine %s %s", self.config.name, name)
                return
            option.set_value(value)

        if not self.write_engine(f"setoption name {name} value {value}"):
            _log.debug("Failed to send setoption to engine %s %s %s", self.config.name, name, value)
            return

        option.set_value(value)

    def bestmove(self) -> Optional[str]:
        """The move in the ``bestmove`` of the last line read."""
        if not self._output:
            _log.warning("Warning; No output from %s", self.config.name)
            return None

        move = _find_element(self._output[-1].line.split(), "bestmove")
        if move is None:
            _log.warning("Warning; No bestmove found in the last line from %s", self.config.name)
        return move

    def last_info_line(self) -> str:
        """The latest exact-score info line of the principal variation, or ''."""
        for entry in reversed(self._output):
            text = entry.line
            if "lowerbound" in text or "upperbound" in text:
                continue
            if "info" in text and " score " in text and (" multipv " not in text or " multipv 1" in text):
                return text
        return ""

    def last_info(self) -> list[str]:
        """The tokens of :meth:`last_info_line`."""
        info = self.last_info_line()
        if not info:
            _log.warning("Warning; Last info string with score not found from %s", self.config.name)
            return []
        return info.split()

    def last_score_type(self) -> ScoreType:
        """Whether the last score is in centipawns or moves to mate."""
        kind = _find_element(self.last_info(), "score")
        if kind is None:
            return ScoreType.ERR
        return ScoreType.CP if kind == "cp" else ScoreType.MATE

    def last_score(self) -> int:
        """The last score; mate scores are moves to mate, not converted."""
        score_type = self.last_score_type()
        if score_type is ScoreType.ERR:
            return 0
        key = "cp" if score_type is ScoreType.CP else "mate"
        value = _find_int(self.last_info(), key)
        return value if value is not None else 0

    def output_includes_bestmove(self) -> bool:
        """True if any line read last contains ``bestmove``."""
        return any("bestmove" in entry.line for entry in self._output)

    def _log_line(self, line: Line) -> None:
        marker = "<stderr>" if line.stream is Stream.ERR else "<---"
        _log.debug("[%s] %s %s", self.config.name, marker, line.line)