"""Check that an engine follows the UCI protocol well enough to play matches."""

from __future__ import annotations

import signal
import sys
from typing import Callable, Optional, Sequence

from .engine import EngineConfig, UciEngine
from .globals import install_interrupt_handler, stop_processes
from .process import Status

__all__ = ["compliant", "main"]

_FEN_MIDDLEGAME = "3r2k1/p5n1/1pq1p2p/2p3p1/2P1P1n1/1P1P2pP/PN1Q2K1/5R2 w - - 0 27"
_FEN_BLACK_TO_MOVE = "rnbqkbnr/pppppppp/8/8/4P3/8/PPPP1PPP/RNBQKBNR b KQkq - 0 1"

_USAGE = "usage: uciarena --compliance <engine command> [engine arguments]"


def _steps(engine: UciEngine) -> list[tuple[str, Callable[[], bool]]]:
    """The checks to run, in order, each with its description."""

    def ready() -> bool:
        return engine.isready() is Status.OK

    def send(line: str) -> Callable[[], bool]:
        return lambda: engine.write_engine(line)

    def bestmove_read() -> bool:
        return engine.read_engine("bestmove") is Status.OK

    def bestmove_found() -> bool:
        return engine.read_engine("bestmove") is Status.OK and engine.bestmove() is not None

    def has_info() -> bool:
        return bool(engine.last_info_line())

    def info_has_score() -> bool:
        return "score" in engine.last_info_line()

    return [
        ("Start the engine", engine.start),
        ("Check if engine is ready", ready),
        ("Check id name", lambda: engine.id_name() is not None),
        ("Check id author", lambda: engine.id_author() is not None),
        ("Send ucinewgame", engine.ucinewgame),
        ("Set position to startpos", send("position startpos")),
        ("Check if engine is ready after startpos", ready),
        ("Set position to fen", send(f"position fen {_FEN_MIDDLEGAME}")),
        ("Check if engine is ready after fen", ready),
        ("Send go wtime 100", send("go wtime 100")),
        ("Read bestmove", bestmove_read),
        ("Check if engine prints an info line", has_info),
        ("Verify info line contains score", info_has_score),
        ("Set position to black to move", send(f"position fen {_FEN_BLACK_TO_MOVE}")),
        ("Send go btime 100", send("go btime 100")),
        ("Read bestmove after go btime 100", bestmove_read),
        ("Check if engine prints an info line after go btime 100", has_info),
        ("Check if engine prints an info line with the score after go btime 100", info_has_score),
        (
            "Send go wtime 100 winc 100 btime 100 binc 100",
            send("go wtime 100 winc 100 btime 100 binc 100"),
        ),
        ("Read bestmove after go wtime 100 winc 100 btime 100 binc 100", bestmove_read),
        ("Check if engine prints an info line after go wtime 100 winc 100", has_info),
        (
            "Check if engine prints an info line with the score after go wtime 100 winc 100",
            info_has_score,
        ),
        (
            "Send go btime 100 binc 100 wtime 100 winc 100",
            send("go btime 100 binc 100 wtime 100 winc 100"),
        ),
        ("Read bestmove after go btime 100 binc 100 wtime 100 winc 100", bestmove_read),
        ("Check if engine prints an info line after go btime 100 binc 100", has_info),
        (
            "Check if engine prints an info line with the score after go btime 100 binc 100",
            info_has_score,
        ),
        ("Check if engine prints an info line after go btime 100 binc 100", info_has_score),
        # a short game
        ("Send ucinewgame", engine.ucinewgame),
        ("Set position to startpos", send("position startpos")),
        ("Send go wtime 100", send("go wtime 100 btime 100")),
        ("Read bestmove after go wtime 100 btime 100", bestmove_found),
        ("Set position to startpos moves e2e4 e7e5", send("position startpos moves e2e4 e7e5")),
        ("Send go wtime 100 btime 100", send("go wtime 100 btime 100")),
        ("Read bestmove after position startpos moves e2e4 e7e5", bestmove_found),
    ]


def compliant(command: str, args: str = "") -> bool:
    """Run every compliance step against ``command``; True if all pass."""
    config = EngineConfig(cmd=command, args=args)

    with UciEngine(config, realtime_logging=False) as engine:
        for number, (description, action) in enumerate(_steps(engine), start=1):
            print(f"Step {number}: {description}...", end="", flush=True)

            if not action():
                print(f"\r\033[1;31m Failed\033[0m Step {number}: {description}", file=sys.stderr, flush=True)
                return False

            print(f"\r\033[1;32m Passed\033[0m Step {number}: {description}", flush=True)

    print("Engine passed all compliance checks.", flush=True)
    return True


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Command entry point: ``--compliance <command> [args]``."""
    arguments = list(sys.argv[1:] if argv is None else argv)

    if len(arguments) < 2 or arguments[0] != "--compliance":
        print(_USAGE, file=sys.stderr)
        return 1

    previous = install_interrupt_handler()
    try:
        command = arguments[1]
        engine_args = arguments[2] if len(arguments) > 2 else ""
        return 0 if compliant(command, engine_args) else 1
    finally:
        stop_processes()
        if previous is not None:
            signal.signal(signal.SIGINT, previous)