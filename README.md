# uciarena

Tools for working with chess engines that speak the UCI protocol:

- start an engine as a child process and exchange lines with it (`uciarena.process`),
- drive the UCI handshake and commands, and read best moves and scores (`uciarena.engine`),
- parse the `option` lines an engine advertises and validate values (`uciarena.options`),
- check that an engine behaves well enough to be used in matches (`uciarena.compliance`),
- generate round-robin pairings (`uciarena.match_generator`),
- track draw, resign and move-limit adjudication (`uciarena.adjudication`),
- format scores, check move syntax and build game-end annotations (`uciarena.match_text`).

Python 3.10 or later is required. There are no third-party dependencies.

## Installation

```
pip install .
```

## Checking an engine

```
uciarena --compliance ./my-engine
uciarena --compliance ./my-engine "--some-flag value"
```

After `--compliance` come the engine executable and, optionally, one string of
arguments for it, split the way a shell would split it. Each step prints as passed
or failed; the run stops at the first failure. The command exits with status 0
only if every step passes, and with status 1 otherwise or when the arguments are
missing. Ctrl+C raises a stop flag and any started engine is killed on exit.

From Python:

```python
from uciarena.compliance import compliant

ok = compliant("./my-engine", "")
```

## Driving an engine

```python
from uciarena.engine import EngineConfig, UciEngine

config = EngineConfig(name="mine", cmd="my-engine", dir=".", options=[("Hash", "64")])

with UciEngine(config) as engine:
    if engine.start() and engine.refresh_uci():
        engine.position(["e2e4", "e7e5"], "startpos")
        engine.write_engine("go movetime 100")
        engine.read_engine("bestmove")
        print(engine.bestmove(), engine.last_score_type(), engine.last_score())
```

`start()` launches `os.path.join(dir, cmd)` and waits for `uciok`, recording the
options the engine announces in `engine.uci_options`. `refresh_uci()` sends
`ucinewgame` (restarting the engine if it does not answer), then `setoption` for
each configured option the engine knows and accepts, and `UCI_Chess960` when
`chess960` is set. Timeouts are in seconds. Leaving the `with` block sends `quit`
and kills the process.

The lower-level `Process` class can run any line-based program:
`read_until(search_word, timeout)` returns a `Status` and the list of `Line`
objects read from stdout and stderr.

## Engine options

```python
from uciarena.options import parse_option_line

option = parse_option_line("option name Hash type spin default 16 min 1 max 1024")
print(option.name, option.value, option.is_valid("2048"))   # Hash 16 False
```

`check`, `spin`, `combo`, `button` and `string` options are supported; other lines
give `None`. A spin option whose bounds or default are not numeric raises
`ValueError`, as does setting a spin option out of range.

## Pairings and adjudication

```python
from uciarena.match_generator import MatchGenerator

for pairing in MatchGenerator(lambda: None, players=3, rounds=1, games=2):
    print(pairing.game_id, pairing.player1, pairing.player2)
```

The opening callable is asked once for every pair of games. `DrawTracker`,
`ResignTracker` and `MaxMovesTracker` in `uciarena.adjudication` are fed each
move's score and say when a game may be adjudicated.

`uciarena.match_text` offers `is_uci_move`, `convert_score_to_string`
(`+1.50`, `-M4`, ...), `convert_chess_reason` and `color_string`.

## What it does not do

There is no chess board or move generator, so the package does not play matches
or run tournaments by itself: it does not check move legality, detect checkmate
or repetition, keep clocks, or write PGN files. It also keeps no win/draw/loss
tallies and computes no Elo or sequential test statistics; the only command is
the compliance check.

## Running the tests

```
pip install .[test]
pytest
```