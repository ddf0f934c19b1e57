"""UCI engine options and parsing of ``option`` lines sent by engines."""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from enum import Enum
from typing import Iterator, Optional, Sequence, Union

__all__ = [
    "OptionType",
    "UCIOption",
    "ButtonOption",
    "CheckOption",
    "ComboOption",
    "SpinOption",
    "StringOption",
    "UCIOptions",
    "parse_option_line",
]

_INT_MIN = -(2**31)
_INT_MAX = 2**31 - 1

_INT_PREFIX = re.compile(r"\s*([+-]?\d+)")
_FLOAT_PREFIX = re.compile(
    r"\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?|[+-]?(?:inf(?:inity)?|nan))",
    re.IGNORECASE,
)
_INT_FULL = re.compile(r"\s*[+-]?\d+")
_FLOAT_FULL = re.compile(r"\s*[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


def _parse_int(text: str) -> int:
    """Parse the leading integer of ``text``, as a 32-bit signed value."""
    match = _INT_PREFIX.match(text)
    if match is None:
        raise ValueError(f"not an integer: {text!r}")
    number = int(match.group(1))
    if not _INT_MIN <= number <= _INT_MAX:
        raise ValueError(f"integer out of range: {text!r}")
    return number


def _parse_float(text: str) -> float:
    """Parse the leading floating point number of ``text``."""
    match = _FLOAT_PREFIX.match(text)
    if match is None:
        raise ValueError(f"not a number: {text!r}")
    return float(match.group(1))


def _is_integer(text: str) -> bool:
    if _INT_FULL.fullmatch(text) is None:
        return False
    return _INT_MIN <= int(text) <= _INT_MAX


def _is_float(text: str) -> bool:
    return _FLOAT_FULL.fullmatch(text) is not None


class OptionType(Enum):
    """The kinds of option the UCI protocol defines."""

    BUTTON = "button"
    CHECK = "check"
    COMBO = "combo"
    SPIN = "spin"
    STRING = "string"


class UCIOption(ABC):
    """An option an engine announced in its ``uci`` reply."""

    type: OptionType

    def __init__(self, name: str) -> None:
        self.name = name

    @property
    @abstractmethod
    def value(self) -> str:
        """The current value, rendered as the engine would receive it."""

    @abstractmethod
    def is_valid(self, value: str) -> bool:
        """Return True if ``value`` may be assigned to this option."""

    @abstractmethod
    def set_value(self, value: str) -> None:
        """Assign ``value`` to the option."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, value={self.value!r})"


class ButtonOption(UCIOption):
    """A button; it can only be pressed by setting it to ``true``."""

    type = OptionType.BUTTON

    def __init__(self, name: str) -> None:
        super().__init__(name)
        self._pressed = False

    @property
    def value(self) -> str:
        return "true" if self._pressed else "false"

    def is_valid(self, value: str) -> bool:
        return value == "true"

    def set_value(self, value: str) -> None:
        if self.is_valid(value):
            self._pressed = True


class CheckOption(UCIOption):
    """A boolean option."""

    type = OptionType.CHECK

    def __init__(self, name: str) -> None:
        super().__init__(name)
        self._checked = False

    @property
    def value(self) -> str:
        return "true" if self._checked else "false"

    def is_valid(self, value: str) -> bool:
        return value in ("true", "false")

    def set_value(self, value: str) -> None:
        if self.is_valid(value):
            self._checked = value == "true"


class ComboOption(UCIOption):
    """An option restricted to a fixed list of words."""

    type = OptionType.COMBO

    def __init__(self, name: str, options: Sequence[str], default: str) -> None:
        super().__init__(name)
        self.options = list(options)
        self._value = default

    @property
    def value(self) -> str:
        return self._value

    def is_valid(self, value: str) -> bool:
        return value in self.options

    def set_value(self, value: str) -> None:
        if self.is_valid(value):
            self._value = value


class SpinOption(UCIOption):
    """A numeric option bounded by a minimum and a maximum."""

    type = OptionType.SPIN

    def __init__(
        self,
        name: str,
        min_value: str,
        max_value: str,
        kind: type = int,
    ) -> None:
        super().__init__(name)
        if kind not in (int, float):
            raise ValueError("SpinOption only supports int and float values.")
        self.kind = kind
        self.min_value = self._parse(min_value)
        self.max_value = self._parse(max_value)
        if self.min_value > self.max_value:
            raise ValueError("Min value cannot be greater than max value.")
        self._value: Union[int, float] = self.min_value

    def _parse(self, text: str) -> Union[int, float]:
        return _parse_int(text) if self.kind is int else _parse_float(text)

    @property
    def value(self) -> str:
        if self.kind is int:
            return str(self._value)
        return f"{self._value:.6f}"

    def is_valid(self, value: str) -> bool:
        return self.min_value <= self._parse(value) <= self.max_value

    def set_value(self, value: str) -> None:
        parsed = self._parse(value)
        if not self.min_value <= parsed <= self.max_value:
            raise ValueError("Value is out of the allowed range.")
        self._value = parsed


class StringOption(UCIOption):
    """A free text option."""

    type = OptionType.STRING

    def __init__(self, name: str, default: str) -> None:
        super().__init__(name)
        self._value = default

    @property
    def value(self) -> str:
        return self._value or "<empty>"

    def is_valid(self, value: str) -> bool:
        return True

    def set_value(self, value: str) -> None:
        self._value = value


class UCIOptions:
    """The ordered collection of options one engine supports."""

    def __init__(self) -> None:
        self._options: list[UCIOption] = []

    def add(self, option: UCIOption) -> None:
        """Append an option."""
        self._options.append(option)

    def get(self, name: str) -> Optional[UCIOption]:
        """Return the first option called ``name``, or None."""
        return next((option for option in self._options if option.name == name), None)

    def __iter__(self) -> Iterator[UCIOption]:
        return iter(self._options)

    def __len__(self) -> int:
        return len(self._options)


def parse_option_line(line: str) -> Optional[UCIOption]:
    """Build an option from an engine's ``option ...`` line.

    Returns None when the line does not describe a known option type.
    Raises ValueError when a spin option has unusable bounds or default.
    """
    tokens = iter(line.split())
    name = ""
    option_type = ""
    params: dict[str, str] = {}

    for token in tokens:
        if token == "name":
            name = next(tokens, name)
            for word in tokens:
                token = word
                if word == "type":
                    break
                name += " " + word

        if token == "type":
            option_type = next(tokens, option_type)
        elif token in ("default", "min", "max"):
            params[token] = next(tokens, params.get(token, ""))
        elif token == "var":
            for word in tokens:
                if word != "var":
                    params["var"] = params.get("var", "") + word + " "

    default = params.get("default", "")

    if option_type == "check":
        check = CheckOption(name)
        check.set_value(default)
        return check

    if option_type == "spin":
        low = params.get("min", "")
        high = params.get("max", "")
        for kind, accepts in ((int, _is_integer), (float, _is_float)):
            if accepts(default) and accepts(low) and accepts(high):
                spin = SpinOption(name, low, high, kind)
                spin.set_value(default)
                return spin
        raise ValueError("The spin values are not numeric.")

    if option_type == "combo":
        return ComboOption(name, params.get("var", "").split(), default)

    if option_type == "button":
        return ButtonOption(name)

    if option_type == "string":
        return StringOption(name, default)

    return None