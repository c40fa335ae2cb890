"""Symbol sets and the market data subscription descriptor.

Architecture:
    A ``SymbolSet`` is either the wildcard (all symbols) or a sorted list of
    distinct symbols. Normalization happens on every construction path, be it
    caller input or a subscription echo decoded from the wire, so a set is
    never observed in a non-canonical state. Outbound commands and equality
    checks therefore work on canonical data.

Design Decisions:
    - Immutable: ``SymbolSet`` and ``MarketData`` never change in place;
      updates produce new objects
    - Wildcard collapse: ``"*"`` anywhere in the input means "all symbols"
      and swallows every other entry
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass, field, replace
from typing import Any

WILDCARD = "*"


def is_normalized(symbols: Sequence[str]) -> bool:
    """Check whether a symbol sequence is in canonical form.

    A sequence is normalized if it is empty, consists of the single wildcard,
    or contains no wildcard and is strictly increasing.
    """
    if len(symbols) > 1 and WILDCARD in symbols:
        return False
    return all(a < b for a, b in zip(symbols, symbols[1:]))


def normalize(symbols: Iterable[str]) -> tuple[str, ...]:
    """Sort and de-duplicate symbols.

    Normalizing an already normalized sequence returns it unchanged.

    Examples:
        >>> normalize(["SPY", "MSFT", "SPY"])
        ('MSFT', 'SPY')
        >>> normalize(["SPY", "*", "MSFT"])
        ('*',)
    """
    items = tuple(symbols)
    if is_normalized(items):
        return items
    if WILDCARD in items:
        return (WILDCARD,)

    out: list[str] = []
    for symbol in sorted(items):
        if not out or out[-1] != symbol:
            out.append(symbol)
    return tuple(out)


class SymbolSet:
    """Normalized, immutable set of symbols (or the wildcard)."""

    __slots__ = ("_symbols",)

    def __init__(self, symbols: Iterable[str] = ()) -> None:
        items = (symbols,) if isinstance(symbols, str) else tuple(symbols)
        for symbol in items:
            if not isinstance(symbol, str):
                raise TypeError(f"symbol must be a string, got {type(symbol).__name__}")
        self._symbols = normalize(items)

    @classmethod
    def all(cls) -> SymbolSet:
        """The wildcard set, matching every symbol."""
        return cls((WILDCARD,))

    @classmethod
    def coerce(cls, value: Any) -> SymbolSet:
        """Build a set from another set, an iterable of symbols, or ``None``."""
        if isinstance(value, SymbolSet):
            return value
        if value is None:
            return cls()
        return cls(value)

    @property
    def is_all(self) -> bool:
        return self._symbols == (WILDCARD,)

    @property
    def symbols(self) -> tuple[str, ...]:
        return self._symbols

    def to_wire(self) -> list[str]:
        """Wire representation: a list of symbols, ``["*"]`` for the wildcard."""
        return list(self._symbols)

    def __iter__(self) -> Iterator[str]:
        return iter(self._symbols)

    def __len__(self) -> int:
        return len(self._symbols)

    def __bool__(self) -> bool:
        return bool(self._symbols)

    def __contains__(self, symbol: object) -> bool:
        return self.is_all or symbol in self._symbols

    def __eq__(self, other: object) -> bool:
        if isinstance(other, SymbolSet):
            return self._symbols == other._symbols
        if isinstance(other, (list, tuple)):
            if not all(isinstance(symbol, str) for symbol in other):
                return NotImplemented
            return self._symbols == normalize(other)
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._symbols)

    def __repr__(self) -> str:
        if self.is_all:
            return "SymbolSet.all()"
        return f"SymbolSet({list(self._symbols)!r})"


@dataclass(frozen=True)
class MarketData:
    """Symbols subscribed to per market data type.

    Used both as the request for a subscribe/unsubscribe command and as the
    server-confirmed subscription state kept by a subscription handle.
    """

    bars: SymbolSet = field(default_factory=SymbolSet)
    quotes: SymbolSet = field(default_factory=SymbolSet)
    trades: SymbolSet = field(default_factory=SymbolSet)

    def __post_init__(self) -> None:
        for name in ("bars", "quotes", "trades"):
            object.__setattr__(self, name, SymbolSet.coerce(getattr(self, name)))

    def with_bars(self, symbols: Iterable[str]) -> MarketData:
        return replace(self, bars=SymbolSet.coerce(symbols))

    def with_quotes(self, symbols: Iterable[str]) -> MarketData:
        return replace(self, quotes=SymbolSet.coerce(symbols))

    def with_trades(self, symbols: Iterable[str]) -> MarketData:
        return replace(self, trades=SymbolSet.coerce(symbols))

    @property
    def is_empty(self) -> bool:
        return not (self.bars or self.quotes or self.trades)

    def to_wire(self) -> dict[str, list[str]]:
        return {
            "bars": self.bars.to_wire(),
            "quotes": self.quotes.to_wire(),
            "trades": self.trades.to_wire(),
        }

    @classmethod
    def from_wire(cls, payload: dict[str, Any]) -> MarketData:
        """Build from a subscription echo; missing or null lists mean empty."""
        return cls(
            bars=SymbolSet.coerce(payload.get("bars")),
            quotes=SymbolSet.coerce(payload.get("quotes")),
            trades=SymbolSet.coerce(payload.get("trades")),
        )
