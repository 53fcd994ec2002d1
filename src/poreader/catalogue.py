from __future__ import annotations

import enum
import types
from dataclasses import dataclass, field
from typing import Mapping, Optional, Tuple


class Count(enum.Enum):
  """Plural variants.

  Which variants are used depends on the language. In English 1 is ONE and
  everything else is OTHER, but other languages have more cases, with
  Arabic using all six.
  """

  ZERO = 0
  ONE = 1
  TWO = 2
  FEW = 3
  MANY = 4
  OTHER = 5

  @staticmethod
  def default() -> Count:
    return Count.ONE

  def __lt__(self, other: object) -> bool:
    if not isinstance(other, Count):
      return NotImplemented
    return self.value < other.value


class Message:
  """String wrapper, possibly with plural variants.

  Used for the source and target strings of a `Unit`. The concrete variants
  are `MessageEmpty`, `MessageSingular` and `MessagePlural`.
  """

  def is_empty(self) -> bool:
    return isinstance(self, MessageEmpty)

  def is_singular(self) -> bool:
    return isinstance(self, MessageSingular)

  def is_plural(self) -> bool:
    return isinstance(self, MessagePlural)

  def is_blank(self) -> bool:
    raise NotImplementedError()

  def singular(self) -> Optional[str]:
    return None


@dataclass(frozen=True)
class MessageEmpty(Message):

  def is_blank(self) -> bool:
    return True


@dataclass(frozen=True)
class MessageSingular(Message):
  text: str

  def is_blank(self) -> bool:
    return self.text == ""

  def singular(self) -> Optional[str]:
    return self.text


@dataclass(frozen=True)
class MessagePlural(Message):
  variants: Mapping[Count, str]

  def __post_init__(self) -> None:
    if Count.OTHER not in self.variants:
      raise ValueError("a plural message must have a variant for Count.OTHER")
    # Read-only view, ordered by the plural category.
    object.__setattr__(
      self, "variants", types.MappingProxyType(dict(sorted(self.variants.items())))
    )

  def __hash__(self) -> int:
    return hash(tuple(self.variants.items()))

  def is_blank(self) -> bool:
    return all(text == "" for text in self.variants.values())


class Origin:
  """Where a note attached to a unit came from."""


@dataclass(frozen=True)
class OriginDeveloper(Origin):
  pass


@dataclass(frozen=True)
class OriginTranslator(Origin):
  pass


@dataclass(frozen=True)
class OriginTag(Origin):
  name: str


class State(enum.Enum):
  """Whether the translation is considered usable.

  EMPTY means the unit is not translated. NEEDS_WORK marks a suggestion that
  must be checked by a human before it can be used (`#, fuzzy` entries).
  FINAL units are usable. Being obsolete is a separate flag.
  """

  EMPTY = 0
  NEEDS_WORK = 1
  FINAL = 2

  @staticmethod
  def default() -> State:
    return State.EMPTY

  def __lt__(self, other: object) -> bool:
    if not isinstance(other, State):
      return NotImplemented
    return self.value < other.value


Note = Tuple[Origin, str]


@dataclass(frozen=True)
class Unit:
  """Elementary unit of translation.

  Contains the *source* message, the *target* message, an optional
  disambiguating *context* and a state. Fuzzy units may also carry the
  previous source and context their suggestion was derived from.
  """

  context: Optional[str] = None
  source: Message = MessageEmpty()
  target: Message = MessageEmpty()
  prev_context: Optional[str] = None
  prev_source: Message = MessageEmpty()
  notes: Tuple[Note, ...] = ()
  locations: Tuple[str, ...] = ()
  flags: Tuple[str, ...] = ()
  state: State = State.EMPTY
  obsolete: bool = False

  @property
  def is_translated(self) -> bool:
    return self.state == State.FINAL


@dataclass()
class UnitDraft:
  """Mutable counterpart of `Unit`, filled in while a PO entry is parsed."""

  context: Optional[str] = None
  source: Message = MessageEmpty()
  target: Message = MessageEmpty()
  prev_context: Optional[str] = None
  prev_source: Message = MessageEmpty()
  notes: list[Note] = field(default_factory=list)
  locations: list[str] = field(default_factory=list)
  flags: list[str] = field(default_factory=list)
  state: State = State.EMPTY
  obsolete: bool = False

  def freeze(self) -> Unit:
    return Unit(
      context=self.context,
      source=self.source,
      target=self.target,
      prev_context=self.prev_context,
      prev_source=self.prev_source,
      notes=tuple(self.notes),
      locations=tuple(self.locations),
      flags=tuple(self.flags),
      state=self.state,
      obsolete=self.obsolete,
    )


class CatalogueError(Exception):
  """Error in reading a catalogue.

  `line` is the 1-based line number the error occurred at, or 0 when the
  error is not specific to a line.
  """

  def __init__(self, message: str, line: int) -> None:
    super().__init__(message)
    self.message: str = message
    self.line: int = line


class CatalogueIOError(CatalogueError):

  def __init__(self, line: int, cause: BaseException) -> None:
    message = str(cause) if line == 0 else f"{cause} at line {line}"
    super().__init__(message, line)
    self.cause: BaseException = cause
    self.__cause__ = cause


class CatalogueParseError(CatalogueError):
  """A parse error.

  `got` is the token the parser stopped on, if it knows. An empty `expected`
  means the parser cannot tell what it could have accepted instead.
  """

  def __init__(self, line: int, got: Optional[str], expected: Tuple[str, ...] = ()) -> None:
    parts = [f"Parse error at line {line}"]
    if len(expected) > 0:
      parts.append(", expected " + " or ".join(repr(e) for e in expected))
    if got is not None:
      parts.append(f", got {got!r}")
    super().__init__("".join(parts), line)
    self.got: Optional[str] = got
    self.expected: Tuple[str, ...] = tuple(expected)
