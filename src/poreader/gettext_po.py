# A line-oriented reader for gettext PO catalogues. Every line is first
# classified on its own, then the parser folds the classified lines into
# units with a single line of lookahead, so it never has to backtrack.

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Iterable, Iterator, List, Optional, Union

from .catalogue import (
  CatalogueError, CatalogueIOError, CatalogueParseError, Count, Message, MessageEmpty,
  MessagePlural, MessageSingular, OriginDeveloper, OriginTranslator, State, Unit, UnitDraft
)
from .plurals import DEFAULT_PLURALS, MAX_PLURALS
from .utils import unreachable

RawLine = Union[str, bytes]

OBSOLETE_PREFIX = "#~"

_MESSAGE_RE = re.compile(
  r'^\s*(#~\|?|#\|)?\s*(msgctxt|msgid_plural|msgid|msgstr(?:\[[012345]\])?)?\s*"(.*)"\s*$'
)
_COMMENT_RE = re.compile(r"^\s*#([:.,]?)\s*(.*)")

_UNESCAPE_RE = re.compile(r'\\[rtn"\\]')
_ESCAPE_RE = re.compile(r'[\r\t\n"\\]')

CHARACTER_ESCAPES = {
  "\\r": "\r",
  "\\t": "\t",
  "\\n": "\n",
  '\\"': '"',
  "\\\\": "\\",
}
CHARACTER_UNESCAPES = {v: k for k, v in CHARACTER_ESCAPES.items()}

MSGSTR_PLURAL_TAGS = tuple(f"msgstr[{i}]" for i in range(MAX_PLURALS))


def unescape(text: str) -> str:
  return _UNESCAPE_RE.sub(lambda m: CHARACTER_ESCAPES[m.group(0)], text)


def escape(text: str) -> str:
  return _ESCAPE_RE.sub(lambda m: CHARACTER_UNESCAPES[m.group(0)], text)


@dataclass(frozen=True)
class LineBlank:
  pass


@dataclass(frozen=True)
class LineComment:
  line: int
  # One of ":", ".", "," or " " for plain translator comments.
  kind: str
  text: str


@dataclass(frozen=True)
class LineMessage:
  line: int
  marker: str
  # Tags of previous-value lines (`#| msgid`) are prefixed with "|".
  tag: str
  text: str

  def is_obsolete(self) -> bool:
    return self.marker.startswith(OBSOLETE_PREFIX)

  def describe(self) -> str:
    tag = self.tag[1:] if self.tag.startswith("|") else self.tag
    return f"{self.marker} {tag}" if self.marker else tag


@dataclass(frozen=True)
class LineContinuation:
  line: int
  marker: str
  text: str


PoLine = Union[LineComment, LineMessage, LineContinuation]


def classify_line(line: str, n: int) -> Optional[Union[PoLine, LineBlank]]:
  """Classify a single line of a PO file, or return None if it is malformed."""
  if line.strip() == "":
    return LineBlank()

  match = _MESSAGE_RE.match(line)
  if match is not None:
    marker = match.group(1) or ""
    tag = match.group(2)
    text = unescape(match.group(3))
    if tag is None:
      return LineContinuation(n, marker, text)
    if marker.endswith("|"):
      tag = "|" + tag
    return LineMessage(n, marker, tag, text)

  match = _COMMENT_RE.match(line)
  if match is not None:
    return LineComment(n, match.group(1) or " ", match.group(2))

  return None


class LineSource:
  """Classified, non-blank lines of a PO file, numbered from 1.

  Lines read as bytes are decoded one at a time with `encoding`, so a
  decoding failure is reported at the line that contains it.
  """

  def __init__(self, lines: Iterable[RawLine], encoding: str = "utf-8") -> None:
    self._inner: Iterator[RawLine] = iter(lines)
    self.encoding: str = encoding
    self.line_number: int = 0
    self.done: bool = False

  def __iter__(self) -> LineSource:
    return self

  def __next__(self) -> PoLine:
    while not self.done:
      try:
        raw_line = next(self._inner)
        if isinstance(raw_line, bytes):
          raw_line = raw_line.decode(self.encoding)
      except StopIteration:
        self.done = True
        break
      except (OSError, UnicodeDecodeError) as err:
        self.done = True
        raise CatalogueIOError(self.line_number + 1, err) from err

      self.line_number += 1
      raw_line = raw_line.rstrip("\r\n")
      po_line = classify_line(raw_line, self.line_number)
      if po_line is None:
        self.done = True
        raise CatalogueParseError(self.line_number, raw_line, ())
      if isinstance(po_line, LineBlank):
        continue
      return po_line

    raise StopIteration


class Parser:

  def __init__(self, lines: Iterable[RawLine], encoding: str = "utf-8") -> None:
    self.source: LineSource = LineSource(lines, encoding)
    self.peeked_line: Optional[PoLine] = None
    self.peeked_error: Optional[Exception] = None
    self.done: bool = False
    self._plurals: List[Count] = list(DEFAULT_PLURALS)

  @property
  def plurals(self) -> List[Count]:
    return self._plurals

  @plurals.setter
  def plurals(self, categories: List[Count]) -> None:
    if len(categories) > len(MSGSTR_PLURAL_TAGS):
      raise ValueError(f"at most {len(MSGSTR_PLURAL_TAGS)} plural forms are supported")
    if Count.OTHER not in categories:
      raise ValueError("plural forms must include Count.OTHER")
    self._plurals = list(categories)

  def peek_line(self) -> Optional[PoLine]:
    if self.peeked_error is not None:
      raise self.peeked_error
    if self.peeked_line is None:
      try:
        self.peeked_line = next(self.source, None)
      except CatalogueError as err:
        self.peeked_error = err
        raise
    return self.peeked_line

  def next_line(self) -> Optional[PoLine]:
    line = self.peek_line()
    self.peeked_line = None
    return line

  def try_consume(self, predicate: Callable[[PoLine], bool]) -> Optional[PoLine]:
    line = self.peek_line()
    if line is not None and predicate(line):
      return self.next_line()
    return None

  def parse_next_unit(self) -> Optional[Unit]:
    if self.done:
      return None
    try:
      unit = self._parse_unit()
    except CatalogueError:
      self.done = True
      raise
    if unit is None:
      self.done = True
    return unit

  def _parse_unit(self) -> Optional[Unit]:
    draft = UnitDraft()
    self.parse_comments(draft)

    line = self.peek_line()
    if line is None:
      return None
    if isinstance(line, LineMessage) and line.is_obsolete():
      draft.obsolete = True

    draft.prev_context = self.parse_msg("|msgctxt", draft)
    prev_msgid = self.parse_msg("|msgid", draft)
    prev_msgid_plural = self.parse_msg("|msgid_plural", draft) if prev_msgid is not None else None
    draft.prev_source = make_source(prev_msgid, prev_msgid_plural)

    draft.context = self.parse_msg("msgctxt", draft)

    msgid = self.parse_msg("msgid", draft)
    if msgid is None:
      return self.expected(["msgid"])
    msgid_plural = self.parse_msg("msgid_plural", draft)
    draft.source = make_source(msgid, msgid_plural)

    if draft.source.is_singular():
      msgstr = self.parse_msg("msgstr", draft)
      if msgstr is None:
        return self.expected(["msgstr"])
      draft.target = MessageSingular(msgstr)
    else:
      variants: dict[Count, str] = {}
      for count, tag in zip(self.plurals, MSGSTR_PLURAL_TAGS):
        msgstr = self.parse_msg(tag, draft)
        if msgstr is None:
          return self.expected([tag])
        variants[count] = msgstr
      draft.target = MessagePlural(variants)

    if draft.state != State.NEEDS_WORK and not draft.target.is_blank():
      draft.state = State.FINAL

    assert not draft.source.is_empty()
    return draft.freeze()

  def parse_comments(self, out: UnitDraft) -> None:
    while True:
      line = self.try_consume(lambda line: isinstance(line, LineComment))
      if not isinstance(line, LineComment):
        break
      if line.kind == ",":
        for flag in (flag.strip() for flag in line.text.split(",")):
          if flag == "fuzzy":
            out.state = State.NEEDS_WORK
          elif flag != "":
            out.flags.append(flag)
      elif line.kind == ":":
        out.locations.extend(line.text.split())
      elif line.kind == ".":
        out.notes.append((OriginDeveloper(), line.text))
      elif line.kind == " ":
        out.notes.append((OriginTranslator(), line.text))
      else:
        unreachable()

  def parse_msg(self, tag: str, draft: UnitDraft) -> Optional[str]:
    line = self.try_consume(
      lambda line: (
        isinstance(line, LineMessage) and line.tag == tag and
        line.is_obsolete() == draft.obsolete
      )
    )
    if not isinstance(line, LineMessage):
      return None

    marker = line.marker
    text_buf: List[str] = [line.text]
    while True:
      continuation = self.try_consume(
        lambda line: isinstance(line, LineContinuation) and line.marker == marker
      )
      if not isinstance(continuation, LineContinuation):
        break
      text_buf.append(continuation.text)
    return "".join(text_buf)

  def expected(self, expected: List[str]) -> None:
    line = self.peek_line()
    if line is None:
      return None
    elif isinstance(line, LineMessage):
      raise CatalogueParseError(line.line, line.describe(), tuple(expected))
    elif isinstance(line, LineContinuation):
      raise CatalogueParseError(line.line, '"', tuple(expected))
    elif isinstance(line, LineComment):
      raise CatalogueParseError(line.line, f"#{line.kind}", tuple(expected))
    else:
      unreachable()


def make_source(msgid: Optional[str], msgid_plural: Optional[str]) -> Message:
  if msgid is None:
    return MessageEmpty()
  elif msgid_plural is None:
    return MessageSingular(msgid)
  else:
    return MessagePlural({Count.ONE: msgid, Count.OTHER: msgid_plural})
