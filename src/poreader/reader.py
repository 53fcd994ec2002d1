from __future__ import annotations

import io
import logging
import os
from dataclasses import dataclass, field
from types import TracebackType
from typing import IO, Any, Dict, Iterable, List, Optional, Union

from .catalogue import CatalogueError, Count, Unit
from .gettext_po import Parser, RawLine
from .language import LanguageTag
from .plurals import categories_from_header

logger = logging.getLogger(__name__)

StrPath = Union[str, "os.PathLike[str]"]


def is_header(unit: Optional[Unit]) -> bool:
  return unit is not None and unit.source.is_singular() and unit.source.is_blank()


def parse_header_fields(text: str) -> Dict[str, str]:
  fields: Dict[str, str] = {}
  for line in text.split("\n"):
    key, sep, value = line.partition(":")
    if sep:
      fields[key.strip()] = value.strip()
  return fields


class PoReader:
  """Reads units from a PO catalogue, one at a time.

  The header entry (the one with an empty msgid) is consumed when the reader
  is created and exposed through `header`, `target_language` and `plurals`
  instead of being yielded. Iterating yields the remaining units in file
  order. A malformed catalogue raises a `CatalogueError` from the iteration
  at the unit where the problem is, after which the reader is exhausted.
  """

  def __init__(
    self,
    lines: Iterable[RawLine],
    owned_file: Optional[IO[Any]] = None,
    encoding: str = "utf-8",
  ) -> None:
    self._parser: Parser = Parser(lines, encoding)
    self._owned_file: Optional[IO[Any]] = owned_file
    self._next_unit: Optional[Unit] = None
    self._next_error: Optional[CatalogueError] = None
    self._done: bool = False
    self.header: Dict[str, str] = {}
    self.header_unit: Optional[Unit] = None
    self.target_language: LanguageTag = LanguageTag.INVARIANT

    self._read_ahead()
    if is_header(self._next_unit):
      assert self._next_unit is not None
      self._parse_header(self._next_unit)
      self._read_ahead()

  @classmethod
  def open(cls, path: StrPath, encoding: str = "utf-8") -> PoReader:
    # Lines are decoded one at a time so a decoding error points at its line.
    file = io.open(path, "rb")
    try:
      return cls(file, owned_file=file, encoding=encoding)
    except BaseException:
      file.close()
      raise

  @property
  def plurals(self) -> List[Count]:
    return self._parser.plurals

  def _read_ahead(self) -> None:
    try:
      self._next_unit = self._parser.parse_next_unit()
    except CatalogueError as err:
      self._next_unit = None
      self._next_error = err

  def _parse_header(self, unit: Unit) -> None:
    self.header_unit = unit
    self.header = parse_header_fields(unit.target.singular() or "")
    logger.debug("catalogue header: %r", self.header)

    language = self.header.get("Language")
    if language is not None:
      try:
        self.target_language = LanguageTag.parse(language)
      except ValueError as err:
        logger.warning("%s, the target language is left unspecified", err)

    self._parser.plurals = categories_from_header(self.header.get("Plural-Forms"))

  def __iter__(self) -> PoReader:
    return self

  def __next__(self) -> Unit:
    if self._done:
      raise StopIteration

    if self._next_error is not None:
      err = self._next_error
      self._next_error = None
      self._done = True
      raise err

    unit = self._next_unit
    if unit is None:
      self._done = True
      raise StopIteration
    self._read_ahead()
    return unit

  def close(self) -> None:
    self._done = True
    if self._owned_file is not None:
      self._owned_file.close()
      self._owned_file = None

  def __enter__(self) -> PoReader:
    return self

  def __exit__(
    self,
    exc_type: type[BaseException] | None,
    exc_value: BaseException | None,
    exc_traceback: TracebackType | None,
  ) -> None:
    self.close()


@dataclass()
class Catalogue:
  header: Dict[str, str] = field(default_factory=dict)
  target_language: LanguageTag = LanguageTag.INVARIANT
  plurals: List[Count] = field(default_factory=list)
  units: List[Unit] = field(default_factory=list)


def read_catalogue(path: StrPath, encoding: str = "utf-8") -> Catalogue:
  with PoReader.open(path, encoding=encoding) as reader:
    return Catalogue(
      header=dict(reader.header),
      target_language=reader.target_language,
      plurals=list(reader.plurals),
      units=list(reader),
    )
