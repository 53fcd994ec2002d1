from __future__ import annotations

from .catalogue import (
  CatalogueError, CatalogueIOError, CatalogueParseError, Count, Message, MessageEmpty,
  MessagePlural, MessageSingular, Origin, OriginDeveloper, OriginTag, OriginTranslator, State, Unit
)
from .language import LanguageTag
from .reader import Catalogue, PoReader, read_catalogue

__version__ = "0.1.0"

BINARY_NAME = "poreader"

__all__ = [
  "CatalogueError",
  "CatalogueIOError",
  "CatalogueParseError",
  "Count",
  "Message",
  "MessageEmpty",
  "MessagePlural",
  "MessageSingular",
  "Origin",
  "OriginDeveloper",
  "OriginTag",
  "OriginTranslator",
  "State",
  "Unit",
  "LanguageTag",
  "Catalogue",
  "PoReader",
  "read_catalogue",
]
