from __future__ import annotations

import re
from dataclasses import dataclass
from typing import ClassVar

# <https://www.rfc-editor.org/rfc/rfc5646#section-2.1>, only the shape of
# the subtags is checked.
_BCP47_RE = re.compile(r"^[A-Za-z]{1,8}(?:-[A-Za-z0-9]{1,8})*$")
# language[_territory][.codeset][@modifier]
_UNIX_LOCALE_RE = re.compile(
  r"^([A-Za-z]{2,8})(?:_([A-Za-z0-9]{2,8}))?(?:\.[^@]*)?(?:@(.*))?$"
)
# Modifiers naming a script become the script subtag, any other modifier is
# dropped.
_SCRIPT_MODIFIERS = {
  "latin": "Latn",
  "cyrillic": "Cyrl",
  "arabic": "Arab",
  "devanagari": "Deva",
}


@dataclass(frozen=True)
class LanguageTag:
  """An opaque language identifier, such as `cs` or `pt-BR`."""

  tag: str

  INVARIANT: ClassVar[LanguageTag]

  @staticmethod
  def parse(s: str) -> LanguageTag:
    s = s.strip()
    if s in ("", "C", "POSIX"):
      return LanguageTag.INVARIANT
    if _BCP47_RE.match(s):
      return LanguageTag(s)
    return LanguageTag.from_unix(s)

  @staticmethod
  def from_unix(s: str) -> LanguageTag:
    match = _UNIX_LOCALE_RE.match(s)
    if match is None:
      raise ValueError(f"invalid language tag: {s!r}")
    language, territory, modifier = match.group(1, 2, 3)
    subtags = [language]
    script = _SCRIPT_MODIFIERS.get((modifier or "").lower())
    if script is not None:
      subtags.append(script)
    if territory is not None:
      subtags.append(territory)
    return LanguageTag("-".join(subtags))

  def is_invariant(self) -> bool:
    return self.tag == ""

  def __str__(self) -> str:
    return self.tag


LanguageTag.INVARIANT = LanguageTag("")
