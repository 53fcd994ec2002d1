from __future__ import annotations

import gettext
import logging
import re
from dataclasses import dataclass, field
from typing import Callable, List

from .catalogue import Count

logger = logging.getLogger(__name__)

# What GNU gettext assumes for catalogues which don't declare their plural
# forms, i.e. `nplurals=2; plural=(n != 1);`.
DEFAULT_PLURALS: List[Count] = [Count.ONE, Count.OTHER]

MAX_PLURALS = 6

# Numbers the plural expression is probed with to tell the categories apart.
_SAMPLE_RANGE = range(1000)

_PLURAL_FORMS_RE = re.compile(
  r"^\s*nplurals\s*=\s*(?P<nplurals>\d+)\s*;\s*plural\s*=\s*(?P<plural>.+?)\s*;?\s*$"
)


class PluralFormsError(ValueError):
  pass


@dataclass(frozen=True)
class PluralForms:
  nplurals: int
  expression: str
  categories: List[Count]
  _select: Callable[[int], int] = field(repr=False, compare=False)

  def index_for(self, n: int) -> int:
    return self._select(n)

  def category_for(self, n: int) -> Count:
    return self.categories[self.index_for(n)]


def parse_plural_forms(value: str) -> PluralForms:
  """Parse the value of the `Plural-Forms` header.

  The expression is compiled with the same evaluator `gettext` itself uses.
  Each plural index is then named with a `Count` by looking at which numbers
  select it: the last index is the catch-all OTHER, an index selected only by
  0 is ZERO, the one selected by 1 is ONE, one selected only by numbers
  ending in 02 (such as 2) is TWO, and whatever remains becomes FEW and then
  MANY.
  """

  match = _PLURAL_FORMS_RE.match(value)
  if match is None:
    raise PluralFormsError(f"malformed Plural-Forms header: {value!r}")
  nplurals = int(match.group("nplurals"))
  expression = match.group("plural")
  if not 1 <= nplurals <= MAX_PLURALS:
    raise PluralFormsError(f"unsupported number of plural forms: {nplurals}")

  try:
    select = gettext.c2py(expression)
  except (ValueError, RecursionError) as err:
    raise PluralFormsError(f"invalid plural expression {expression!r}: {err}") from err

  hits: List[set[int]] = [set() for _ in range(nplurals)]
  for n in _SAMPLE_RANGE:
    try:
      index = select(n)
    except ZeroDivisionError as err:
      raise PluralFormsError(f"plural expression {expression!r} divides by zero") from err
    if not 0 <= index < nplurals:
      raise PluralFormsError(
        f"plural expression {expression!r} selected form {index} for n = {n}, but nplurals = {nplurals}"
      )
    hits[index].add(n)

  return PluralForms(
    nplurals=nplurals,
    expression=expression,
    categories=_name_categories(hits),
    _select=select,
  )


def _name_categories(hits: List[set[int]]) -> List[Count]:
  last = len(hits) - 1
  names: List[Count | None] = [None] * len(hits)
  names[last] = Count.OTHER

  for index, numbers in enumerate(hits):
    if index == last:
      continue
    if len(numbers) == 0:
      raise PluralFormsError(f"plural form {index} is never selected")
    if numbers == {0}:
      names[index] = Count.ZERO
    elif 1 in numbers:
      names[index] = Count.ONE
    elif Count.TWO not in names and all(n % 100 == 2 for n in numbers):
      names[index] = Count.TWO

  remaining = [Count.FEW, Count.MANY]
  for index, name in enumerate(names):
    if name is None:
      if len(remaining) == 0:
        raise PluralFormsError("too many plural forms without a recognizable category")
      names[index] = remaining.pop(0)

  return [name for name in names if name is not None]


def categories_from_header(value: str | None) -> List[Count]:
  if value is None:
    return list(DEFAULT_PLURALS)
  try:
    forms = parse_plural_forms(value)
  except PluralFormsError as err:
    logger.warning("%s, assuming %r", err, [c.name for c in DEFAULT_PLURALS])
    return list(DEFAULT_PLURALS)
  logger.debug("plural categories: %r", [c.name for c in forms.categories])
  return forms.categories
