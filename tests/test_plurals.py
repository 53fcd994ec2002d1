from __future__ import annotations

import logging

import pytest

from poreader.catalogue import Count
from poreader.plurals import (
  DEFAULT_PLURALS, PluralFormsError, categories_from_header, parse_plural_forms
)


@pytest.mark.parametrize(
  "header, categories",
  [
    ("nplurals=2; plural=(n != 1);", [Count.ONE, Count.OTHER]),
    ("nplurals=2; plural=(n > 1);", [Count.ONE, Count.OTHER]),
    ("nplurals=1; plural=0;", [Count.OTHER]),
    (
      "nplurals=3; plural=(n==1) ? 0 : (n>=2 && n<=4) ? 1 : 2;",
      [Count.ONE, Count.FEW, Count.OTHER],
    ),
    (
      "nplurals=3; plural=(n%10==1 && n%100!=11 ? 0 : n%10>=2 && n%10<=4 && (n%100<10 || n%100>=20) ? 1 : 2);",
      [Count.ONE, Count.FEW, Count.OTHER],
    ),
    (
      "nplurals=6; plural=(n==0 ? 0 : n==1 ? 1 : n==2 ? 2 : n%100>=3 && n%100<=10 ? 3 : n%100>=11 ? 4 : 5);",
      [Count.ZERO, Count.ONE, Count.TWO, Count.FEW, Count.MANY, Count.OTHER],
    ),
    (
      "nplurals=5; plural=n==1 ? 0 : n==2 ? 1 : n<7 ? 2 : n<11 ? 3 : 4;",
      [Count.ONE, Count.TWO, Count.FEW, Count.MANY, Count.OTHER],
    ),
  ],
)
def test_categories(header: str, categories: list[Count]) -> None:
  assert parse_plural_forms(header).categories == categories


def test_category_for() -> None:
  forms = parse_plural_forms("nplurals=3; plural=(n==1) ? 0 : (n>=2 && n<=4) ? 1 : 2;")
  assert forms.nplurals == 3
  assert forms.expression == "(n==1) ? 0 : (n>=2 && n<=4) ? 1 : 2"
  assert forms.category_for(1) == Count.ONE
  assert forms.category_for(3) == Count.FEW
  assert forms.category_for(0) == Count.OTHER
  assert forms.category_for(25) == Count.OTHER
  assert forms.index_for(4) == 1


@pytest.mark.parametrize(
  "header",
  [
    "garbage",
    "nplurals=7; plural=n;",
    "nplurals=0; plural=0;",
    "nplurals=2; plural=n+;",
    "nplurals=2; plural=n;",
    "nplurals=3; plural=n==1 ? 0 : 2;",
  ],
)
def test_invalid_plural_forms(header: str) -> None:
  with pytest.raises(PluralFormsError):
    parse_plural_forms(header)


def test_categories_from_header_defaults(caplog: pytest.LogCaptureFixture) -> None:
  assert categories_from_header(None) == DEFAULT_PLURALS
  with caplog.at_level(logging.WARNING, logger="poreader.plurals"):
    assert categories_from_header("nonsense") == DEFAULT_PLURALS
  assert "malformed Plural-Forms header" in caplog.text
