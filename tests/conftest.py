from __future__ import annotations

from pathlib import Path

import pytest

SAMPLE_PO = r"""# Czech translation of the sample application.
msgid ""
msgstr ""
"Project-Id-Version: sample 1.0\n"
"Language: cs\n"
"Content-Type: text/plain; charset=UTF-8\n"
"Plural-Forms: nplurals=3; plural=(n==1) ? 0 : (n>=2 && n<=4) ? 1 : 2;\n"

#: src/main.c:12
msgid "Hello"
msgstr "Ahoj"

#. Shown in the window title.
#, fuzzy, c-format
#| msgctxt "menu"
#| msgid "Open file"
msgctxt "menu"
msgid "Open %s"
msgstr "Otevřít soubor"

#: src/main.c:40 src/util.c:7
msgid "Quit"
msgstr ""

#~ msgid "Old"
#~ msgstr "Starý"
"""


@pytest.fixture()
def sample_po_lines() -> list[str]:
  return SAMPLE_PO.splitlines(keepends=True)


@pytest.fixture()
def sample_po_file(tmp_path: Path) -> Path:
  path = tmp_path / "cs.po"
  path.write_text(SAMPLE_PO, encoding="utf-8")
  return path
