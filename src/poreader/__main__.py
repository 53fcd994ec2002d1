from __future__ import annotations

from .main import run_main

run_main()
