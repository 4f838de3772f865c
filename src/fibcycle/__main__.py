"""Allow ``python -m fibcycle``."""

from __future__ import annotations

from fibcycle import main

main()
