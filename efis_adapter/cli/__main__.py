"""``python -m efis_adapter.cli`` dispatcher.

``record`` as the first argument runs the recorder; anything else is an
instrument readout.
"""

from __future__ import annotations

import sys
from typing import List

from . import readout, record


def entry(argv: List[str] | None = None) -> int:
    args = sys.argv[1:] if argv is None else list(argv)
    if args[:1] == ["record"]:
        return record.main(args[1:])
    return readout.main(args)


if __name__ == "__main__":  # pragma: no cover - entry point
    sys.exit(entry())
