from __future__ import annotations

import re
from typing import Iterable, Optional


def next_sequential_id(prefix: str, existing: Iterable[Optional[str]], *, digits: int) -> str:
    """Return prefix + zero-padded (max existing number + 1).

    Ids that do not look like prefix followed by digits are ignored.
    """

    pattern = re.compile(rf"^{re.escape(prefix)}(\d+)$")
    highest = 0
    for value in existing:
        m = pattern.match(value or "")
        if m:
            highest = max(highest, int(m.group(1)))
    return f"{prefix}{highest + 1:0{digits}d}"
