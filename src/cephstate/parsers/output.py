# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/cephstate/parsers/output.py
"""
Best-effort parsers for ceph / rbd output.

None of these raise: a missing or malformed field is simply left out of the
result and callers keep whatever value they already had.
"""

from __future__ import annotations

import json
import re
from typing import Any, Dict, List, Mapping, Optional

_MISSING = object()

_CAPS_RE = re.compile(r'^caps\s+(?P<daemon>\S+)\s*=\s*"(?P<cap>.*)"\s*$')


def parse_properties(output: str, fields: Mapping[str, type]) -> Dict[str, Any]:
    """
    Parse ``key: value`` lines (``ceph osd pool get <pool> all``).

    ``fields`` maps the keys of interest to ``int`` or ``str``.
    """
    found: Dict[str, Any] = {}
    for line in (output or "").splitlines():
        if ":" not in line:
            continue
        key, _, raw = line.partition(":")
        key = key.strip()
        if key not in fields:
            continue
        value = raw.strip()
        if fields[key] is int:
            try:
                found[key] = int(value)
            except ValueError:
                continue
        elif value:
            found[key] = value
    return found


def parse_json(output: str) -> Dict[str, Any]:
    """Parse a JSON object; anything else yields ``{}``."""
    try:
        doc = json.loads(output or "")
    except ValueError:
        return {}
    return doc if isinstance(doc, dict) else {}


def json_path(doc: Any, path: str, default: Any = None) -> Any:
    """
    Walk ``doc`` by a dotted key path, e.g. ``"servicemap.services.osd.daemons"``.
    Returns ``default`` if any segment is missing or not a mapping.
    """
    cur = doc
    for segment in path.split("."):
        if not isinstance(cur, dict):
            return default
        cur = cur.get(segment, _MISSING)
        if cur is _MISSING:
            return default
    return cur


def parse_line_list(output: str, header: Optional[str] = None) -> List[str]:
    """Non-empty stripped lines; a leading ``header`` line is dropped."""
    lines = [ln.strip() for ln in (output or "").splitlines()]
    lines = [ln for ln in lines if ln]
    if header is not None and lines and lines[0] == header:
        lines = lines[1:]
    return lines


_SIZE_RE = re.compile(r"^\s*(?P<num>\d+)\s*(?P<unit>[BKMGTPE]?)i?B?\s*$", re.IGNORECASE)
_SIZE_SHIFT = {"B": 0, "K": 10, "M": 20, "G": 30, "T": 40, "P": 50, "E": 60}


def parse_size(value: str) -> Optional[int]:
    """
    Byte count of an rbd ``--size`` string ("10G", "512M", "1073741824B").
    A bare number is megabytes, as rbd reads it. Unparseable input -> None.
    """
    m = _SIZE_RE.match(value or "")
    if not m:
        return None
    unit = (m.group("unit") or "M").upper()
    return int(m.group("num")) << _SIZE_SHIFT[unit]


def parse_keyring_key(output: str) -> Optional[str]:
    """Secret from a keyring dump (``key = AQ...==``)."""
    for line in (output or "").splitlines():
        if "key =" not in line:
            continue
        # keys are base64 and may end in '='
        value = line.split("key =", 1)[1].strip()
        if value:
            return value
    return None


def parse_keyring_caps(output: str) -> Dict[str, str]:
    """``caps mon = "allow r"`` lines -> ``{"mon": "allow r"}``."""
    caps: Dict[str, str] = {}
    for line in (output or "").splitlines():
        m = _CAPS_RE.match(line.strip())
        if m:
            caps[m.group("daemon")] = m.group("cap")
    return caps
