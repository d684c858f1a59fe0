"""
Utility Functions
"""

import json
from datetime import datetime
from pathlib import Path
from typing import Optional

REDACTED = "[REDACTED]"


def ensure_dir(path: str) -> str:
    """Ensure directory exists"""
    Path(path).mkdir(parents=True, exist_ok=True)
    return str(Path(path))


def write_json(path: str, obj) -> None:
    """Write JSON file"""
    ensure_dir(Path(path).parent)
    with open(path, "w", encoding="utf8") as f:
        json.dump(obj, f, indent=2)


def write_text(path: str, text: str) -> None:
    ensure_dir(Path(path).parent)
    with open(path, "w", encoding="utf8") as f:
        f.write(text)


def timestamp() -> str:
    return datetime.now().strftime("%Y%m%d_%H%M%S")


def redact(text: str, secret: Optional[str]) -> str:
    """Remove every spelling of secret (with/without 0x, any case) from text"""
    if not text or not secret:
        return text
    secret = secret.strip()
    bare = secret[2:] if secret.lower().startswith("0x") else secret
    if len(bare) < 8:
        return text

    lowered = text.lower()
    needle = bare.lower()
    out = []
    i = 0
    while True:
        j = lowered.find(needle, i)
        if j < 0:
            out.append(text[i:])
            break
        start = j - 2 if j >= 2 and lowered[j - 2:j] == "0x" else j
        out.append(text[i:start])
        out.append(REDACTED)
        i = j + len(needle)
    return "".join(out)
