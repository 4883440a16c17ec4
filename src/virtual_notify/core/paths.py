from __future__ import annotations

import base64
import hashlib
from pathlib import Path
from typing import Union

PathLike = Union[str, Path]

PREFIX = "vn_"
LOCK_SUFFIX = ".lock"
MARKER_SUFFIX = ".virtualnotify"


def hashstr(s: str) -> str:
    """
    SHA-256 of the UTF-8 bytes, standard base32 encoded (56 chars, A-Z2-7 and '=').
    Stable across processes; no salt.
    """
    digest = hashlib.sha256(s.encode("utf-8")).digest()
    return base64.b32encode(digest).decode("ascii")


def lock_path(base_dir: PathLike, ns_hash: str) -> Path:
    return Path(base_dir) / ("%s%s%s" % (PREFIX, ns_hash, LOCK_SUFFIX))


def marker_path(base_dir: PathLike, ns_hash: str, event_name: str) -> Path:
    return Path(base_dir) / ("%s%s_%s%s" % (PREFIX, ns_hash, hashstr(event_name), MARKER_SUFFIX))
