from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

ROOT_PATH_ENV = "BCOS_SDK_ROOT"
DEFAULT_ROOT_DIR = "~/.bcos-sdk"

DEFAULT_ROOT_PATH = Path(os.getenv(ROOT_PATH_ENV, DEFAULT_ROOT_DIR)).expanduser().resolve()


def resolve_root_path(*, override: Optional[Path]) -> Path:
    """
    Picks the sdk root for a command. `--root-path` wins over $BCOS_SDK_ROOT, which wins
    over ~/.bcos-sdk. The environment is read on every call, not at import time.
    """
    if override is not None:
        root = override
    else:
        root = Path(os.environ.get(ROOT_PATH_ENV, DEFAULT_ROOT_DIR))
    return root.expanduser().resolve()
