from __future__ import annotations

import os
from pathlib import Path
from typing import Union


def path_from_root(root: Path, path_str: Union[str, Path]) -> Path:
    """
    Resolves a configured material or cert directory value. Relative values are taken
    below the sdk root, `~` is expanded in both.
    """
    root = Path(os.path.expanduser(str(root)))
    path = Path(os.path.expanduser(str(path_str)))
    if not path.is_absolute():
        path = root / path
    return path.resolve()


def shorten_material_path(path: Union[str, Path], root_path: Path) -> Path:
    """
    Material paths below the sdk root are shown relative to it, anything else is kept
    as configured.
    """
    material_path = Path(path)
    root_path = root_path.expanduser().resolve()
    if root_path in material_path.parents:
        return material_path.relative_to(root_path)
    return material_path
