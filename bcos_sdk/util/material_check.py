from __future__ import annotations

import logging
import os
import stat
import sys
from pathlib import Path
from typing import List, Optional, Set, Tuple

from bcos_sdk.config.crypto_material import CryptoMaterialPaths

DEFAULT_PERMISSIONS_CERT_FILE: int = 0o644
DEFAULT_PERMISSIONS_KEY_FILE: int = 0o600

# Masks containing permission bits we don't allow
RESTRICT_MASK_CERT_FILE: int = stat.S_IWGRP | stat.S_IXGRP | stat.S_IWOTH | stat.S_IXOTH  # 0o033
RESTRICT_MASK_KEY_FILE: int = (
    stat.S_IRGRP | stat.S_IWGRP | stat.S_IXGRP | stat.S_IROTH | stat.S_IWOTH | stat.S_IXOTH
)  # 0o077

log = logging.getLogger(__name__)

# Set to keep track of which files we've already warned about
warned_material_files: Set[Path] = set()


def verify_file_permissions(path: Path, mask: int) -> Tuple[bool, int]:
    """
    Check that the file's permissions are properly restricted, as compared to the
    permission mask
    """
    mode = os.stat(path).st_mode & 0o777
    return (mode & mask == 0, mode)


def octal_mode_string(mode: int) -> str:
    """Yields a permission mode string: e.g. 0644"""
    return f"0{oct(mode)[-3:]}"


def warn_material_permissions(
    path: Path, actual_mode: int, expected_mode: int, *, logger: Optional[logging.Logger] = None
) -> None:
    if path in warned_material_files:
        return
    (logger or log).warning(
        f"Permissions {octal_mode_string(actual_mode)} for "
        f"'{path}' are too open. "  # lgtm [py/clear-text-logging-sensitive-data]
        f"Expected {octal_mode_string(expected_mode)}"
    )
    warned_material_files.add(path)


def material_files_to_check(paths: CryptoMaterialPaths) -> List[Tuple[Path, int, int]]:
    files: List[Tuple[Path, int, int]] = []
    for cert_path in (paths.ca_cert_path, paths.sdk_cert_path, paths.encryption_cert_path):
        if cert_path is not None:
            files.append((cert_path, RESTRICT_MASK_CERT_FILE, DEFAULT_PERMISSIONS_CERT_FILE))
    for key_path in (paths.sdk_private_key_path, paths.encryption_private_key_path):
        if key_path is not None:
            files.append((key_path, RESTRICT_MASK_KEY_FILE, DEFAULT_PERMISSIONS_KEY_FILE))
    return files


def check_material_permissions(
    paths: CryptoMaterialPaths, logger: Optional[logging.Logger] = None
) -> List[Tuple[Path, int]]:
    """Check that file permissions are properly set for the resolved certificate and key files"""
    if sys.platform == "win32" or sys.platform == "cygwin":
        # TODO: ACLs for certs/keys on Windows
        return []

    invalid_files_and_modes: List[Tuple[Path, int]] = []
    for path, mask, expected_mode in material_files_to_check(paths):
        good_perms, mode = verify_file_permissions(path, mask)
        if not good_perms:
            warn_material_permissions(path, mode, expected_mode, logger=logger)
            invalid_files_and_modes.append((path, mode))

    return invalid_files_and_modes
