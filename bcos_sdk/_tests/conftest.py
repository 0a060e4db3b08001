from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterator

import pytest

from bcos_sdk._tests.util.misc import write_default_material
from bcos_sdk.config.config_property import create_default_sdk_config
from bcos_sdk.config.crypto_type import CryptoType
from bcos_sdk.util import material_check


@pytest.fixture(scope="function")
def tmp_sdk_root(tmp_path: Path) -> Path:
    """
    Create a temp directory and populate it with an empty sdk_root directory.
    """
    path: Path = tmp_path / "sdk_root"
    path.mkdir(parents=True, exist_ok=True)
    return path


@pytest.fixture(scope="function")
def root_path_populated_with_config(tmp_sdk_root: Path) -> Path:
    """
    Create a temp sdk_root directory and populate it with a default config.yaml.
    Returns the sdk_root path.
    """
    root_path: Path = tmp_sdk_root
    create_default_sdk_config(root_path)
    return root_path


@pytest.fixture(scope="function", params=[CryptoType.ECDSA, CryptoType.SM], ids=["ecdsa", "sm"])
def crypto_type(request: pytest.FixtureRequest) -> CryptoType:
    crypto_type: CryptoType = request.param
    return crypto_type


@pytest.fixture(scope="function")
def root_path_with_material(root_path_populated_with_config: Path, crypto_type: CryptoType) -> Path:
    """
    A populated sdk_root with the default material files for crypto_type below conf/
    """
    write_default_material(root_path_populated_with_config, crypto_type)
    return root_path_populated_with_config


@pytest.fixture(autouse=True)
def reset_material_warnings() -> Iterator[None]:
    material_check.warned_material_files.clear()
    yield
    material_check.warned_material_files.clear()


@pytest.fixture(autouse=True)
def restore_root_logger() -> Iterator[None]:
    root_logger = logging.getLogger()
    handler_levels = {handler: handler.level for handler in root_logger.handlers}
    level = root_logger.level
    yield
    for handler in list(root_logger.handlers):
        if handler in handler_levels:
            handler.setLevel(handler_levels[handler])
        else:
            root_logger.removeHandler(handler)
            handler.close()
    root_logger.setLevel(level)
