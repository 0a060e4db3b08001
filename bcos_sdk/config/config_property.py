from __future__ import annotations

import contextlib
import copy
import logging
import os
import shutil
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, BinaryIO, Dict, Iterator, List, Optional, Union

import importlib_resources
import yaml
from filelock import FileLock, Timeout

from bcos_sdk.util.errors import ConfigException, MaterialAccessDenied, MaterialError, MaterialNotFound
from bcos_sdk.util.path import path_from_root

log = logging.getLogger(__name__)

CRYPTO_MATERIAL_SECTION = "cryptoMaterial"
LOGGING_SECTION = "logging"


def initial_config_file(filename: Union[str, Path]) -> str:
    initial_config_path = importlib_resources.files("bcos_sdk").joinpath(f"initial-{filename}")
    contents: str = initial_config_path.read_text(encoding="utf-8")
    return contents


def config_path_for_filename(root_path: Path, filename: Union[str, Path]) -> Path:
    path_filename = Path(filename)
    if path_filename.is_absolute():
        return path_filename
    return root_path / "config" / filename


def create_default_sdk_config(root_path: Path, filenames: List[str] = ["config.yaml"]) -> None:
    for filename in filenames:
        default_config_file_data: str = initial_config_file(filename)
        path: Path = config_path_for_filename(root_path, filename)
        tmp_path: Path = path.with_suffix("." + str(os.getpid()))
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(tmp_path, "w") as f:
            f.write(default_config_file_data)
        try:
            os.replace(str(tmp_path), str(path))
        except PermissionError:
            shutil.move(str(tmp_path), str(path))


@contextlib.contextmanager
def lock_config(root_path: Path, filename: Union[str, Path], timeout: float = -1) -> Iterator[None]:
    config_path = config_path_for_filename(root_path, filename)
    config_path.parent.mkdir(parents=True, exist_ok=True)
    lock = FileLock(config_path.with_name(config_path.name + ".lock"))
    try:
        lock.acquire(timeout=timeout, poll_interval=0.05)
    except Timeout as e:
        raise ConfigException(f"Timed out waiting for config lock: {config_path}") from e
    try:
        yield
    finally:
        lock.release()


def load_config(root_path: Path, filename: Union[str, Path]) -> Dict[str, Any]:
    path = config_path_for_filename(root_path, filename)
    if not path.is_file():
        raise ConfigException(f"Config not found: {path}")

    with lock_config(root_path, filename):
        with open(path) as opened_config_file:
            try:
                r = yaml.safe_load(opened_config_file)
            except yaml.YAMLError as e:
                raise ConfigException(f"Error loading config file {path}: {e}") from e

    if r is None:
        log.error(f"yaml.safe_load returned None: {path}")
        raise ConfigException(f"Config file is empty: {path}")
    if type(r) is not dict:
        raise ConfigException(f"Config file {path} must contain a mapping, found {type(r).__name__}")
    return r


@dataclass(frozen=True)
class ConfigProperty:
    """
    Raw SDK configuration, split into the sections that the SDK consumes. Relative
    file values are resolved against root_path.
    """

    root_path: Path
    crypto_material: Dict[str, Any] = field(default_factory=dict)
    logging: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, root_path: Path, config: Dict[str, Any]) -> ConfigProperty:
        sections = {}
        for name in (CRYPTO_MATERIAL_SECTION, LOGGING_SECTION):
            section = config.get(name)
            if section is None:
                section = {}
            elif type(section) is not dict:
                raise ConfigException(f"config section {name!r} must be a mapping, found {type(section).__name__}")
            sections[name] = section
        return cls(
            root_path=root_path,
            crypto_material=sections[CRYPTO_MATERIAL_SECTION],
            logging=sections[LOGGING_SECTION],
        )

    @classmethod
    def load(cls, root_path: Path, filename: Union[str, Path] = "config.yaml") -> ConfigProperty:
        return cls.from_dict(root_path, load_config(root_path, filename))

    def with_overrides(self, overrides: Optional[Dict[str, Any]]) -> ConfigProperty:
        crypto_material = copy.deepcopy(self.crypto_material)
        if overrides is not None:
            crypto_material.update(overrides)
        return replace(self, crypto_material=crypto_material)

    def get_crypto_material(self) -> Dict[str, Any]:
        return self.crypto_material

    @staticmethod
    def get_value(mapping: Optional[Dict[str, Any]], key: str, default: Optional[str]) -> Optional[str]:
        if mapping is None:
            return default
        # an empty yaml value loads as None, treat it like a missing key
        value = mapping.get(key)
        if value is None:
            return default
        return str(value)

    def to_file_path(self, value: Union[str, Path]) -> Path:
        return path_from_root(self.root_path, value)

    def to_input_stream(self, value: Union[str, Path], key: str) -> BinaryIO:
        path = self.to_file_path(value)
        try:
            return open(path, "rb")
        except (FileNotFoundError, IsADirectoryError, NotADirectoryError) as e:
            raise MaterialNotFound(key, path) from e
        except PermissionError as e:
            raise MaterialAccessDenied(key, path) from e
        except OSError as e:
            raise MaterialError(key, path, f"crypto material could not be opened ({e.strerror or e})") from e
