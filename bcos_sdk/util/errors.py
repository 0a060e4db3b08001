from __future__ import annotations

from pathlib import Path
from typing import Any


class ConfigException(Exception):
    pass


class InvalidCryptoScheme(ConfigException):
    def __init__(self, value: Any) -> None:
        super().__init__(
            "load CryptoMaterialConfig failed, only support ecdsa and sm now, "
            f"expected 0 or 1, but provided {value!r}"
        )
        self.value = value


##
#  Material errors
##


class MaterialError(ConfigException):
    def __init__(self, key: str, path: Path, error_message: str) -> None:
        super().__init__(f"{error_message} for {key!r}: {str(path)!r}")
        self.key = key
        self.path = path


class MaterialNotFound(MaterialError):
    def __init__(self, key: str, path: Path) -> None:
        super().__init__(key, path, "crypto material not found")


class MaterialAccessDenied(MaterialError):
    def __init__(self, key: str, path: Path) -> None:
        super().__init__(key, path, "crypto material is not readable")


class MaterialConsumed(Exception):
    def __init__(self, path: Path) -> None:
        super().__init__(f"crypto material stream already consumed: {str(path)!r}")
        self.path = path
