from __future__ import annotations

from collections.abc import Collection
from pathlib import Path
from typing import List, Protocol, Union

import pytest

from bcos_sdk.config.crypto_material import derive_default_crypto_material
from bcos_sdk.config.crypto_type import CryptoType

Marks = Union[pytest.MarkDecorator, Collection[Union[pytest.MarkDecorator, pytest.Mark]]]


class DataCase(Protocol):
    marks: Marks

    @property
    def id(self) -> str: ...


def datacases(*cases: DataCase, _name: str = "case") -> pytest.MarkDecorator:
    return pytest.mark.parametrize(
        argnames=_name,
        argvalues=[pytest.param(case, id=case.id, marks=case.marks) for case in cases],
    )


def material_contents(path: Path) -> bytes:
    return f"material for {path.name}\n".encode()


def write_material(path: Path, mode: int = 0o600) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(material_contents(path))
    path.chmod(mode)
    return path


def write_default_material(root_path: Path, crypto_type: CryptoType, cert_path: str = "conf") -> List[Path]:
    """Writes every default material file for crypto_type below root_path/cert_path"""
    defaults = derive_default_crypto_material(crypto_type, root_path / cert_path)
    written: List[Path] = []
    for path in (
        defaults.ca_cert_path,
        defaults.sdk_cert_path,
        defaults.encryption_cert_path,
    ):
        if path is not None:
            written.append(write_material(path, 0o644))
    for path in (defaults.sdk_private_key_path, defaults.encryption_private_key_path):
        if path is not None:
            written.append(write_material(path, 0o600))
    return written
