from __future__ import annotations

from enum import IntEnum
from typing import Union

from bcos_sdk.util.errors import InvalidCryptoScheme


class CryptoType(IntEnum):
    ECDSA = 0
    SM = 1

    @classmethod
    def parse(cls, value: Union[CryptoType, int, str]) -> CryptoType:
        """
        Accepts a CryptoType, its integer value, or its case-insensitive name.
        """
        if isinstance(value, cls):
            return value
        # bool is an int subclass, but True is not a scheme
        if isinstance(value, bool):
            raise InvalidCryptoScheme(value)
        if isinstance(value, int):
            try:
                return cls(value)
            except ValueError:
                raise InvalidCryptoScheme(value) from None
        if isinstance(value, str):
            try:
                return cls[value.strip().upper()]
            except KeyError:
                raise InvalidCryptoScheme(value) from None
        raise InvalidCryptoScheme(value)


class CryptoProviderType:
    SSM = "ssm"
    HSM = "hsm"


def is_hardware_provider(provider: str) -> bool:
    return provider.lower() != CryptoProviderType.SSM
