from __future__ import annotations

import contextlib
import logging
from dataclasses import dataclass, field
from pathlib import Path
from types import TracebackType
from typing import Any, BinaryIO, Dict, Iterator, Optional, Tuple, Type, Union

from typing_extensions import assert_never, final

from bcos_sdk.config.config_property import ConfigProperty
from bcos_sdk.config.crypto_type import CryptoProviderType, CryptoType, is_hardware_provider
from bcos_sdk.util.errors import ConfigException, MaterialConsumed

log = logging.getLogger(__name__)

DEFAULT_CERT_PATH = "conf"
SM_CERT_DIR = "gm"

# (field name, config key) for every material file, in resolution order
MATERIAL_KEYS: Tuple[Tuple[str, str], ...] = (
    ("ca_cert", "caCert"),
    ("sdk_cert", "sslCert"),
    ("sdk_private_key", "sslKey"),
    ("encryption_cert", "enSslCert"),
    ("encryption_private_key", "enSslKey"),
)


@final
@dataclass(frozen=True)
class CryptoMaterialPaths:
    cert_path: Path
    crypto_type: CryptoType
    ca_cert_path: Path
    sdk_cert_path: Path
    sdk_private_key_path: Path
    encryption_cert_path: Optional[Path] = None
    encryption_private_key_path: Optional[Path] = None
    crypto_provider: str = CryptoProviderType.SSM
    ssl_key_index: Optional[str] = None
    en_ssl_key_index: Optional[str] = None


def derive_default_crypto_material(
    crypto_type: Union[CryptoType, int, str], cert_path: Union[str, Path]
) -> CryptoMaterialPaths:
    """
    Default material layout below cert_path for the given scheme. cert_path is joined
    as given, nothing is resolved or checked for existence here.
    """
    crypto_type = CryptoType.parse(crypto_type)
    if cert_path is None or str(cert_path).strip() == "":
        raise ConfigException("load CryptoMaterialConfig failed, certPath must not be empty")
    base = Path(cert_path)

    if crypto_type is CryptoType.ECDSA:
        return CryptoMaterialPaths(
            cert_path=base,
            crypto_type=crypto_type,
            ca_cert_path=base / "ca.crt",
            sdk_cert_path=base / "sdk.crt",
            sdk_private_key_path=base / "sdk.key",
            crypto_provider=CryptoProviderType.SSM,
        )
    elif crypto_type is CryptoType.SM:
        sm_dir = base / SM_CERT_DIR
        return CryptoMaterialPaths(
            cert_path=base,
            crypto_type=crypto_type,
            ca_cert_path=sm_dir / "gmca.crt",
            sdk_cert_path=sm_dir / "gmsdk.crt",
            sdk_private_key_path=sm_dir / "gmsdk.key",
            encryption_cert_path=sm_dir / "gmensdk.crt",
            encryption_private_key_path=sm_dir / "gmensdk.key",
            crypto_provider=CryptoProviderType.SSM,
        )
    else:
        assert_never(crypto_type)


@final
@dataclass(frozen=True)
class MaterialSource:
    """
    A material file and the stream opened over it. The stream can be read once.
    """

    path: Path
    key: str
    _stream: BinaryIO = field(repr=False, compare=False)

    @classmethod
    def open(cls, config_property: ConfigProperty, value: Union[str, Path], key: str) -> MaterialSource:
        path = config_property.to_file_path(value)
        return cls(path=path, key=key, _stream=config_property.to_input_stream(path, key))

    @property
    def closed(self) -> bool:
        return self._stream.closed

    def read(self) -> bytes:
        if self._stream.closed:
            raise MaterialConsumed(self.path)
        with self._stream:
            return self._stream.read()

    def close(self) -> None:
        self._stream.close()


@final
@dataclass(frozen=True)
class CryptoMaterialConfig:
    cert_path: Path
    crypto_type: CryptoType
    ca_cert: MaterialSource
    sdk_cert: MaterialSource
    sdk_private_key: MaterialSource
    encryption_cert: Optional[MaterialSource] = None
    encryption_private_key: Optional[MaterialSource] = None
    crypto_provider: str = CryptoProviderType.SSM
    ssl_key_index: Optional[str] = None
    en_ssl_key_index: Optional[str] = None

    @classmethod
    def load(
        cls,
        root_path: Path,
        crypto_type: Union[CryptoType, int, str],
        filename: Union[str, Path] = "config.yaml",
        overrides: Optional[Dict[str, Any]] = None,
    ) -> CryptoMaterialConfig:
        config_property = ConfigProperty.load(root_path, filename).with_overrides(overrides)
        return resolve_crypto_material(config_property, crypto_type)

    @property
    def ca_cert_path(self) -> Path:
        return self.ca_cert.path

    @property
    def sdk_cert_path(self) -> Path:
        return self.sdk_cert.path

    @property
    def sdk_private_key_path(self) -> Path:
        return self.sdk_private_key.path

    @property
    def encryption_cert_path(self) -> Optional[Path]:
        return None if self.encryption_cert is None else self.encryption_cert.path

    @property
    def encryption_private_key_path(self) -> Optional[Path]:
        return None if self.encryption_private_key is None else self.encryption_private_key.path

    @property
    def uses_hardware_provider(self) -> bool:
        return is_hardware_provider(self.crypto_provider)

    @property
    def paths(self) -> CryptoMaterialPaths:
        return CryptoMaterialPaths(
            cert_path=self.cert_path,
            crypto_type=self.crypto_type,
            ca_cert_path=self.ca_cert_path,
            sdk_cert_path=self.sdk_cert_path,
            sdk_private_key_path=self.sdk_private_key_path,
            encryption_cert_path=self.encryption_cert_path,
            encryption_private_key_path=self.encryption_private_key_path,
            crypto_provider=self.crypto_provider,
            ssl_key_index=self.ssl_key_index,
            en_ssl_key_index=self.en_ssl_key_index,
        )

    def sources(self) -> Iterator[Tuple[str, MaterialSource]]:
        for name, _ in MATERIAL_KEYS:
            source: Optional[MaterialSource] = getattr(self, name)
            if source is not None:
                yield name, source

    def close(self) -> None:
        for _, source in self.sources():
            source.close()

    def __enter__(self) -> CryptoMaterialConfig:
        return self

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc: Optional[BaseException],
        traceback: Optional[TracebackType],
    ) -> None:
        self.close()

    def __str__(self) -> str:
        return (
            f"CryptoMaterialConfig(cert_path={str(self.cert_path)!r}, "
            f"ca_cert_path={str(self.ca_cert_path)!r}, "
            f"sdk_cert_path={str(self.sdk_cert_path)!r}, "
            f"sdk_private_key_path={str(self.sdk_private_key_path)!r}, "
            f"encryption_cert_path={_optional_str(self.encryption_cert_path)}, "
            f"encryption_private_key_path={_optional_str(self.encryption_private_key_path)}, "
            f"crypto_type={self.crypto_type.name})"
        )


def _optional_str(path: Optional[Path]) -> str:
    return "None" if path is None else repr(str(path))


def resolve_crypto_material(
    config_property: ConfigProperty, crypto_type: Union[CryptoType, int, str]
) -> CryptoMaterialConfig:
    """
    Builds the crypto material config from the cryptoMaterial section. Explicit keys
    win over the scheme defaults below certPath. Every material stream is opened
    here, if one of them fails the ones already opened are closed again and the
    error is raised to the caller.
    """
    crypto_type = CryptoType.parse(crypto_type)
    crypto_material = config_property.get_crypto_material()

    cert_path_value = ConfigProperty.get_value(crypto_material, "certPath", DEFAULT_CERT_PATH)
    # a blank certPath would otherwise resolve to the sdk root itself
    if cert_path_value is None or cert_path_value.strip() == "":
        cert_path_value = DEFAULT_CERT_PATH
    cert_path = config_property.to_file_path(cert_path_value)
    defaults = derive_default_crypto_material(crypto_type, cert_path)

    sources: Dict[str, Optional[MaterialSource]] = {}
    with contextlib.ExitStack() as exit_stack:
        for name, key in MATERIAL_KEYS:
            default_path: Optional[Path] = getattr(defaults, f"{name}_path")
            value = ConfigProperty.get_value(
                crypto_material, key, None if default_path is None else str(default_path)
            )
            if value is None:
                # no default for the encryption pair outside of SM
                sources[name] = None
                continue
            source = MaterialSource.open(config_property, value, key)
            exit_stack.callback(source.close)
            sources[name] = source

        crypto_provider = ConfigProperty.get_value(crypto_material, "cryptoProvider", defaults.crypto_provider)
        config = CryptoMaterialConfig(
            cert_path=cert_path,
            crypto_type=crypto_type,
            ca_cert=sources["ca_cert"],  # type: ignore[arg-type]
            sdk_cert=sources["sdk_cert"],  # type: ignore[arg-type]
            sdk_private_key=sources["sdk_private_key"],  # type: ignore[arg-type]
            encryption_cert=sources["encryption_cert"],
            encryption_private_key=sources["encryption_private_key"],
            crypto_provider=crypto_provider,  # type: ignore[arg-type]
            ssl_key_index=ConfigProperty.get_value(crypto_material, "sslKeyIndex", defaults.ssl_key_index),
            en_ssl_key_index=ConfigProperty.get_value(crypto_material, "enSslKeyIndex", defaults.en_ssl_key_index),
        )
        exit_stack.pop_all()

    log.debug(
        f"Load crypto material, ca_cert_path: {config.ca_cert_path}, sdk_cert_path: {config.sdk_cert_path}, "
        f"sdk_private_key_path: {config.sdk_private_key_path}, encryption_cert_path: {config.encryption_cert_path}, "
        f"encryption_private_key_path: {config.encryption_private_key_path}"
    )
    return config
