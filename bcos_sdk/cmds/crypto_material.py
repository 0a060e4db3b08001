from __future__ import annotations

import sys
from pathlib import Path
from typing import Any, Dict, Optional, Sequence

import click

from bcos_sdk.config.config_property import ConfigProperty
from bcos_sdk.config.crypto_material import CryptoMaterialConfig, resolve_crypto_material
from bcos_sdk.util.errors import ConfigException
from bcos_sdk.util.material_check import check_material_permissions, octal_mode_string
from bcos_sdk.util.path import shorten_material_path
from bcos_sdk.util.sdk_logging import initialize_logging


def parse_overrides(ctx: click.Context, param: click.Parameter, values: Sequence[str]) -> Dict[str, Any]:
    overrides: Dict[str, Any] = {}
    for value in values:
        key, sep, override = value.partition("=")
        if sep == "" or key == "":
            raise click.BadParameter(f"expected KEY=VALUE, got {value!r}", ctx=ctx, param=param)
        overrides[key] = override
    return overrides


def load_crypto_material(
    root_path: Path, crypto_type: str, config_filename: str, overrides: Dict[str, Any], verbose: bool
) -> CryptoMaterialConfig:
    try:
        config_property = ConfigProperty.load(root_path, config_filename).with_overrides(overrides)
        if verbose:
            initialize_logging(
                "bcos_cli", {**config_property.logging, "log_stdout": True, "log_level": "DEBUG"}, root_path
            )
        return resolve_crypto_material(config_property, crypto_type)
    except ConfigException as e:
        print(f"Failed to load crypto material: {e}", file=sys.stderr)
        sys.exit(1)


def format_path(path: Optional[Path], root_path: Path) -> str:
    if path is None:
        return "-"
    return str(shorten_material_path(path, root_path))


@click.group("crypto-material", help="Inspect the certificates and keys used by the SDK")
def crypto_material_cmd() -> None:
    pass


def crypto_material_options(func: Any) -> Any:
    func = click.option(
        "--verbose", "-v", is_flag=True, help="Log the resolution steps to stdout", default=False
    )(func)
    func = click.option(
        "--set",
        "overrides",
        multiple=True,
        callback=parse_overrides,
        help="Override a cryptoMaterial key, e.g. --set caCert=/etc/ssl/ca.crt",
        metavar="KEY=VALUE",
    )(func)
    func = click.option(
        "--config", "config_filename", default="config.yaml", show_default=True, help="Config file name"
    )(func)
    func = click.option(
        "--crypto-type",
        "-t",
        type=click.Choice(["ecdsa", "sm"], case_sensitive=False),
        default="ecdsa",
        show_default=True,
        help="Cryptographic scheme selecting the default file layout",
    )(func)
    return func


@crypto_material_cmd.command("show", help="Resolve and print the crypto material locations")
@crypto_material_options
@click.pass_context
def show_cmd(
    ctx: click.Context, crypto_type: str, config_filename: str, overrides: Dict[str, Any], verbose: bool
) -> None:
    root_path: Path = ctx.obj["root_path"]
    with load_crypto_material(root_path, crypto_type, config_filename, overrides, verbose) as config:
        paths = config.paths
        print(f"Crypto type:             {paths.crypto_type.name}")
        print(f"Cert path:               {format_path(paths.cert_path, root_path)}")
        print(f"CA cert:                 {format_path(paths.ca_cert_path, root_path)}")
        print(f"SDK cert:                {format_path(paths.sdk_cert_path, root_path)}")
        print(f"SDK private key:         {format_path(paths.sdk_private_key_path, root_path)}")
        print(f"Encryption cert:         {format_path(paths.encryption_cert_path, root_path)}")
        print(f"Encryption private key:  {format_path(paths.encryption_private_key_path, root_path)}")
        print(f"Crypto provider:         {paths.crypto_provider}")
        if config.uses_hardware_provider:
            print(f"SSL key index:           {paths.ssl_key_index or '-'}")
            print(f"Encryption key index:    {paths.en_ssl_key_index or '-'}")


@crypto_material_cmd.command("check", help="Check the permissions of the crypto material files")
@crypto_material_options
@click.pass_context
def check_cmd(
    ctx: click.Context, crypto_type: str, config_filename: str, overrides: Dict[str, Any], verbose: bool
) -> None:
    root_path: Path = ctx.obj["root_path"]
    with load_crypto_material(root_path, crypto_type, config_filename, overrides, verbose) as config:
        invalid = check_material_permissions(config.paths)

    if len(invalid) == 0:
        print("Crypto material permissions are correct")
        return
    for path, mode in invalid:
        print(f"Permissions {octal_mode_string(mode)} for '{path}' are too open")
    print("One or more crypto material files were found with permission issues.")
    sys.exit(1)
