from __future__ import annotations

import sys
from pathlib import Path

import pytest
from click.testing import CliRunner, Result

from bcos_sdk._tests.util.misc import write_default_material, write_material
from bcos_sdk.cmds.bcos import cli
from bcos_sdk.config.config_property import config_path_for_filename, load_config
from bcos_sdk.config.crypto_type import CryptoType


def run_bcos(root_path: Path, *args: str) -> Result:
    return CliRunner().invoke(
        cli,
        [
            "--root-path",
            str(root_path),
            *args,
        ],
    )


def test_init(tmp_sdk_root: Path) -> None:
    result = run_bcos(tmp_sdk_root, "init")

    assert result.exit_code == 0
    assert "Wrote default config" in result.output
    assert load_config(tmp_sdk_root, "config.yaml")["cryptoMaterial"]["certPath"] == "conf"


def test_init_keeps_existing_config(root_path_populated_with_config: Path) -> None:
    path = config_path_for_filename(root_path_populated_with_config, "config.yaml")
    path.write_text("cryptoMaterial: {certPath: mine}\n")

    result = run_bcos(root_path_populated_with_config, "init")
    assert result.exit_code == 0
    assert "already exists" in result.output
    assert load_config(root_path_populated_with_config, "config.yaml")["cryptoMaterial"]["certPath"] == "mine"

    result = run_bcos(root_path_populated_with_config, "init", "--force")
    assert result.exit_code == 0
    assert load_config(root_path_populated_with_config, "config.yaml")["cryptoMaterial"]["certPath"] == "conf"


def test_show_ecdsa(root_path_populated_with_config: Path) -> None:
    write_default_material(root_path_populated_with_config, CryptoType.ECDSA)

    result = run_bcos(root_path_populated_with_config, "crypto-material", "show")

    assert result.exit_code == 0, result.output
    assert "Crypto type:             ECDSA" in result.output
    assert f"CA cert:                 {Path('conf/ca.crt')}" in result.output
    assert f"SDK private key:         {Path('conf/sdk.key')}" in result.output
    assert "Encryption cert:         -" in result.output
    assert "Crypto provider:         ssm" in result.output
    assert "SSL key index" not in result.output


def test_show_sm_with_overrides(root_path_populated_with_config: Path) -> None:
    write_default_material(root_path_populated_with_config, CryptoType.SM)
    custom_ca = write_material(root_path_populated_with_config / "custom" / "ca.crt", 0o644)

    result = run_bcos(
        root_path_populated_with_config,
        "crypto-material",
        "show",
        "--crypto-type",
        "SM",
        "--set",
        "caCert=custom/ca.crt",
        "--set",
        "cryptoProvider=hsm",
        "--set",
        "sslKeyIndex=3",
    )

    assert result.exit_code == 0, result.output
    assert "Crypto type:             SM" in result.output
    assert f"CA cert:                 {custom_ca.relative_to(root_path_populated_with_config)}" in result.output
    assert f"Encryption private key:  {Path('conf/gm/gmensdk.key')}" in result.output
    assert "Crypto provider:         hsm" in result.output
    assert "SSL key index:           3" in result.output
    assert "Encryption key index:    -" in result.output


def test_show_missing_material(root_path_populated_with_config: Path) -> None:
    result = run_bcos(root_path_populated_with_config, "crypto-material", "show", "-t", "sm")

    assert result.exit_code == 1
    assert "Failed to load crypto material" in result.output
    assert "'caCert'" in result.output


def test_show_missing_config(tmp_sdk_root: Path) -> None:
    result = run_bcos(tmp_sdk_root, "crypto-material", "show")

    assert result.exit_code == 1
    assert "Config not found" in result.output


@pytest.mark.parametrize("override", ["caCert", "=value"])
def test_show_rejects_malformed_override(root_path_populated_with_config: Path, override: str) -> None:
    result = run_bcos(root_path_populated_with_config, "crypto-material", "show", "--set", override)

    assert result.exit_code == 2
    assert "expected KEY=VALUE" in result.output


def test_show_rejects_unknown_scheme(root_path_populated_with_config: Path) -> None:
    result = run_bcos(root_path_populated_with_config, "crypto-material", "show", "--crypto-type", "rsa")

    assert result.exit_code == 2


@pytest.mark.skipif(sys.platform in ("win32", "cygwin"), reason="permissions are not checked on Windows")
def test_check(root_path_populated_with_config: Path) -> None:
    write_default_material(root_path_populated_with_config, CryptoType.SM)

    result = run_bcos(root_path_populated_with_config, "crypto-material", "check", "-t", "sm")
    assert result.exit_code == 0, result.output
    assert "Crypto material permissions are correct" in result.output

    key_path = root_path_populated_with_config / "conf" / "gm" / "gmensdk.key"
    key_path.chmod(0o644)

    result = run_bcos(root_path_populated_with_config, "crypto-material", "check", "-t", "sm")
    assert result.exit_code == 1
    assert f"Permissions 0644 for '{key_path}' are too open" in result.output
    assert "One or more crypto material files were found with permission issues." in result.output


def test_show_override_below_regular_file(root_path_populated_with_config: Path) -> None:
    write_default_material(root_path_populated_with_config, CryptoType.ECDSA)
    (root_path_populated_with_config / "file").write_bytes(b"not a directory")

    result = run_bcos(root_path_populated_with_config, "crypto-material", "show", "--set", "caCert=file/ca.crt")

    assert result.exit_code == 1
    assert "Failed to load crypto material" in result.output
    assert "'caCert'" in result.output
