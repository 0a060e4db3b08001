from __future__ import annotations

from pathlib import Path

import click

from bcos_sdk.config.config_property import config_path_for_filename, create_default_sdk_config


@click.command("init", help="Create or overwrite the default SDK config file")
@click.option("--force", "-f", is_flag=True, help="Overwrite an existing config file")
@click.pass_context
def init_cmd(ctx: click.Context, force: bool) -> None:
    root_path: Path = ctx.obj["root_path"]
    path = config_path_for_filename(root_path, "config.yaml")
    if path.exists() and not force:
        print(f"{path} already exists, use --force to overwrite it")
        return
    create_default_sdk_config(root_path)
    print(f"Wrote default config to {path}")
    print(f"Place the certificates below {root_path / 'conf'} or set cryptoMaterial.certPath")
