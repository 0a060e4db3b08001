from __future__ import annotations

from pathlib import Path
from typing import Optional

import click

from bcos_sdk import __version__
from bcos_sdk.cmds.crypto_material import crypto_material_cmd
from bcos_sdk.cmds.init import init_cmd
from bcos_sdk.util.default_root import DEFAULT_ROOT_PATH, resolve_root_path

CONTEXT_SETTINGS = dict(help_option_names=["-h", "--help"])


@click.group(
    help=f"\n  Manage the BCOS SDK configuration ({__version__})\n",
    epilog="Try 'bcos init' or 'bcos crypto-material show --crypto-type sm'",
    context_settings=CONTEXT_SETTINGS,
)
@click.option(
    "--root-path",
    default=None,
    help=f"Config file root [default: {DEFAULT_ROOT_PATH}]",
    type=click.Path(file_okay=False),
)
@click.pass_context
def cli(ctx: click.Context, root_path: Optional[str]) -> None:
    ctx.ensure_object(dict)
    ctx.obj["root_path"] = resolve_root_path(override=None if root_path is None else Path(root_path))


cli.add_command(init_cmd)
cli.add_command(crypto_material_cmd)


def main() -> None:
    cli()  # pylint: disable=no-value-for-parameter


if __name__ == "__main__":
    main()
