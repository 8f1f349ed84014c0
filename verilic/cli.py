"""
Command-line interface for verilic.
"""

from __future__ import annotations

import json
from pathlib import Path

import click

from verilic.common.config import Config
from verilic.common.exceptions import FieldNotFoundError
from verilic.common.logging_utils import setup_logger
from verilic.license import SiteLicense

license_file_option = click.option(
    "--license-file",
    default=None,
    type=click.Path(dir_okay=False),
    help="License file to check (default: from VERILIC_LICENSE_FILE env)",
)
public_key_option = click.option(
    "--public-key",
    default=None,
    type=click.Path(dir_okay=False),
    help="PEM public key (default: from VERILIC_PUBLIC_KEY_FILE env)",
)


def _load_license(license_file: str | None, public_key: str | None) -> SiteLicense:
    config = Config()
    if license_file:
        config.LICENSE_FILE_PATH = Path(license_file)
    if public_key:
        config.PUBLIC_KEY_PATH = Path(public_key)
    setup_logger(config.LOG_LEVEL)
    return SiteLicense.from_config(config)


@click.group()
def cli() -> None:
    """Verilic license verification CLI"""


@cli.command()
@license_file_option
@public_key_option
@click.option(
    "--sites",
    default=None,
    type=int,
    help="Also check that a site can be added when this many are defined",
)
@click.option("--json", "as_json", is_flag=True, help="Print the status as JSON")
def check(
    license_file: str | None,
    public_key: str | None,
    sites: int | None,
    as_json: bool,  # noqa: FBT001
) -> None:
    """Check that a license is valid"""
    lic = _load_license(license_file, public_key)
    status = lic.status()
    ok = status.is_valid
    can_add = None
    if sites is not None:
        try:
            can_add = lic.can_add_sites(sites)
        except FieldNotFoundError as err:
            raise click.ClickException(str(err)) from err
        ok = ok and can_add

    if as_json:
        output = status.model_dump(mode="json")
        if can_add is not None:
            output["can_add_sites"] = can_add
        click.echo(json.dumps(output, indent=2))
    else:
        click.echo(f"License: {lic.license_file}")
        click.echo(f"Valid: {status.is_valid}")
        click.echo(f"Signed: {status.is_signed}")
        if can_add is not None:
            click.echo(f"Can add sites: {can_add}")
        for kind, message in status.errors.items():
            click.echo(f"{kind.value}: {message}")

    if not ok:
        raise click.exceptions.Exit(1)


@cli.command()
@license_file_option
@public_key_option
def show(license_file: str | None, public_key: str | None) -> None:
    """Print the fields stored in a license"""
    lic = _load_license(license_file, public_key)
    fields = dict(lic.fields())
    if not fields:
        for kind, message in lic.errors().items():
            click.echo(f"{kind.value}: {message}", err=True)
        raise click.exceptions.Exit(1)
    click.echo(json.dumps(fields, indent=2, sort_keys=True))


if __name__ == "__main__":
    cli()
