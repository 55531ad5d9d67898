"""Settings CLI commands for NWF Pay.

Manages settings.json - data directory, profile path, browser, default format.
"""

import click

from nwfpay.sdk import (
    DOCUMENT_FORMATS,
    load_settings,
    set_setting,
    get_settings_path,
    get_profile_path,
    get_data_path,
    find_browser,
)

SETTING_KEYS = ["data_dir", "profile", "chromium_path", "default_format"]


@click.group()
def settings():
    """Manage settings (settings.json).

    Available settings:
    - data_dir: custom data directory path
    - profile: path to profile.yaml
    - chromium_path: headless browser for html-pdf paystubs
    - default_format: 'pdf' or 'html-pdf'
    """
    pass


@settings.command("show")
def settings_show():
    """Show current settings and their values."""
    settings_path = get_settings_path()
    current = load_settings()

    click.echo(f"Settings file: {settings_path}")
    click.echo(f"File exists: {settings_path.exists()}")
    click.echo()

    if not current:
        click.echo("No settings configured (using defaults).")
    else:
        click.echo("Current settings:")
        for key, value in current.items():
            click.echo(f"  {key}: {value}")

    click.echo()
    click.echo("Effective paths:")
    click.echo(f"  data_dir: {get_data_path()}")
    click.echo(f"  profile: {get_profile_path()}")
    click.echo(f"  browser: {find_browser() or '(not found)'}")


@settings.command("set")
@click.argument("key", type=click.Choice(SETTING_KEYS))
@click.argument("value")
def settings_set(key, value):
    """Set KEY to VALUE in settings.json.

    Examples:
        nwf-pay settings set data_dir ~/payroll-data
        nwf-pay settings set default_format html-pdf
    """
    if key == "default_format" and value not in DOCUMENT_FORMATS[:2]:
        raise click.BadParameter(f"default_format must be one of: {', '.join(DOCUMENT_FORMATS[:2])}")

    path = set_setting(key, value)
    click.echo(f"Set {key}: {value}")
    click.echo(f"Saved to: {path}")
