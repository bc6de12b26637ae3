# -*- coding: utf-8 -*-

import sys
import json
import click
import logging
from pathlib import Path

from ..core.audiences.manager import AudienceDeletionError
from ..core.audiences.urls import parse_audience_url
from ..core.utils.registry import get_registry
from ..core.utils.misc import display_path
from ..core.utils.environment import validate_required_env_vars
from .utils import (
    setup_logging,
    _validate_positive_integer_callback,
    _handle_existing_profile_setup,
    _handle_new_profile_setup,
    _create_manager,
)


# Commands that work without a loaded profile
NO_PROFILE_COMMANDS = ['setup', 'list-profiles', 'unregister-profile', 'parse-url']
NO_NAME_COMMANDS = ['list-profiles', 'unregister-profile', 'parse-url']


@click.group()
@click.option(
    '-v', '--verbose', is_flag=True,
    help='Enable verbose (DEBUG) logging'
)
@click.option(
    '-q', '--quiet', is_flag=True,
    help='Only show warnings and errors'
)
@click.option(
    '-p', '--profile', 'profile_name', type=str,
    help='Name of the profile to work with.'
)
@click.pass_context
def cli(ctx, verbose, quiet, profile_name):
    """
    Audience Batch Manager CLI - Copy a Google Analytics audience to more
    than 10 destinations.

    Google Analytics audiences can only be linked to 10 destinations. This
    CLI copies an audience once per batch of 10 destinations listed in a
    spreadsheet, logs the audiences created and deletes them in bulk.

    \b
    Ensure Google credentials are available:
    - GOOGLE_APPLICATION_CREDENTIALS (service account JSON key), or
    - --credentials-file when running 'setup'
    """
    setup_logging(verbose=verbose, quiet=quiet)

    ctx.ensure_object(dict)
    ctx.obj['profile_name'] = profile_name

    # Skip checks if --help/-h is requested
    if any(arg in sys.argv for arg in ['--help', '-h']):
        return

    if not profile_name and ctx.invoked_subcommand not in NO_NAME_COMMANDS:
        logging.error("Please specify a profile name using the -p or --profile option.")
        raise click.UsageError("Profile name is required except for "
                               f"{', '.join(repr(c) for c in NO_NAME_COMMANDS)} commands.")

    if ctx.invoked_subcommand in NO_PROFILE_COMMANDS:
        return

    registry = get_registry()
    config = registry.get_profile_config(profile_name)
    if not config:
        logging.error(f"No configuration found for profile '{profile_name}'. "
                      f"Please run 'audbm --profile {profile_name} setup' "
                      "first, or use 'audbm list-profiles' to see "
                      "available profiles.")
        raise SystemExit(1)
    ctx.obj['config'] = config

    missing_vars = validate_required_env_vars(config)
    if missing_vars:
        logging.error(f"Missing required environment variables: {missing_vars}")
        logging.info("Please set these environment variables or create a "
                     ".env file at the repo root directory with:")
        for var in missing_vars:
            logging.info(f"  {var}=/path/to/service-account.json")
        logging.info("Or re-run 'setup' with --credentials-file or --adc.")
        raise SystemExit(1)

    try:
        ctx.obj['manager'] = _create_manager(config)
    except Exception as e:
        logging.error(f"Error creating Google API clients: {e}")
        raise SystemExit(1)


@cli.command()
@click.option(
    '--store', type=click.Choice(['sheets', 'csv'], case_sensitive=False), default=None,
    help=('Where the config, log and destinations sheets live: a Google '
          'Sheets spreadsheet or a local folder of CSV files. '
          'For new profiles, default is "sheets".')
)
@click.option(
    '--spreadsheet-id', type=str, default=None,
    help='ID of the Google Sheets spreadsheet. Required for "sheets" profiles.'
)
@click.option(
    '--workbook-folder', type=click.Path(file_okay=False), default=None,
    help=('Folder holding the CSV workbook. '
          'For new "csv" profiles, default is <base-folder>/workbook/')
)
@click.option(
    '--audience-url', type=str, default=None,
    help='Analytics UI url of the audience to copy (CSV workbooks only).'
)
@click.option(
    '--credentials-file', type=click.Path(exists=True, dir_okay=False), default=None,
    help=('Service account JSON key. If not provided, '
          'GOOGLE_APPLICATION_CREDENTIALS is used.')
)
@click.option(
    '--adc/--no-adc', default=None,
    help='Use application default credentials when no key file is available.'
)
@click.option(
    '--base-folder', type=click.Path(file_okay=False), default=None,
    help='Folder where the profile configuration is stored.'
)
@click.option(
    '--batch-size', type=int, default=None,
    callback=_validate_positive_integer_callback,
    help='Destinations per audience. For new profiles, default is 10.'
)
@click.option(
    '--max-attempts', type=int, default=None,
    callback=_validate_positive_integer_callback,
    help=('Attempts per API request on transient errors. '
          'For new profiles, default is 1 (no retries).')
)
@click.option(
    '--force', is_flag=True, default=False,
    help='Skip confirmation prompts when updating existing configurations.'
)
@click.pass_context
def setup(ctx, store, spreadsheet_id, workbook_folder, audience_url,
          credentials_file, adc, base_folder, batch_size, max_attempts, force):
    """
    Setup a new profile or update an existing one.

    For existing profiles, omitted options keep their current values.

    \b
    Examples:
        # Google Sheets profile
        audbm -p shop setup --spreadsheet-id 1AbC... \\
            --credentials-file ~/keys/analytics.json

        # Local CSV workbook profile
        audbm -p shop-local setup --store csv \\
            --workbook-folder ./workbook/ \\
            --audience-url "https://analytics.google.com/analytics/web/#/a1w2p3/..."

        # Update only the batch size
        audbm -p shop setup --batch-size 5
    \b
    """
    profile_name = ctx.obj['profile_name']
    provided_options = {
        'store': store.lower() if store else None,
        'spreadsheet_id': spreadsheet_id,
        'workbook_folder': workbook_folder,
        'credentials_file': credentials_file,
        'credentials': None if adc is None else ('adc' if adc else 'service_account'),
        'base_folder': base_folder,
        'batch_size': batch_size,
        'max_attempts': max_attempts,
    }
    provided_options = {k: v for k, v in provided_options.items() if v is not None}
    for key in ('workbook_folder', 'credentials_file', 'base_folder'):
        if key in provided_options:
            provided_options[key] = str(Path(provided_options[key]).expanduser().resolve())

    existing_config = get_registry().get_profile_config(profile_name)
    if existing_config:
        if audience_url:
            logging.warning("--audience-url is ignored for existing profiles. "
                            "Edit the workbook named ranges instead.")
        return _handle_existing_profile_setup(
            profile_name, existing_config, provided_options, force
        )

    if audience_url:
        provided_options['audience_url'] = audience_url
    return _handle_new_profile_setup(profile_name, provided_options)


@cli.command()
def list_profiles():
    """List all registered profiles."""
    profiles = get_registry().list_profiles()

    if not profiles:
        logging.info("No profiles registered. Use 'setup' command to create a profile.")
        return

    logging.info(f"Found {len(profiles)} registered profiles:")
    logging.info("")

    for profile in profiles:
        target = profile.target or 'not set'
        if profile.store == 'csv' and profile.target:
            target = display_path(target)
        logging.info(f"  {profile.name}")
        logging.info(f"    Store: {profile.store} ({target})")
        if profile.config_exists:
            logging.info(f"    Profile file: {display_path(profile.config_path)}")
        else:
            logging.warning(f"    Profile file missing: {display_path(profile.config_path)}")
        logging.info(f"    Updated: {profile.updated_at[:19].replace('T', ' ')}")
        logging.info("")


@cli.command()
@click.argument('profile_name', required=False)
@click.option(
    '--cleanup-orphaned', is_flag=True,
    help='Remove profiles whose config files no longer exist.'
)
@click.pass_context
def unregister_profile(ctx, profile_name, cleanup_orphaned):
    """Remove a profile from the global registry."""
    registry = get_registry()
    profile_name = profile_name or ctx.obj.get('profile_name')

    if cleanup_orphaned:
        orphaned = registry.cleanup_orphaned_profiles()
        if orphaned:
            logging.info(f"Removed {len(orphaned)} orphaned profiles: {orphaned}")
        else:
            logging.info("No orphaned profiles found.")
        return

    if not profile_name:
        logging.error("Please specify a profile name to unregister, or use --cleanup-orphaned")
        raise SystemExit(1)

    if registry.unregister_profile(profile_name):
        logging.info(f"Successfully unregistered profile '{profile_name}'")
        logging.info("Note: This only removes the registry entry, not the actual files.")
    else:
        logging.error(f"Profile '{profile_name}' not found in registry")
        raise SystemExit(1)


@cli.command()
@click.argument('url')
def parse_url(url):
    """Show the IDs found in an Analytics audience UI URL."""
    ids = parse_audience_url(url)
    click.echo(json.dumps(ids._asdict(), indent=2))
    missing = ids.missing()
    if missing:
        logging.error(f"Could not extract {', '.join(missing)} from the url.")
        raise SystemExit(1)


@cli.command()
@click.pass_context
def create_audiences(ctx):
    """
    Copy the configured audience once per batch of destinations.

    Reads the audience url and destinations from the config sheet and logs
    each audience created to the log sheet. The log sheet is cleared first.
    """
    manager = ctx.obj['manager']
    try:
        records = manager.create_batched_audiences()
    except Exception as e:
        logging.error(f"Audience creation aborted: {e}")
        created = _count_logged_audiences(manager)
        if created:
            logging.warning(f"{created} audiences were created before the failure. "
                            "They remain logged and can be removed with 'delete-audiences'.")
        raise SystemExit(1)

    logging.info(f"Created {len(records)} audiences:")
    for record in records:
        logging.info(f"  {record.audience_id}  {record.name}  [{record.destinations}]")


def _count_logged_audiences(manager):
    try:
        return len(manager.get_logged_audiences())
    except Exception as e:
        logging.debug(f"Could not read the log sheet: {e}")
        return 0


@cli.command()
@click.option(
    '-y', '--yes', is_flag=True, default=False,
    help='Delete without asking for confirmation.'
)
@click.pass_context
def delete_audiences(ctx, yes):
    """
    Delete every audience listed in the log sheet and clear it.

    WARNING:
      Audiences are deleted from Google Analytics. This cannot be undone.
    """
    manager = ctx.obj['manager']
    records = manager.get_logged_audiences()
    if not records:
        logging.info("No audiences found in the log sheet.")
        return

    logging.info(f"{len(records)} audiences will be deleted:")
    for record in records:
        logging.info(f"  {record.audience_id}  {record.name}")
    if not yes:
        click.confirm("Do you want to delete them?", abort=True)

    try:
        manager.delete_logged_audiences()
    except AudienceDeletionError as e:
        logging.error(str(e))
        for record, error in e.failures:
            logging.error(f"  {record.account_id}/{record.property_id}/{record.audience_id}: {error}")
        raise SystemExit(1)


@cli.command()
@click.pass_context
def fetch_destinations(ctx):
    """List the ad accounts linked to every accessible web property in the destinations sheet."""
    manager = ctx.obj['manager']
    try:
        catalog = manager.discover_destinations()
    except Exception as e:
        logging.error(f"Fetching destinations failed: {e}")
        raise SystemExit(1)

    for row in catalog:
        logging.info(f"  {row.customer_id}  {row.property_name} ({row.property_id})")
