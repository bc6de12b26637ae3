# -*- coding: utf-8 -*-

import logging
from datetime import datetime
from pathlib import Path

import click
import platformdirs

from ..core.audiences.destinations import DESTINATION_BATCH_SIZE
from ..core.audiences.manager import (
    AudienceBatchManager,
    CONFIG_SHEET_NAME,
    LOG_SHEET_NAME,
    DESTINATION_SHEET_NAME,
    URL_NAMED_RANGE,
    SHEET_HEADERS,
)
from ..core.audiences.service import AudienceServiceClient
from ..core.utils.clients import (
    load_credentials,
    create_analytics_service,
    create_sheets_client,
)
from ..core.utils.misc import display_path, ensure_folder, write_yaml
from ..core.utils.registry import get_registry, store_target
from ..core.utils.stores import CsvWorkbookStore, GoogleSheetsStore


PROFILE_FILE_NAME = "AudienceProfile.yaml"
PATH_OPTIONS = ('workbook_folder', 'credentials_file', 'base_folder')
# Options that point the profile to another workbook
TARGET_OPTIONS = ('store', 'spreadsheet_id', 'workbook_folder')

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
GOOGLE_LOGGERS = ("urllib3", "googleapiclient", "google", "gspread")


def setup_logging(verbose=False, quiet=False):
    """
    Configure the root logger for CLI execution.

    Called by the entry point before arguments are parsed and again by the
    CLI group, so later calls replace the earlier configuration.
    """
    if quiet:
        level = logging.WARNING
    elif verbose:
        level = logging.DEBUG
    else:
        level = logging.INFO

    logging.basicConfig(level=level, format=LOG_FORMAT, datefmt=LOG_DATE_FORMAT, force=True)

    # Google client libraries log every request at INFO level
    google_level = logging.NOTSET if verbose else logging.WARNING
    for name in GOOGLE_LOGGERS:
        logging.getLogger(name).setLevel(google_level)


def _validate_positive_integer_callback(ctx, param, value):
    """Validate that the provided value is a positive integer."""
    if value is not None and value <= 0:
        raise click.BadParameter("Value must be a positive integer.")
    return value


#=======================================================================
# Setup Command Utilities
#=======================================================================

def _default_base_folder(profile_name):
    data_dir = platformdirs.user_data_dir("audience-batch-manager", "audience-batch-manager")
    return str(Path(data_dir) / "profiles" / profile_name)


def _describe_option(key, value):
    if value is None:
        return 'not set'
    return display_path(value) if key in PATH_OPTIONS else value


def _profile_changes(existing_config, provided_options):
    """Options whose value differs from the profile, as {option: (old, new)}."""
    return {
        key: (existing_config.get(key), value)
        for key, value in provided_options.items()
        if existing_config.get(key) != value
    }


def _handle_existing_profile_setup(profile_name, existing_config, provided_options, force):
    """Apply the options provided to an existing profile, after confirmation."""
    changes = _profile_changes(existing_config, provided_options)
    if not changes:
        target = store_target(existing_config) or 'not set'
        logging.info(f"No changes detected for profile '{profile_name}' "
                     f"({existing_config['store']}: {target})")
        return

    logging.info(f"Profile '{profile_name}' will be updated:")
    for key, (old, new) in changes.items():
        logging.info(f"  {key}: {_describe_option(key, old)} -> {_describe_option(key, new)}")
    if any(key in changes for key in TARGET_OPTIONS):
        logging.warning("Audiences logged in the current workbook will no longer "
                        "be deleted by 'delete-audiences'. Delete them first if needed.")
    if not force:
        click.confirm(f"Do you want to update profile '{profile_name}'?", abort=True)

    config = {**existing_config, **provided_options}
    _validate_store_options(config)
    _prepare_workbook(config)
    _save_profile(config)
    logging.info(f"Profile '{profile_name}' updated successfully!")


def _handle_new_profile_setup(profile_name, provided_options):
    """
    Handle setup for new profiles. Fills defaults, creates the profile
    configuration file and registers it in the global registry.
    """
    config = {
        "profile": profile_name,
        "store": "sheets",
        "spreadsheet_id": None,
        "workbook_folder": None,
        "credentials_file": None,
        "credentials": "service_account",
        "base_folder": _default_base_folder(profile_name),
        "config_sheet": CONFIG_SHEET_NAME,
        "log_sheet": LOG_SHEET_NAME,
        "destinations_sheet": DESTINATION_SHEET_NAME,
        "url_named_range": URL_NAMED_RANGE,
        "batch_size": DESTINATION_BATCH_SIZE,
        "max_attempts": 1,
        "created_at": datetime.now().isoformat(),
    }
    audience_url = provided_options.pop('audience_url', None)
    config.update(provided_options)

    if config['store'] == 'csv' and not config['workbook_folder']:
        config['workbook_folder'] = str(Path(config['base_folder']) / "workbook")

    _validate_store_options(config)
    _prepare_workbook(config, audience_url)

    _save_profile(config)

    logging.info(f"Setup complete! You can now run other commands for profile '{profile_name}'")
    logging.info("Next steps:")
    logging.info(f"1. List destinations: audbm -p {profile_name} fetch-destinations")
    logging.info(f"2. Fill the '{config['config_sheet']}' sheet with the audience url and destinations")
    logging.info(f"3. Create audiences: audbm -p {profile_name} create-audiences")


def _validate_store_options(config):
    if config['store'] == 'sheets' and not config.get('spreadsheet_id'):
        logging.error("Google Sheets profiles require --spreadsheet-id.")
        raise SystemExit(1)
    if config['store'] == 'csv' and not config.get('workbook_folder'):
        logging.error("CSV profiles require --workbook-folder.")
        raise SystemExit(1)


def _prepare_workbook(config, audience_url=None):
    """Create the CSV workbook sheets when the profile uses a CSV store."""
    if config['store'] != 'csv':
        if audience_url:
            logging.warning("--audience-url is only stored for CSV workbooks. "
                            f"Set the '{config['url_named_range']}' named range "
                            "in the spreadsheet instead.")
        return

    store = CsvWorkbookStore(config['workbook_folder'])
    headers = {
        config['config_sheet']: SHEET_HEADERS[CONFIG_SHEET_NAME],
        config['log_sheet']: SHEET_HEADERS[LOG_SHEET_NAME],
        config['destinations_sheet']: SHEET_HEADERS[DESTINATION_SHEET_NAME],
    }
    store.init_workbook(headers, named_ranges={config['url_named_range']: ''})
    if audience_url:
        store.set_named_value(config['url_named_range'], audience_url)
    logging.info(f"Workbook ready at {display_path(config['workbook_folder'])}")


def _save_profile(config):
    """Write the profile file in the profile's base folder and register it."""
    config['updated_at'] = datetime.now().isoformat()
    config_file = ensure_folder(config['base_folder'], "Base folder") / PROFILE_FILE_NAME
    write_yaml(config, config_file)
    get_registry().register_profile(config, config_file)
    logging.info(f"Profile saved to {display_path(config_file)}")



#=======================================================================
# Audience Commands Utilities
#=======================================================================

def _create_store(config, credentials=None):
    """Open the tabular store a profile points to."""
    if config['store'] == 'csv':
        return CsvWorkbookStore(config['workbook_folder'])
    client = create_sheets_client(credentials=credentials)
    return GoogleSheetsStore.open(client, config['spreadsheet_id'])


def _create_manager(config):
    """Build the audience manager of a profile, creating the Google clients it needs."""
    credentials = load_credentials(
        config.get('credentials_file'), adc=config.get('credentials') == 'adc'
    )
    service = AudienceServiceClient(
        create_analytics_service(credentials=credentials),
        max_attempts=config.get('max_attempts', 1)
    )
    store = _create_store(config, credentials)
    return AudienceBatchManager(
        service=service,
        store=store,
        batch_size=config.get('batch_size', DESTINATION_BATCH_SIZE),
        config_sheet=config.get('config_sheet', CONFIG_SHEET_NAME),
        log_sheet=config.get('log_sheet', LOG_SHEET_NAME),
        destinations_sheet=config.get('destinations_sheet', DESTINATION_SHEET_NAME),
        url_named_range=config.get('url_named_range', URL_NAMED_RANGE),
    )
