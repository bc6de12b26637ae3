"""
Audience Batch Manager - Copy Google Analytics audiences to many destinations

Google Analytics remarketing audiences can be linked to at most 10 ad
destinations. This package copies an existing audience once per batch of
10 destinations listed in a spreadsheet, logs every audience created back
to the spreadsheet, and deletes them in bulk when no longer needed.

Package Structure:
    audiences: Audience workflow (urls, destinations, API service, manager)
    utils:     Shared utilities (clients, tabular stores)

Example Usage:

    Basic Workflow:
        import audience_batch_manager as abm

        service = abm.audiences.service.AudienceServiceClient(
            abm.utils.clients.create_analytics_service()
        )
        store = abm.utils.stores.CsvWorkbookStore('./workbook/')

        manager = abm.AudienceBatchManager(service, store)
        manager.discover_destinations()
        manager.create_batched_audiences()
        manager.delete_logged_audiences()

    CLI Usage:
        $ audbm -p shop setup --store sheets --spreadsheet-id <id>
        $ audbm -p shop fetch-destinations
        $ audbm -p shop create-audiences
        $ audbm -p shop delete-audiences

Environment Setup:
    Google credentials are read from:
    - GOOGLE_APPLICATION_CREDENTIALS (service account JSON key)
    - or the --credentials-file given at setup

    These can be set via .env files in:
    - Current working directory (.env, .env.local)
    - Project root directory
"""

__version__ = "0.1.0"

# Load environment on package import
from .core.utils.environment import setup_environment
setup_environment()

# Export core API modules
from . import core
audiences = core.audiences
utils = core.utils
AudienceBatchManager = core.AudienceBatchManager

__all__ = [
    '__version__',
    'audiences',             # abm.audiences.*
    'utils',                 # abm.utils.*
    'AudienceBatchManager',  # abm.AudienceBatchManager()
]

# Clean up namespace
del setup_environment
