"""
Shared utilities for Audience Batch Manager.

Submodules:
    clients:     Google API client creation (Analytics, Sheets)
    stores:      Tabular stores (in-memory, CSV workbook, Google Sheets)
    registry:    Profile configuration registry (internal)
    misc:        Internal utilities (internal)
    environment: Environment configuration (internal)

Example Usage:
    import audience_batch_manager as abm

    service = abm.utils.clients.create_analytics_service()
    store = abm.utils.stores.CsvWorkbookStore('./workbook/')
"""

from . import clients  # Client creation utilities
from . import stores   # Tabular stores

__all__ = [
    'clients',  # abm.utils.clients.*
    'stores',   # abm.utils.stores.*
]

# Internal modules not exported:
# - registry (internal profile management)
# - misc (internal utilities)
# - environment (internal environment setup)
