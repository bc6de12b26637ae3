"""
Remarketing audience operations for Audience Batch Manager.

Submodules:
    urls:         Identifiers extraction from Analytics UI urls
    destinations: Destination batching and API/display formatting
    records:      Rows exchanged with the tabular store
    service:      Analytics Management API client wrapper
    manager:      High-level create / delete / discover workflows

Example Usage:
    import audience_batch_manager as abm

    ids = abm.audiences.urls.parse_audience_url(url)
    batches = abm.audiences.destinations.chunk(destinations, 10)
"""

from . import urls
from . import destinations
from . import records
from . import service
from . import manager

__all__ = [
    'urls',          # abm.audiences.urls.*
    'destinations',  # abm.audiences.destinations.*
    'records',       # abm.audiences.records.*
    'service',       # abm.audiences.service.*
    'manager',       # abm.audiences.manager.*
]
