"""
Core functionality for Audience Batch Manager.

Architecture:
    audiences/  - Audience copy workflow
      ├── urls/         - UI url parsing
      ├── destinations/ - Batching and formatting of destinations
      ├── records/      - Log and catalog records
      ├── service/      - Analytics Management API wrapper
      └── manager/      - High-level orchestration

    utils/      - Shared utilities and infrastructure
      ├── clients/     - Google API client creation
      ├── stores/      - Tabular stores
      ├── registry/    - Profile configuration management (internal)
      ├── misc/        - General utilities (internal)
      └── environment/ - Environment setup (internal)
"""

from . import audiences
from . import utils

from .audiences.manager import AudienceBatchManager

__all__ = [
    'audiences',             # Audience copy operations
    'utils',                 # Essential utilities and infrastructure
    'AudienceBatchManager',  # High-level orchestration interface
]
