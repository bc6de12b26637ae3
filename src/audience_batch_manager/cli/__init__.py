"""
Command-line interface for Audience Batch Manager.

Command Categories:
    Configuration:
        - setup: Configure a new profile (spreadsheet, credentials, batch size)
        - list-profiles: Show available profiles
        - unregister-profile: Remove profile configuration

    Audiences:
        - create-audiences: Copy the configured audience once per batch of
            10 destinations and log the audiences created
        - delete-audiences: Delete every audience in the log sheet
        - fetch-destinations: List linked ad accounts in the destinations sheet

    Utilities:
        - parse-url: Show the IDs found in an audience UI url

Environment Requirements:
    - GOOGLE_APPLICATION_CREDENTIALS (service account JSON key), unless the
      profile was set up with --credentials-file or --adc

Example Workflow:
    # 1. Set up a profile pointing to the spreadsheet
    $ audbm -p shop setup --spreadsheet-id 1AbC... --credentials-file key.json

    # 2. Discover the ad accounts linked to your properties
    $ audbm -p shop fetch-destinations

    # 3. Copy the audience to every destination listed in the Config sheet
    $ audbm -p shop create-audiences

    # 4. Remove the copies when no longer needed
    $ audbm -p shop delete-audiences
"""

from .cli import cli

__all__ = [
    'cli',  # Main CLI interface (Click command group)
]
