# -*- coding: utf-8 -*-

import copy
import logging
from typing import List

from tqdm.auto import tqdm

from ..utils.stores import TabularStore
from .destinations import (
    DESTINATION_BATCH_SIZE,
    chunk,
    read_destinations,
    to_display_string,
    to_wire_format,
)
from .records import CatalogRow, LogRecord
from .service import AudienceServiceClient
from .urls import parse_audience_url


URL_NAMED_RANGE = 'gaAudienceURL'
CONFIG_SHEET_NAME = 'Config'
LOG_SHEET_NAME = 'Log'
DESTINATION_SHEET_NAME = 'Destinations'

DESTINATIONS_RANGE = 'B2:C'
LOG_SHEET_RANGE = 'A2:Z'
DESTINATION_LOG_RANGE = 'A2:Z'

# Header rows used when initialising a workbook
SHEET_HEADERS = {
    CONFIG_SHEET_NAME: ['Audience URL', 'Linked Account ID', 'Type'],
    LOG_SHEET_NAME: ['Audience ID', 'Account ID', 'Web Property ID', 'Name',
                     'Segment', 'Destinations', 'Link'],
    DESTINATION_SHEET_NAME: ['Customer ID', 'Kind', 'Web Property Name',
                             'Web Property ID'],
}


class AudienceDeletionError(RuntimeError):
    """Raised when some of the logged audiences could not be deleted."""

    def __init__(self, failures: List[tuple]):
        self.failures = failures  # (LogRecord, exception) pairs
        ids = [record.audience_id for record, _ in failures]
        super().__init__(f"Failed to delete {len(failures)} audience(s): {ids}")


class AudienceBatchManager:
    """
    Copy a Google Analytics remarketing audience to more destinations than
    a single audience can be linked to.

    The source audience UI url and the destinations are read from the
    config sheet of a tabular store; every audience created is logged to
    the log sheet so it can be deleted later on.
    """

    def __init__(
        self,
        service: AudienceServiceClient,
        store: TabularStore,
        batch_size: int = DESTINATION_BATCH_SIZE,
        config_sheet: str = CONFIG_SHEET_NAME,
        log_sheet: str = LOG_SHEET_NAME,
        destinations_sheet: str = DESTINATION_SHEET_NAME,
        url_named_range: str = URL_NAMED_RANGE
    ):
        if batch_size <= 0:
            raise ValueError(f"batch_size must be a positive integer, got {batch_size}.")
        self.service = service
        self.store = store
        self.batch_size = batch_size
        self.config_sheet = config_sheet
        self.log_sheet = log_sheet
        self.destinations_sheet = destinations_sheet
        self.url_named_range = url_named_range

    def get_source_url(self) -> str:
        return self.store.get_named_value(self.url_named_range)

    def get_destinations(self):
        rows = self.store.read(self.config_sheet, DESTINATIONS_RANGE)
        return read_destinations(rows)

    def get_source_audience(self, source_url: str) -> dict:
        """
        Fetch the audience a UI url points to.

        Raises:
            ValueError: If the url lacks any of the required IDs.
            LookupError: If no web property of the account matches the url.
        """
        ids = parse_audience_url(source_url)
        missing = ids.missing()
        if missing:
            raise ValueError(
                f"Could not extract {', '.join(missing)} from audience url: {source_url!r}"
            )

        web_property = self.service.find_property(ids.account_id, ids.internal_property_id)
        if web_property is None:
            raise LookupError(
                f"No web property with internal ID {ids.internal_property_id} "
                f"found in account {ids.account_id}"
            )

        return self.service.get_audience(ids.account_id, web_property['id'], ids.audience_id)

    @staticmethod
    def build_audience_copy(audience: dict, batch_number: int, batch, name: str) -> dict:
        """Copy of `audience` renamed for its batch and linked to the batch destinations."""
        audience_copy = copy.deepcopy(audience)
        audience_copy['name'] = f"{name}: v{batch_number}"
        audience_copy['linkedAdAccounts'] = to_wire_format(batch)
        return audience_copy

    def create_batched_audiences(self) -> List[LogRecord]:
        """
        Create one copy of the source audience per batch of destinations.

        Creation stops at the first failing batch: audiences created before
        it stay in place and remain logged.

        Returns:
            list[LogRecord]: Records logged for the audiences created.
        """
        logging.info("Running audience creator...")
        self.store.clear(self.log_sheet, LOG_SHEET_RANGE)

        source_url = self.get_source_url()
        audience = self.get_source_audience(source_url)
        audience_name = audience['name']
        logging.info(f"Using base audience: {audience_name}")
        logging.debug(f"Base audience: {audience}")

        destinations = self.get_destinations()
        batches = chunk(destinations, self.batch_size)
        logging.info(f"Creating {len(batches)} audiences for {len(destinations)} destinations")

        records = []
        for batch_number, batch in enumerate(tqdm(batches, desc="Creating audiences"), start=1):
            audience_copy = self.build_audience_copy(audience, batch_number, batch, audience_name)
            logging.debug(f"Creating audience: {audience_copy}")
            response = self.service.create_audience(
                audience_copy['accountId'], audience_copy['webPropertyId'], audience_copy
            )
            logging.info(f"Created audience '{response.get('name')}' with ID: {response['id']}")

            record = LogRecord.from_response(response, to_display_string(batch), source_url)
            self.store.append_row(self.log_sheet, record.to_row())
            records.append(record)

        self.store.activate(self.log_sheet)
        logging.info("Done.")
        return records

    def get_logged_audiences(self) -> List[LogRecord]:
        rows = self.store.read(self.log_sheet, LOG_SHEET_RANGE, formulas=True)
        return [record for record in map(LogRecord.from_row, rows) if record is not None]

    def delete_logged_audiences(self) -> List[LogRecord]:
        """
        Delete every audience found in the log sheet, then clear the log.

        Every logged audience is attempted even if earlier deletions fail.

        Returns:
            list[LogRecord]: Records of the audiences deleted.

        Raises:
            AudienceDeletionError: If any deletion failed. Raised after the log
                has been cleared.
        """
        logging.info("Deleting audiences...")
        records = self.get_logged_audiences()

        deleted = []
        failures = []
        for record in tqdm(records, desc="Deleting audiences"):
            logging.info(f"Deleting audience: {record.audience_id}")
            try:
                self.service.delete_audience(
                    record.account_id, record.property_id, record.audience_id
                )
                deleted.append(record)
            except Exception as e:
                logging.error(f"Failed to delete audience {record.audience_id}: {e}")
                failures.append((record, e))

        self.store.clear(self.log_sheet, LOG_SHEET_RANGE)
        self.store.activate(self.config_sheet)

        if failures:
            raise AudienceDeletionError(failures)

        logging.info(f"Deleted {len(deleted)} audiences. Done.")
        return deleted

    def discover_destinations(self) -> List[CatalogRow]:
        """
        Write every ad account linked to the user's web properties to the
        destinations sheet.

        Returns:
            list[CatalogRow]: Rows written, in discovery order.
        """
        logging.info("Fetching destinations...")
        self.store.clear(self.destinations_sheet, DESTINATION_LOG_RANGE)

        catalog = []
        for account in self.service.list_accounts():
            for web_property in self.service.list_properties(account['id']):
                ad_links = self.service.list_ad_links(account['id'], web_property['id'])
                logging.debug(f"Ad links of {web_property['id']}: {ad_links}")
                for link in ad_links:
                    property_ref = (link.get('entity') or {}).get('webPropertyRef') or {}
                    for ad_account in link.get('adWordsAccounts') or []:
                        row = CatalogRow(
                            customer_id=ad_account.get('customerId', ''),
                            kind=ad_account.get('kind', ''),
                            property_name=property_ref.get('name', ''),
                            property_id=property_ref.get('id', ''),
                        )
                        self.store.append_row(self.destinations_sheet, row.to_row())
                        catalog.append(row)

        logging.info(f"Found {len(catalog)} destinations.")
        return catalog
