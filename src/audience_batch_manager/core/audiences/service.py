# -*- coding: utf-8 -*-
"""
Thin wrapper over the Google Analytics Management API (v3) resources used
to copy remarketing audiences.

Every call is a single request returning the first page of results. Retries
are opt-in through `max_attempts`; by default a failing call raises straight
away.

API reference:
https://developers.google.com/analytics/devguides/config/mgmt/v3/mgmtReference
"""

import logging
from typing import List, Optional

from googleapiclient.errors import HttpError
from tenacity import (Retrying, retry_if_exception, stop_after_attempt,
                      wait_exponential)


TRANSIENT_HTTP_STATUSES = {429, 500, 502, 503, 504}


def is_transient_error(error: BaseException) -> bool:
    """Whether an API error is worth retrying (rate limits, server or connection errors)."""
    if isinstance(error, HttpError):
        return error.resp.status in TRANSIENT_HTTP_STATUSES
    return isinstance(error, (ConnectionError, TimeoutError))


def build_retry_policy(max_attempts: int = 1) -> Retrying:
    """
    Build the retry policy applied to every API request.

    Args:
        max_attempts (int): Total number of attempts per request. 1 disables retries.
    """
    if max_attempts < 1:
        raise ValueError(f"max_attempts must be >= 1, got {max_attempts}.")
    return Retrying(
        retry=retry_if_exception(is_transient_error),
        wait=wait_exponential(min=2, max=64),
        stop=stop_after_attempt(max_attempts),
        reraise=True
    )


class AudienceServiceClient:
    """Remarketing audience operations on top of an Analytics v3 service resource."""

    def __init__(self, service, max_attempts: int = 1):
        """
        Args:
            service: Analytics v3 resource, as returned by
                ``googleapiclient.discovery.build('analytics', 'v3', ...)``.
            max_attempts (int): Attempts per request, see `build_retry_policy`.
        """
        self.service = service
        self.max_attempts = max_attempts
        self._retrying = build_retry_policy(max_attempts)

    def _execute(self, request):
        return self._retrying(request.execute)

    @property
    def _management(self):
        return self.service.management()

    def list_accounts(self) -> List[dict]:
        response = self._execute(self._management.accounts().list())
        return response.get('items') or []

    def list_properties(self, account_id: str) -> List[dict]:
        response = self._execute(
            self._management.webproperties().list(accountId=account_id)
        )
        return response.get('items') or []

    def find_property(self, account_id: str, internal_property_id: str) -> Optional[dict]:
        """
        Find the web property of an account by its internal ID.

        UI urls only expose the internal web property ID while the API paths
        need the web property ID (UA-XXXX-Y), hence the lookup.

        Returns:
            dict | None: The first matching web property, None if none matches.
        """
        for web_property in self.list_properties(account_id):
            if str(web_property.get('internalWebPropertyId')) == str(internal_property_id):
                return web_property
        return None

    def get_audience(self, account_id: str, property_id: str, audience_id: str) -> dict:
        return self._execute(
            self._management.remarketingAudience().get(
                accountId=account_id,
                webPropertyId=property_id,
                remarketingAudienceId=audience_id
            )
        )

    def create_audience(self, account_id: str, property_id: str, audience: dict) -> dict:
        response = self._execute(
            self._management.remarketingAudience().insert(
                accountId=account_id,
                webPropertyId=property_id,
                body=audience
            )
        )
        logging.debug(f"Created audience {response.get('id')} in {property_id}")
        return response

    def delete_audience(self, account_id: str, property_id: str, audience_id: str) -> None:
        self._execute(
            self._management.remarketingAudience().delete(
                accountId=account_id,
                webPropertyId=property_id,
                remarketingAudienceId=audience_id
            )
        )

    def list_ad_links(self, account_id: str, property_id: str) -> List[dict]:
        response = self._execute(
            self._management.webPropertyAdWordsLinks().list(
                accountId=account_id,
                webPropertyId=property_id
            )
        )
        return response.get('items') or []
