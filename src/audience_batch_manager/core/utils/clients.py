# -*- coding: utf-8 -*-

import os
import logging

import google.auth
import gspread
from google.oauth2 import service_account
from googleapiclient.discovery import build


ANALYTICS_SCOPES = [
    'https://www.googleapis.com/auth/analytics.edit',
    'https://www.googleapis.com/auth/analytics.readonly',
]
SHEETS_SCOPES = [
    'https://www.googleapis.com/auth/spreadsheets',
]


def load_credentials(credentials_file=None, scopes=None, adc=False):
    """
    Load Google credentials for API calls.

    Args:
        credentials_file (str): Path to a service account JSON key. If not provided,
            it will be fetched from the GOOGLE_APPLICATION_CREDENTIALS environment
            variable, falling back to application default credentials.
        scopes (list): OAuth scopes to request. Defaults to Analytics + Sheets scopes.
        adc (bool): Resolve credentials through google-auth's application default
            chain only. Any key file passed in is ignored.
    """
    scopes = scopes or ANALYTICS_SCOPES + SHEETS_SCOPES
    if adc:
        credentials_file = None
    elif credentials_file is None:
        credentials_file = os.getenv('GOOGLE_APPLICATION_CREDENTIALS')

    if credentials_file:
        if not os.path.exists(credentials_file):
            raise ValueError(f"Credentials file not found: {credentials_file}")
        credentials = service_account.Credentials.from_service_account_file(
            credentials_file, scopes=scopes
        )
        logging.debug("Loaded service account credentials.")
        return credentials

    credentials, _ = google.auth.default(scopes=scopes)
    logging.debug("Using application default credentials.")
    return credentials


def create_analytics_service(credentials=None, credentials_file=None):
    """
    Create a Google Analytics Management API (v3) service.

    Args:
        credentials: Google credentials. If not provided, they are loaded with `load_credentials`.
        credentials_file (str): Service account key used when credentials is not provided.
    """
    if credentials is None:
        credentials = load_credentials(credentials_file)
    service = build('analytics', 'v3', credentials=credentials, cache_discovery=False)
    logging.info("Analytics Management API client created successfully.")
    return service


def create_sheets_client(credentials=None, credentials_file=None):
    """
    Create a gspread client for Google Sheets.

    Args:
        credentials: Google credentials. If not provided, they are loaded with `load_credentials`.
        credentials_file (str): Service account key used when credentials is not provided.
    """
    if credentials is None:
        credentials = load_credentials(credentials_file)
    client = gspread.authorize(credentials)
    logging.info("Google Sheets client created successfully.")
    return client
