"""
Read-only Google Sheets access for attendance exports.
"""

import logging
from typing import Any, Dict, List, Optional

import google.auth
import pandas as pd
from google.oauth2 import service_account
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from timekeeper.services.retry_handler import RetryHandler

logger = logging.getLogger(__name__)

READONLY_SCOPES = ["https://www.googleapis.com/auth/spreadsheets.readonly"]


class GoogleSheetsService:
    """
    Reads spreadsheet ranges into pandas DataFrames.

    Credentials come from a service account dict
    (``TimekeeperConfig.get_google_service_account_info()``) or, when none
    is given, from Application Default Credentials.
    """

    def __init__(
        self,
        credentials: Optional[Dict[str, Any]] = None,
        retry_handler: Optional[RetryHandler] = None,
        scopes: Optional[List[str]] = None,
    ):
        self.credentials_info = credentials
        self.retry_handler = retry_handler or RetryHandler()
        self.scopes = scopes or READONLY_SCOPES
        self._service = self._create_service()

    @classmethod
    def from_config(cls, config) -> "GoogleSheetsService":
        credentials = (
            config.get_google_service_account_info()
            if config.has_google_credentials
            else None
        )
        return cls(
            credentials=credentials,
            retry_handler=RetryHandler.from_config(config),
            scopes=config.google_scopes,
        )

    def _create_service(self):
        if self.credentials_info:
            credentials = service_account.Credentials.from_service_account_info(
                self.credentials_info, scopes=self.scopes
            )
            project = self.credentials_info.get("project_id", "unknown")
            logger.info("Sheets client using service account for project %s", project)
        else:
            credentials, project = google.auth.default(scopes=self.scopes)
            logger.info("Sheets client using application default credentials (%s)", project)

        return build("sheets", "v4", credentials=credentials, cache_discovery=False)

    def _execute(self, request_factory):
        try:
            return self.retry_handler.execute_with_retry(lambda: request_factory().execute())
        except HttpError as e:
            raise self.retry_handler.classifier.to_external_error(e) from e

    def read_sheet(
        self,
        spreadsheet_id: str,
        range_name: str,
        value_render_option: str = "FORMATTED_VALUE",
    ) -> pd.DataFrame:
        """
        Read a range and return it as a DataFrame with the first row as headers.

        Formatted values are requested by default so dates and times arrive
        exactly as they are displayed in the sheet.

        Raises:
            ExternalServiceError: If the API request fails
        """
        result = self._execute(
            lambda: self._service.spreadsheets()
            .values()
            .get(
                spreadsheetId=spreadsheet_id,
                range=range_name,
                valueRenderOption=value_render_option,
            )
        )
        values = result.get("values", [])

        if not values:
            logger.info("No data found in range %s", range_name)
            return pd.DataFrame()

        headers = [str(h).strip() for h in values[0]]
        # The API drops trailing empty cells, so pad every row to the header width
        rows = [row + [""] * (len(headers) - len(row)) for row in values[1:]]
        df = pd.DataFrame([row[: len(headers)] for row in rows], columns=headers)

        logger.debug("Read %d rows from %s", len(df), range_name)
        return df
