"""
Unit tests for Google Sheets service.
"""

from unittest.mock import Mock, patch

import pytest
from googleapiclient.errors import HttpError

from timekeeper.exceptions import ExternalServiceError
from timekeeper.services.google_sheets_service import READONLY_SCOPES, GoogleSheetsService
from timekeeper.services.retry_handler import RetryHandler


class TestGoogleSheetsService:
    """Test cases for GoogleSheetsService."""

    @pytest.fixture
    def mock_sheets_client(self):
        """Mock Google Sheets API client."""
        return Mock()

    @pytest.fixture
    def sheets_service(self, mock_sheets_client):
        """GoogleSheetsService instance with mocked dependencies."""
        with patch("timekeeper.services.google_sheets_service.build") as mock_build, patch(
            "google.auth.default"
        ) as mock_auth:
            mock_auth.return_value = (Mock(), "test-project")
            mock_build.return_value = mock_sheets_client
            yield GoogleSheetsService(retry_handler=RetryHandler(max_retries=0))

    def _values_get(self, client):
        return client.spreadsheets.return_value.values.return_value.get

    def test_default_credentials_used_without_service_account(self):
        """Test Application Default Credentials are the fallback."""
        with patch("timekeeper.services.google_sheets_service.build") as mock_build, patch(
            "google.auth.default"
        ) as mock_auth:
            credentials = Mock()
            mock_auth.return_value = (credentials, "adc-project")

            GoogleSheetsService()

        mock_auth.assert_called_once_with(scopes=READONLY_SCOPES)
        mock_build.assert_called_once_with(
            "sheets", "v4", credentials=credentials, cache_discovery=False
        )

    def test_google_service_account_from_config(self, test_config):
        """Test configured service account credentials are used."""
        with patch("timekeeper.services.google_sheets_service.build"), patch(
            "timekeeper.services.google_sheets_service.service_account.Credentials"
            ".from_service_account_info"
        ) as mock_from_info:
            GoogleSheetsService.from_config(test_config)

        info = mock_from_info.call_args.args[0]
        assert info["client_email"] == "test@test.com"
        assert mock_from_info.call_args.kwargs["scopes"] == test_config.google_scopes

    def test_read_sheet_pads_short_rows(self, sheets_service, mock_sheets_client):
        """Test rows missing trailing cells are padded to the header width."""
        self._values_get(mock_sheets_client).return_value.execute.return_value = {
            "values": [["Record ID", "Worker ID", "Date"], ["1", "W1"], ["2", "W2", "2024-01-15"]]
        }

        df = sheets_service.read_sheet("sheet-id", "Attendance")

        assert list(df.columns) == ["Record ID", "Worker ID", "Date"]
        assert df.iloc[0]["Date"] == ""
        assert df.iloc[1]["Date"] == "2024-01-15"
        self._values_get(mock_sheets_client).assert_called_once_with(
            spreadsheetId="sheet-id", range="Attendance", valueRenderOption="FORMATTED_VALUE"
        )

    def test_read_empty_sheet(self, sheets_service, mock_sheets_client):
        """Test an empty range gives an empty DataFrame."""
        self._values_get(mock_sheets_client).return_value.execute.return_value = {}

        assert sheets_service.read_sheet("sheet-id", "Attendance").empty

    def test_google_http_error_wrapped(self, sheets_service, mock_sheets_client):
        """Test API failures surface as ExternalServiceError."""
        self._values_get(mock_sheets_client).return_value.execute.side_effect = HttpError(
            resp=Mock(status=403), content=b'{"error": {"message": "Forbidden"}}'
        )

        with pytest.raises(ExternalServiceError) as exc_info:
            sheets_service.read_sheet("sheet-id", "Attendance")

        assert exc_info.value.status_code == 403
