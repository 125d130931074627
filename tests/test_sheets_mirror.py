"""Tests for the Google Sheets transport."""

from unittest.mock import MagicMock, patch

import pytest

from agenda.core.exceptions import MirrorFailure
from agenda.services.sheets_mirror import SheetsDocument, SheetsMirrorClient


@pytest.fixture
def service():
    return MagicMock()


@pytest.fixture
def values(service):
    return service.spreadsheets.return_value.values.return_value


class TestSheetsDocument:
    def test_read_table_splits_header_and_rows(self, service, values):
        values.get.return_value.execute.return_value = {
            "values": [["id", "status"], ["a1", "pending"], ["a2"]]
        }
        document = SheetsDocument(service, "sheet-1", "Agenda")

        header, rows = document.read_table()

        assert header == ["id", "status"]
        assert rows == [["a1", "pending"], ["a2"]]
        values.get.assert_called_once_with(spreadsheetId="sheet-1", range="'Agenda'")

    def test_read_table_on_empty_sheet(self, service, values):
        values.get.return_value.execute.return_value = {}
        assert SheetsDocument(service, "sheet-1", "Agenda").read_table() == ([], [])

    def test_write_row_targets_the_row_number(self, service, values):
        SheetsDocument(service, "sheet-1", "Agenda").write_row(5, ["a1", "confirmed"])

        values.update.assert_called_once_with(
            spreadsheetId="sheet-1",
            range="'Agenda'!A5",
            valueInputOption="RAW",
            body={"values": [["a1", "confirmed"]]},
        )

    def test_append_row_inserts_rows(self, service, values):
        SheetsDocument(service, "sheet-1", "Agenda").append_row(["a1"])

        kwargs = values.append.call_args.kwargs
        assert kwargs["insertDataOption"] == "INSERT_ROWS"
        assert kwargs["body"] == {"values": [["a1"]]}

    def test_sheet_titles_with_quotes_are_escaped(self, service, values):
        values.get.return_value.execute.return_value = {"values": [["id"]]}
        SheetsDocument(service, "sheet-1", "Ana's").read_header()
        assert values.get.call_args.kwargs["range"] == "'Ana''s'!1:1"


class TestSheetsMirrorClient:
    def test_open_without_credentials_fails(self):
        with pytest.raises(MirrorFailure, match="No Google service account"):
            SheetsMirrorClient().open("sheet-1")

    def test_open_with_malformed_credentials_fails(self):
        with pytest.raises(MirrorFailure, match="could not be parsed"):
            SheetsMirrorClient("{not json").open("sheet-1")

    def test_tenant_credentials_take_precedence(self, service):
        client = SheetsMirrorClient('{"client_email": "global@x"}', sheet_title="Agenda")
        with patch.object(SheetsMirrorClient, "_build_service", return_value=service) as build:
            document = client.open("sheet-1", '{"client_email": "tenant@x"}')

        build.assert_called_once_with({"client_email": "tenant@x"})
        assert document.sheet_title == "Agenda"

    def test_defaults_to_first_worksheet(self, service):
        service.spreadsheets.return_value.get.return_value.execute.return_value = {
            "sheets": [{"properties": {"title": "Bookings"}}, {"properties": {"title": "Other"}}]
        }
        client = SheetsMirrorClient('{"client_email": "global@x"}')
        with patch.object(SheetsMirrorClient, "_build_service", return_value=service):
            document = client.open("sheet-1")

        assert document.sheet_title == "Bookings"
