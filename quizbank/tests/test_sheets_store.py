import pytest
from gspread.exceptions import WorksheetNotFound

from quizbank.errors import StoreAccessError
from quizbank.provisioner import ensure_table
from quizbank.schema import USER_HEADERS
from quizbank.sheets_store import SheetsStore


class FakeWorksheet:
    def __init__(self, title):
        self.title = title
        self.values = []
        self.updates = []
        self.input_options = []
        self.frozen = 0

    def get_all_values(self):
        return [list(r) for r in self.values]

    def append_row(self, values, value_input_option=None):
        self.input_options.append(value_input_option)
        self.values.append(list(values))

    def update(self, range_name=None, values=None, value_input_option=None):
        self.updates.append(range_name)
        self.input_options.append(value_input_option)
        self.values.extend(values)

    def freeze(self, rows=None, cols=None):
        self.frozen = rows


class FakeSpreadsheet:
    def __init__(self):
        self.sheets = {}

    def worksheet(self, title):
        if title not in self.sheets:
            raise WorksheetNotFound(title)
        return self.sheets[title]

    def add_worksheet(self, title, rows, cols):
        self.sheets[title] = FakeWorksheet(title)
        return self.sheets[title]


class FakeClient:
    def __init__(self, spreadsheet):
        self.spreadsheet = spreadsheet
        self.opened = None

    def open_by_key(self, key):
        self.opened = key
        return self.spreadsheet


def test_open_uses_key_and_prefixes_identifier():
    client = FakeClient(FakeSpreadsheet())
    store = SheetsStore.open("abc123", client=client)
    assert client.opened == "abc123"
    assert store.identifier == "gsheet:abc123"


def test_missing_worksheet_is_none_then_provisioned():
    spreadsheet = FakeSpreadsheet()
    store = SheetsStore.open("k", client=FakeClient(spreadsheet))
    assert store.get_table("Users") is None

    table = ensure_table(store, "Users", USER_HEADERS)
    assert table.read_all() == [USER_HEADERS]
    assert spreadsheet.sheets["Users"].frozen == 1


def test_batch_write_targets_a1_range():
    spreadsheet = FakeSpreadsheet()
    store = SheetsStore.open("k", client=FakeClient(spreadsheet))
    table = store.create_table("Responses")
    table.append_rows(2, [[1, 2, 3], [4, 5, 6]])
    assert spreadsheet.sheets["Responses"].updates == ["A2:C3"]
    assert table.row_count() == 2


def test_values_are_written_raw():
    spreadsheet = FakeSpreadsheet()
    store = SheetsStore.open("k", client=FakeClient(spreadsheet))
    table = ensure_table(store, "Users", USER_HEADERS)
    table.append_row(["2026-01-01T00:00:00+00:00", "Ana", "007", "7/10", "Questions: 10"])
    table.append_rows(3, [["2026-01-01T00:00:00+00:00", "Ana", "All-All-All", "q1", "A", True, 1, False]])

    ws = spreadsheet.sheets["Users"]
    assert ws.input_options == ["RAW", "RAW", "RAW"]
    assert ws.values[1][2:4] == ["007", "7/10"]


def test_open_failure_is_access_error():
    class Failing:
        def open_by_key(self, key):
            raise OSError("network down")

    with pytest.raises(StoreAccessError):
        SheetsStore.open("k", client=Failing())
