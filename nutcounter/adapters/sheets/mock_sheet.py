from nutcounter.adapters.sheets.base import SheetWriter

class MockSheet(SheetWriter):
    """Keeps appended rows in memory. Selected with SHEET_ADAPTER=mock."""

    def __init__(self, status_store):
        self.status = status_store
        self.rows: list[list] = []

    def append_row(self, values: list):
        self.rows.append(list(values))
        self.status.log(f"mock_sheet: row {len(self.rows)} -> {values}")
