class SheetWriter:
    @property
    def configured(self) -> bool:
        """False when credentials or the target sheet are missing."""
        return True

    def append_row(self, values: list):
        """Append one row. Raise SheetWriteError on failure."""
        raise NotImplementedError
