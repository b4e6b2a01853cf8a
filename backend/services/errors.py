class TableEngineError(Exception):
    """Base class for failures raised by the table services."""

    def __init__(self, message: str, cause: BaseException | None = None):
        super().__init__(message)
        self.cause = cause


class InvalidIdentifier(TableEngineError, ValueError):
    pass


class RequestRejected(TableEngineError, ValueError):
    pass


class TableNotFound(TableEngineError):
    def __init__(self, table_name: str):
        super().__init__(f"Table {table_name} does not exist")
        self.table_name = table_name


class ProvisioningFailed(TableEngineError):
    def __init__(self, table_name: str, cause: BaseException | None = None):
        super().__init__(f"Could not provision table {table_name}: {cause}", cause)
        self.table_name = table_name


class IngestionFailed(TableEngineError):
    def __init__(self, table_name: str, cause: BaseException | None = None):
        super().__init__(f"Could not ingest into {table_name}: {cause}", cause)
        self.table_name = table_name


class IngestionRowFailed(IngestionFailed):
    def __init__(self, table_name: str, row_index: int, cause: BaseException | None = None):
        super().__init__(table_name, cause)
        self.row_index = row_index
        self.args = (f"Error inserting row {row_index} into {table_name}: {cause}",)


class CloneFailed(TableEngineError):
    def __init__(self, source_table: str, dest_table: str, cause: BaseException | None = None):
        super().__init__(f"Could not clone {source_table} into {dest_table}: {cause}", cause)
        self.source_table = source_table
        self.dest_table = dest_table


class TransactionAborted(TableEngineError):
    def __init__(self, step: str, cause: BaseException | None = None):
        super().__init__(f"Transaction aborted at {step}: {cause}", cause)
        self.step = step
