from __future__ import annotations


class DynamodbcopyError(Exception):
    pass


class ValidationError(DynamodbcopyError):
    pass


class AwsError(DynamodbcopyError):
    def __init__(
        self,
        *,
        code: str,
        message: str,
        table_name: str | None = None,
        operation: str | None = None,
        segment: int | None = None,
    ) -> None:
        prefix = ""
        if operation and table_name:
            prefix = f"{operation} {table_name}"
        elif table_name:
            prefix = table_name
        if segment is not None:
            prefix = f"{prefix} (segment {segment})"

        text = f"{code}: {message}"
        super().__init__(f"{prefix}: {text}" if prefix else text)
        self.code = code
        self.message = message
        self.table_name = table_name
        self.operation = operation
        self.segment = segment


class NotFoundError(AwsError):
    pass


class ThrottledError(AwsError):
    pass


class RetryTimeoutError(DynamodbcopyError):
    def __init__(
        self,
        *,
        elapsed_ms: int,
        max_elapsed_ms: int,
        table_name: str | None = None,
        operation: str | None = None,
    ) -> None:
        target = f" {operation} on {table_name}" if operation and table_name else ""
        super().__init__(f"waited for too long ({elapsed_ms} ms, limit {max_elapsed_ms} ms) to perform{target}")
        self.elapsed_ms = elapsed_ms
        self.max_elapsed_ms = max_elapsed_ms
        self.table_name = table_name
        self.operation = operation


class PipelineFault(DynamodbcopyError):
    def __init__(self, *, role: str, worker_id: int, cause: BaseException) -> None:
        super().__init__(f"{role} {worker_id} failed: {type(cause).__name__}: {cause}")
        self.role = role
        self.worker_id = worker_id
        self.cause = cause
        self.__cause__ = cause


class ProvisioningRestoreError(DynamodbcopyError):
    def __init__(self, *, message: str, copy_error: BaseException | None = None) -> None:
        if copy_error is not None:
            message = f"{message} (copy failed first: {copy_error})"
        super().__init__(message)
        self.copy_error = copy_error
