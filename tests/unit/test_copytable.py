from __future__ import annotations

import pytest

from dynamodbcopy import Capacity, CopyConfig, Provisioner, Provisioning, TableService, run_copy_table
from dynamodbcopy.errors import AwsError, ProvisioningRestoreError, ValidationError
from dynamodbcopy.mocks import FakeDynamoDBClient
from dynamodbcopy.testkit import client_error, describe_response, no_sleep

INITIAL = Provisioning(source=Capacity(read=10, write=10), target=Capacity(read=5, write=30))
BOOSTED = Provisioning(source=Capacity(read=20, write=10), target=Capacity(read=5, write=30))


class _StubProvisioner:
    def __init__(self, *, fail_on_update: int | None = None) -> None:
        self.updates: list[Provisioning] = []
        self._fail_on_update = fail_on_update

    def fetch(self) -> Provisioning:
        return INITIAL

    def update(self, provisioning: Provisioning) -> Provisioning:
        self.updates.append(provisioning)
        if self._fail_on_update == len(self.updates):
            raise AwsError(code="LimitExceededException", message="slow down", table_name="src")
        return provisioning


class _StubCopier:
    def __init__(self, *, written: int = 0, error: Exception | None = None) -> None:
        self._written = written
        self._error = error
        self.calls = 0

    def copy(self) -> int:
        self.calls += 1
        if self._error is not None:
            raise self._error
        return self._written


def test_run_copy_table_boosts_copies_and_restores() -> None:
    src = FakeDynamoDBClient()
    trg = FakeDynamoDBClient()
    # fetch
    src.expect("describe_table", response=describe_response("src", read=10, write=10))
    trg.expect("describe_table", response=describe_response("trg", read=5, write=30))
    # boost
    src.expect("describe_table", response=describe_response("src", read=10, write=10))
    trg.expect("describe_table", response=describe_response("trg", read=5, write=30))
    src.expect("update_table", {"ProvisionedThroughput": {"ReadCapacityUnits": 20, "WriteCapacityUnits": 10}})
    src.expect("describe_table", response=describe_response("src", read=20, write=10))
    # restore
    src.expect("describe_table", response=describe_response("src", read=20, write=10))
    trg.expect("describe_table", response=describe_response("trg", read=5, write=30))
    src.expect("update_table", {"ProvisionedThroughput": {"ReadCapacityUnits": 10, "WriteCapacityUnits": 10}})
    src.expect("describe_table", response=describe_response("src", read=10, write=10))

    provisioner = Provisioner(
        TableService("src", client=src, sleeper=no_sleep),
        TableService("trg", client=trg, sleeper=no_sleep),
    )
    copier = _StubCopier(written=42)

    report = run_copy_table(CopyConfig(read_capacity=20, write_capacity=20), provisioner, copier)

    assert report.initial == INITIAL
    assert report.boosted == BOOSTED
    assert report.written == 42
    assert copier.calls == 1
    src.assert_no_pending()
    trg.assert_no_pending()


def test_run_copy_table_restores_after_copy_failure() -> None:
    provisioner = _StubProvisioner()
    err = AwsError(code="AccessDeniedException", message="denied", table_name="trg")

    with pytest.raises(AwsError, match="denied"):
        run_copy_table(CopyConfig(read_capacity=20), provisioner, _StubCopier(error=err))

    assert provisioner.updates == [BOOSTED, INITIAL]


def test_run_copy_table_reports_restore_failure_with_copy_failure() -> None:
    provisioner = _StubProvisioner(fail_on_update=2)
    copy_err = RuntimeError("copy broke")

    with pytest.raises(ProvisioningRestoreError) as excinfo:
        run_copy_table(CopyConfig(read_capacity=20), provisioner, _StubCopier(error=copy_err))

    assert excinfo.value.copy_error is copy_err
    assert isinstance(excinfo.value.__cause__, AwsError)
    assert "slow down" in str(excinfo.value)
    assert "copy broke" in str(excinfo.value)


def test_run_copy_table_reports_restore_failure_after_successful_copy() -> None:
    provisioner = _StubProvisioner(fail_on_update=2)

    with pytest.raises(ProvisioningRestoreError) as excinfo:
        run_copy_table(CopyConfig(read_capacity=20), provisioner, _StubCopier(written=3))

    assert excinfo.value.copy_error is None


def test_run_copy_table_restores_when_boost_fails() -> None:
    provisioner = _StubProvisioner(fail_on_update=1)
    copier = _StubCopier()

    with pytest.raises(AwsError, match="slow down"):
        run_copy_table(CopyConfig(read_capacity=20), provisioner, copier)

    assert copier.calls == 0
    assert provisioner.updates == [BOOSTED, INITIAL]


def test_run_copy_table_rolls_back_source_when_target_boost_fails() -> None:
    src = FakeDynamoDBClient()
    trg = FakeDynamoDBClient()
    # fetch
    src.expect("describe_table", response=describe_response("src", read=10, write=10))
    trg.expect("describe_table", response=describe_response("trg", read=5, write=5))
    # boost: source succeeds, target is rejected
    src.expect("describe_table", response=describe_response("src", read=10, write=10))
    trg.expect("describe_table", response=describe_response("trg", read=5, write=5))
    src.expect("update_table", {"ProvisionedThroughput": {"ReadCapacityUnits": 20, "WriteCapacityUnits": 10}})
    src.expect("describe_table", response=describe_response("src", read=20, write=10))
    trg.expect(
        "update_table",
        {"ProvisionedThroughput": {"ReadCapacityUnits": 5, "WriteCapacityUnits": 20}},
        error=client_error("LimitExceededException", "too many updates"),
    )
    # restore: only the source differs from the initial values
    src.expect("describe_table", response=describe_response("src", read=20, write=10))
    trg.expect("describe_table", response=describe_response("trg", read=5, write=5))
    src.expect("update_table", {"ProvisionedThroughput": {"ReadCapacityUnits": 10, "WriteCapacityUnits": 10}})
    src.expect("describe_table", response=describe_response("src", read=10, write=10))

    provisioner = Provisioner(
        TableService("src", client=src, sleeper=no_sleep),
        TableService("trg", client=trg, sleeper=no_sleep),
    )
    copier = _StubCopier(written=1)

    with pytest.raises(AwsError, match="update_table trg: LimitExceededException"):
        run_copy_table(CopyConfig(read_capacity=20, write_capacity=20), provisioner, copier)

    assert copier.calls == 0
    src.assert_no_pending()
    trg.assert_no_pending()


def test_run_copy_table_reports_restore_failure_after_boost_failure() -> None:
    class _AlwaysFails(_StubProvisioner):
        def update(self, provisioning: Provisioning) -> Provisioning:
            self.updates.append(provisioning)
            raise AwsError(code="InternalServerError", message=f"attempt {len(self.updates)}")

    provisioner = _AlwaysFails()

    with pytest.raises(ProvisioningRestoreError) as excinfo:
        run_copy_table(CopyConfig(read_capacity=20), provisioner, _StubCopier())

    assert provisioner.updates == [BOOSTED, INITIAL]
    assert isinstance(excinfo.value.copy_error, AwsError)
    assert "attempt 1" in str(excinfo.value)
    assert "attempt 2" in str(excinfo.value)


def test_run_copy_table_validates_config_first() -> None:
    provisioner = _StubProvisioner()
    with pytest.raises(ValidationError):
        run_copy_table(CopyConfig(reader_count=0), provisioner, _StubCopier())
    assert provisioner.updates == []
