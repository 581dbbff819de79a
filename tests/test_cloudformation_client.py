"""Tests for the boto3-backed CloudFormation gateway"""

from __future__ import annotations

from datetime import datetime, timezone

import boto3
import pytest
from botocore.exceptions import ClientError
from botocore.stub import Stubber

from cfn_cleaner.domain.errors import StackDeletionFailedError, StackDeletionTimeoutError
from cfn_cleaner.infrastructure.cloudformation.base import DELETABLE_STACK_STATUSES
from cfn_cleaner.infrastructure.cloudformation.client import CloudFormationGateway

CREATED = datetime(2024, 1, 1, tzinfo=timezone.utc)


@pytest.fixture
def cfn_client():
    return boto3.client(
        "cloudformation",
        region_name="us-east-1",
        aws_access_key_id="testing",
        aws_secret_access_key="testing",
    )


@pytest.fixture
def stubber(cfn_client):
    with Stubber(cfn_client) as stub:
        yield stub
        stub.assert_no_pending_responses()


@pytest.fixture
def gateway(cfn_client):
    return CloudFormationGateway(client=cfn_client, poll_interval=1)


@pytest.fixture
def waiter_sleeps(monkeypatch):
    """Record the waiter's pauses between polls instead of sleeping"""
    sleeps = []
    monkeypatch.setattr("botocore.waiter.time.sleep", sleeps.append)
    return sleeps


def _in_progress(stubber, times: int) -> None:
    for _ in range(times):
        stubber.add_response(
            "describe_stacks",
            {"Stacks": [{"StackName": "test-a", "StackStatus": "DELETE_IN_PROGRESS", "CreationTime": CREATED}]},
            {"StackName": "test-a"},
        )


def _summary(name: str, status: str = "CREATE_COMPLETE") -> dict:
    return {"StackName": name, "StackStatus": status, "CreationTime": CREATED, "StackId": f"id-{name}"}


@pytest.mark.asyncio
async def test_list_stacks_page_first_page(gateway, stubber):
    stubber.add_response(
        "list_stacks",
        {"StackSummaries": [_summary("test-a"), _summary("test-b", "ROLLBACK_COMPLETE")], "NextToken": "tok"},
        {"StackStatusFilter": list(DELETABLE_STACK_STATUSES)},
    )

    page = await gateway.list_stacks_page(DELETABLE_STACK_STATUSES)

    assert [s.name for s in page.stacks] == ["test-a", "test-b"]
    assert page.stacks[1].status == "ROLLBACK_COMPLETE"
    assert page.stacks[0].stack_id == "id-test-a"
    assert page.next_token == "tok"


@pytest.mark.asyncio
async def test_list_stacks_page_passes_next_token(gateway, stubber):
    stubber.add_response(
        "list_stacks",
        {"StackSummaries": [_summary("test-c")]},
        {"StackStatusFilter": ["CREATE_COMPLETE"], "NextToken": "tok"},
    )

    page = await gateway.list_stacks_page(["CREATE_COMPLETE"], "tok")

    assert [s.name for s in page.stacks] == ["test-c"]
    assert page.next_token is None


@pytest.mark.asyncio
async def test_request_delete(gateway, stubber):
    stubber.add_response("delete_stack", {}, {"StackName": "test-a"})
    response = await gateway.request_delete("test-a")
    assert isinstance(response, dict)


def test_session_clients_leave_delete_retries_to_caller(monkeypatch):
    monkeypatch.delenv("AWS_PROFILE", raising=False)
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")

    gateway = CloudFormationGateway(region="us-east-1")

    assert gateway.delete_client is not gateway.client
    retries = gateway.delete_client.meta.config.retries
    assert retries["total_max_attempts"] == 1
    assert retries["mode"] == "standard"
    assert gateway.client.meta.region_name == "us-east-1"


@pytest.mark.asyncio
async def test_request_delete_uses_delete_client(cfn_client, stubber):
    delete_client = boto3.client(
        "cloudformation",
        region_name="us-east-1",
        aws_access_key_id="testing",
        aws_secret_access_key="testing",
    )
    gateway = CloudFormationGateway(client=cfn_client, delete_client=delete_client)

    with Stubber(delete_client) as delete_stub:
        delete_stub.add_response("delete_stack", {}, {"StackName": "test-a"})
        await gateway.request_delete("test-a")
        delete_stub.assert_no_pending_responses()


@pytest.mark.asyncio
async def test_request_delete_lets_client_error_through(gateway, stubber):
    stubber.add_client_error(
        "delete_stack",
        service_error_code="Throttling",
        service_message="Rate exceeded",
        http_status_code=400,
        expected_params={"StackName": "test-a"},
    )
    with pytest.raises(ClientError) as exc_info:
        await gateway.request_delete("test-a")
    assert exc_info.value.response["Error"]["Message"] == "Rate exceeded"


@pytest.mark.asyncio
async def test_wait_for_delete_success_when_stack_is_gone(gateway, stubber):
    stubber.add_client_error(
        "describe_stacks",
        service_error_code="ValidationError",
        service_message="Stack with id test-a does not exist",
        expected_params={"StackName": "test-a"},
    )
    await gateway.wait_for_delete("test-a", max_wait_seconds=5)


@pytest.mark.asyncio
async def test_wait_for_delete_failed_state(gateway, stubber):
    stubber.add_response(
        "describe_stacks",
        {"Stacks": [{"StackName": "test-a", "StackStatus": "DELETE_FAILED", "CreationTime": CREATED}]},
        {"StackName": "test-a"},
    )
    with pytest.raises(StackDeletionFailedError) as exc_info:
        await gateway.wait_for_delete("test-a", max_wait_seconds=5)
    assert exc_info.value.stack_name == "test-a"


@pytest.mark.asyncio
async def test_wait_for_delete_timeout_after_full_window(gateway, stubber, waiter_sleeps):
    _in_progress(stubber, 4)

    with pytest.raises(StackDeletionTimeoutError) as exc_info:
        await gateway.wait_for_delete("test-a", max_wait_seconds=3)

    assert exc_info.value.max_wait_seconds == 3
    assert waiter_sleeps == [1, 1, 1]


@pytest.mark.asyncio
async def test_wait_for_delete_short_ceiling_still_waits(gateway, stubber, waiter_sleeps):
    _in_progress(stubber, 2)

    with pytest.raises(StackDeletionTimeoutError):
        await gateway.wait_for_delete("test-a", max_wait_seconds=1)

    assert waiter_sleeps == [1]


@pytest.mark.asyncio
async def test_wait_for_delete_completes_on_last_poll(gateway, stubber, waiter_sleeps):
    _in_progress(stubber, 3)
    stubber.add_client_error(
        "describe_stacks",
        service_error_code="ValidationError",
        service_message="Stack with id test-a does not exist",
        expected_params={"StackName": "test-a"},
    )

    await gateway.wait_for_delete("test-a", max_wait_seconds=3)

    assert sum(waiter_sleeps) == 3


@pytest.mark.asyncio
async def test_wait_for_delete_default_poll_covers_ceiling(cfn_client, stubber, waiter_sleeps):
    gateway = CloudFormationGateway(client=cfn_client)
    _in_progress(stubber, 7)

    with pytest.raises(StackDeletionTimeoutError):
        await gateway.wait_for_delete("test-a", max_wait_seconds=180)

    assert waiter_sleeps == [30] * 6
