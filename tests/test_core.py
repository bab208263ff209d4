"""Tests for core infrastructure modules."""

import asyncio
import json
import logging
import pytest
from pydantic import ValidationError

from rolesync.base.config import (
    AWSConfig,
    DesiredConfig,
    RecordedState,
    generate_name,
    resolve_inputs,
)
from rolesync.base.exceptions import StateError
from rolesync.base.logger import ComponentLogger, StructuredFormatter
from rolesync.base.state import JSONFileStateStore, MemoryStateStore
from rolesync.base.async_support import async_wrap, AsyncMixin


DOC = {
    "Version": "2012-10-17",
    "Statement": [{"Effect": "Allow", "Action": "s3:GetObject", "Resource": "*"}],
}


# ══════════════════════════════════════════════════════════════════════
# Config
# ══════════════════════════════════════════════════════════════════════

class TestAWSConfig:
    def test_explicit_values(self):
        cfg = AWSConfig(
            aws_access_key_id="AKIA",
            aws_secret_access_key="secret",
            region_name="us-west-2",
        )
        assert cfg.aws_access_key_id == "AKIA"
        assert cfg.region_name == "us-west-2"

    def test_env_fallback(self, monkeypatch):
        monkeypatch.setenv("AWS_ACCESS_KEY_ID", "env_key")
        monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "env_secret")
        monkeypatch.setenv("AWS_SESSION_TOKEN", "env_token")
        monkeypatch.setenv("AWS_DEFAULT_REGION", "eu-west-1")
        cfg = AWSConfig()
        assert cfg.aws_access_key_id == "env_key"
        assert cfg.aws_session_token == "env_token"
        assert cfg.region_name == "eu-west-1"

    def test_for_region(self):
        cfg = AWSConfig(aws_access_key_id="k", region_name="us-east-1")
        pinned = cfg.for_region("ap-south-1")
        assert pinned.region_name == "ap-south-1"
        assert pinned.aws_access_key_id == "k"
        assert cfg.region_name == "us-east-1"

    def test_unknown_field(self):
        with pytest.raises(ValidationError):
            AWSConfig(profile="dev")


class TestDesiredConfig:
    def test_accepts_reference_and_document(self):
        assert DesiredConfig(policy={"arn": "arn:x"}).policy == {"arn": "arn:x"}
        assert DesiredConfig(policy=DOC).policy == DOC

    def test_rejects_other_policy_shapes(self):
        with pytest.raises(ValidationError):
            DesiredConfig(policy={"Version": "2012-10-17"})

    def test_rejects_unknown_field(self):
        with pytest.raises(ValidationError):
            DesiredConfig(role_name="app")

    def test_service_list(self):
        cfg = DesiredConfig(service=["ec2.amazonaws.com", "lambda.amazonaws.com"])
        assert cfg.service == ["ec2.amazonaws.com", "lambda.amazonaws.com"]


class TestResolveInputs:
    def test_defaults(self):
        inputs = resolve_inputs(DesiredConfig(name="app"), RecordedState())
        assert inputs.name == "app"
        assert inputs.service == "lambda.amazonaws.com"
        assert inputs.policy == {"arn": None}
        assert inputs.region == "us-east-1"

    def test_caller_wins_over_recorded(self):
        recorded = RecordedState(name="old", service="ec2.amazonaws.com", region="eu-west-1")
        inputs = resolve_inputs(
            DesiredConfig(name="new", service="lambda.amazonaws.com", region="us-west-2"),
            recorded,
        )
        assert (inputs.name, inputs.service, inputs.region) == (
            "new", "lambda.amazonaws.com", "us-west-2",
        )

    def test_recorded_wins_over_default(self):
        recorded = RecordedState(
            name="app", service="ec2.amazonaws.com", policy={"arn": "arn:p"}, region="eu-west-1",
        )
        inputs = resolve_inputs(DesiredConfig(), recorded)
        assert inputs.name == "app"
        assert inputs.service == "ec2.amazonaws.com"
        assert inputs.policy == {"arn": "arn:p"}
        assert inputs.region == "eu-west-1"

    def test_generates_name(self):
        inputs = resolve_inputs(DesiredConfig(), RecordedState())
        assert len(inputs.name) == 8
        assert inputs.name.isalnum()

    def test_document_loses_arn(self):
        inputs = resolve_inputs(DesiredConfig(policy={**DOC, "arn": "arn:x"}), RecordedState())
        assert inputs.policy == DOC

    def test_does_not_mutate_input(self):
        policy = {**DOC, "arn": "arn:x"}
        desired = DesiredConfig(policy=policy)
        resolve_inputs(desired, RecordedState())
        assert desired.policy["arn"] == "arn:x"


def test_generate_name_is_random():
    assert len({generate_name() for _ in range(20)}) > 1


class TestRecordedState:
    def test_empty_dump(self):
        assert RecordedState().dump() == {}
        assert RecordedState().is_empty

    def test_outputs_exclude_region(self):
        state = RecordedState(name="a", arn="arn", service="s", policy={"arn": None}, region="r")
        assert state.outputs() == {"name": "a", "arn": "arn", "service": "s", "policy": {"arn": None}}


# ══════════════════════════════════════════════════════════════════════
# State stores
# ══════════════════════════════════════════════════════════════════════

class TestMemoryStateStore:
    def test_load_save(self):
        store = MemoryStateStore()
        assert store.load().is_empty
        store.save(RecordedState(name="app", region="us-east-1"))
        assert store.load().name == "app"
        assert store.data == {"name": "app", "region": "us-east-1"}


class TestJSONFileStateStore:
    def test_missing_file_is_empty(self, tmp_path):
        store = JSONFileStateStore(tmp_path / "state.json")
        assert store.load().is_empty

    def test_roundtrip(self, tmp_path):
        path = tmp_path / "nested" / "state.json"
        store = JSONFileStateStore(path)
        store.save(RecordedState(name="app", arn="arn", policy=DOC))
        assert json.loads(path.read_text()) == {"name": "app", "arn": "arn", "policy": DOC}
        assert store.load().policy == DOC

    def test_cleared(self, tmp_path):
        store = JSONFileStateStore(tmp_path / "state.json")
        store.save(RecordedState(name="app"))
        store.save(RecordedState())
        assert json.loads((tmp_path / "state.json").read_text()) == {}

    def test_corrupt_file(self, tmp_path):
        path = tmp_path / "state.json"
        path.write_text("{not json")
        with pytest.raises(StateError):
            JSONFileStateStore(path).load()

    def test_non_object(self, tmp_path):
        path = tmp_path / "state.json"
        path.write_text("[]")
        with pytest.raises(StateError):
            JSONFileStateStore(path).load()


# ══════════════════════════════════════════════════════════════════════
# Logger
# ══════════════════════════════════════════════════════════════════════

class TestComponentLogger:
    def test_status(self, capfd):
        logger = ComponentLogger("test_rolesync", request_id="req123")
        logger.bind(role="app", region="us-east-1")
        logger.status("Deploying")
        captured = capfd.readouterr()
        entry = json.loads(captured.err.strip().splitlines()[-1])
        assert entry["message"] == "Deploying"
        assert entry["role"] == "app"
        assert entry["request_id"] == "req123"
        assert entry["operation"] == "status"

    def test_debug_hidden_at_info(self, capfd):
        logger = ComponentLogger("test_rolesync_debug")
        logger.debug("details")
        assert "details" not in capfd.readouterr().err

    def test_structured_formatter(self):
        fmt = StructuredFormatter()
        record = logging.LogRecord(
            name="test", level=logging.INFO, pathname="", lineno=0,
            msg="hi", args=(), exc_info=None,
        )
        record.region = "eu-west-1"
        record.request_id = "abc"
        output = fmt.format(record)
        assert '"region": "eu-west-1"' in output
        assert '"request_id": "abc"' in output
        assert "role" not in json.loads(output)


# ══════════════════════════════════════════════════════════════════════
# Async Support
# ══════════════════════════════════════════════════════════════════════

class TestAsyncWrap:
    def test_basic(self):
        def sync_fn(x: int) -> int:
            return x * 2

        async_fn = async_wrap(sync_fn)
        assert asyncio.run(async_fn(5)) == 10

    def test_preserves_name(self):
        def my_func():
            pass

        assert async_wrap(my_func).__name__ == "my_func"


class TestAsyncMixin:
    def test_only_listed_methods(self):
        class MyComponent(AsyncMixin):
            async_methods = ("deploy",)

            def deploy(self) -> str:
                return "done"

            def other(self) -> str:
                return "x"

        comp = MyComponent()
        assert asyncio.run(comp.adeploy()) == "done"
        assert not hasattr(comp, "aother")
