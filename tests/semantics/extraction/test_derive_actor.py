"""
Semantic test: actor resolution.

Invariant:
The acting identity is resolved per userIdentity.type. AssumedRole falls
back to the literal "AssumedRole" when the issuer chain is incomplete,
while Root / IAMUser / AWSService fall back to an empty string.
"""

from __future__ import annotations

import pytest

from cloudtrail_source.extract.extractor import UNKNOWN_USER_TYPE, derive_actor


def with_identity(identity) -> dict:
    return {"eventName": "X", "userIdentity": identity}


@pytest.mark.parametrize("user_type", ["Root", "IAMUser"])
def test_root_and_iam_user_use_user_name(user_type) -> None:
    assert derive_actor(with_identity({"type": user_type, "userName": "alice"})) == "alice"
    assert derive_actor(with_identity({"type": user_type})) == ""


def test_aws_service_uses_invoked_by() -> None:
    identity = {"type": "AWSService", "invokedBy": "lambda.amazonaws.com"}

    assert derive_actor(with_identity(identity)) == "lambda.amazonaws.com"
    assert derive_actor(with_identity({"type": "AWSService"})) == ""


def test_assumed_role_uses_session_issuer() -> None:
    identity = {
        "type": "AssumedRole",
        "userName": "ignored",
        "sessionContext": {"sessionIssuer": {"userName": "deploy-role"}},
    }

    assert derive_actor(with_identity(identity)) == "deploy-role"


@pytest.mark.parametrize(
    "identity",
    [
        {"type": "AssumedRole"},
        {"type": "AssumedRole", "sessionContext": {}},
        {"type": "AssumedRole", "sessionContext": {"sessionIssuer": {}}},
        {"type": "AssumedRole", "sessionContext": {"sessionIssuer": {"userName": None}}},
        {"type": "AssumedRole", "sessionContext": "broken"},
    ],
)
def test_assumed_role_falls_back_to_label(identity) -> None:
    assert derive_actor(with_identity(identity)) == "AssumedRole"


@pytest.mark.parametrize("user_type", ["AWSAccount", "FederatedUser"])
def test_labelled_types(user_type) -> None:
    assert derive_actor(with_identity({"type": user_type, "userName": "x"})) == user_type


@pytest.mark.parametrize("identity", [{"type": "SAMLUser"}, {}, {"type": None}, {"type": 3}])
def test_unknown_or_missing_type(identity) -> None:
    assert derive_actor(with_identity(identity)) == UNKNOWN_USER_TYPE


def test_no_user_identity_is_empty() -> None:
    assert derive_actor({"eventName": "X"}) == ""
    assert derive_actor({"eventName": "X", "userIdentity": None}) == ""
