"""
Fallback resolver chain tests
"""

import sys
from pathlib import Path
from unittest.mock import Mock

import pytest

# Add parent to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from launchpad.infra import FallbackChain, ResolverStep
from launchpad.errors import RpcError, SdkError


def test_first_answer_wins():
    api = Mock(return_value="from-api")
    rpc = Mock(return_value="from-rpc")
    chain = FallbackChain("pool_info", [ResolverStep("api", api), ResolverStep("rpc", rpc)])

    assert chain.resolve_with_source("pool") == ("from-api", "api")
    api.assert_called_once_with("pool")
    rpc.assert_not_called()


def test_none_moves_to_next_step():
    chain = FallbackChain("pool_info", [
        ResolverStep("api", Mock(return_value=None)),
        ResolverStep("rpc", Mock(return_value=None)),
        ResolverStep("registry", Mock(return_value="stored")),
    ])
    assert chain.resolve_with_source("pool") == ("stored", "registry")


def test_launchpad_errors_move_to_next_step():
    chain = FallbackChain("pool_info", [
        ResolverStep("api", Mock(side_effect=RpcError.timeout("https://api", 30))),
        ResolverStep("rpc", Mock(side_effect=SdkError.request_failed("pool/rpc-info", "down"))),
        ResolverStep("registry", Mock(return_value="stored")),
    ])
    assert chain.resolve("pool") == "stored"


def test_other_exceptions_propagate():
    registry = Mock(return_value="stored")
    chain = FallbackChain("pool_info", [
        ResolverStep("api", Mock(side_effect=TypeError("bug"))),
        ResolverStep("registry", registry),
    ])
    with pytest.raises(TypeError):
        chain.resolve("pool")
    registry.assert_not_called()


def test_disabled_steps_are_skipped_per_call():
    production = {"on": False}
    api = Mock(return_value="from-api")
    chain = FallbackChain("pool_info", [
        ResolverStep("api", api, enabled=lambda: production["on"]),
        ResolverStep("rpc", Mock(return_value="from-rpc")),
    ])

    assert chain.resolve("pool") == "from-rpc"
    api.assert_not_called()

    production["on"] = True
    assert chain.resolve("pool") == "from-api"


def test_every_step_missing_returns_none():
    chain = FallbackChain("pool_info", [ResolverStep("rpc", Mock(return_value=None))])
    assert chain.resolve_with_source("pool") == (None, None)


def test_empty_list_is_an_answer():
    registry = Mock(return_value=["stored"])
    chain = FallbackChain("pools_by_token", [
        ResolverStep("api", Mock(return_value=[])),
        ResolverStep("registry", registry),
    ])
    assert chain.resolve("mint") == []
    registry.assert_not_called()
