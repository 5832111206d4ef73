"""Shared fixtures: a config rooted in tmp_path and an allocated run context."""

import pytest

from walkthru.config import WalkthroughConfig
from walkthru.workspace import allocate_run_workspace


@pytest.fixture
def config(tmp_path):
    return WalkthroughConfig(output_root=tmp_path / "TestCases", resolve_timeout_ms=50, settle_timeout_ms=50)


@pytest.fixture
def run_context(config):
    return allocate_run_workspace(config, "student", "courses")
