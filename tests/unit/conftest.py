"""Shared pytest fixtures for engine unit tests."""

import pytest

from crd_apply_engine.models.coordinate import ResourceCoordinate
from crd_apply_engine.models.wait import ApplyOptions
from tests.fixtures.fake_cluster import FakeClock, FakeContext, FakeObjectClient


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def context(clock):
    """Context whose sleeps advance the shared fake clock."""
    return FakeContext(clock=clock)


@pytest.fixture
def fake_client(clock):
    return FakeObjectClient(clock)


@pytest.fixture
def coordinate():
    return ResourceCoordinate(
        group="camel.apache.org",
        version="v1",
        resource_kind="builds",
        namespace="default",
        name="sample",
    )


@pytest.fixture
def apply_options():
    return ApplyOptions(field_manager="crd-apply-engine", force_conflicts=False)
