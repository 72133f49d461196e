"""Unit tests for the generic per-kind resource adapter."""

from unittest.mock import MagicMock, patch

import pytest

from crd_apply_engine.errors import (
    ClientError,
    ConfigurationError,
    PatchFailedError,
    ResourceNotFoundError,
    WaitTimeoutError,
)
from crd_apply_engine.models.resource import ResourceModel
from crd_apply_engine.models.wait import DeletionPropagation, WaitPolicy
from crd_apply_engine.resources.custom_resource import CustomResource, build_resource
from crd_apply_engine.resources.kind import KindRegistry, ResourceKind
from crd_apply_engine.settings import Settings
from tests.fixtures.fake_cluster import ABSENT, build_document, ready_conditions

BUILD = ResourceKind("camel.apache.org", "v1", "builds", "Build")
CILIUM_NODE = ResourceKind("cilium.io", "v2", "ciliumnodes", "CiliumNode", namespaced=False)


@pytest.fixture
def engine_settings():
    return Settings(
        CRD_ENGINE_FIELD_MANAGER="platform-team",
        CRD_ENGINE_FORCE_CONFLICTS="true",
        CRD_ENGINE_WAIT_TIMEOUT_SECONDS="20",
        CRD_ENGINE_POLL_INTERVAL_SECONDS="4",
    )


@pytest.fixture
def resource(fake_client, engine_settings):
    return CustomResource(BUILD, fake_client, engine_settings)


def build_model(**overrides):
    values = {
        "metadata": {"name": "sample", "namespace": "default"},
        "spec": {"tasks": [{"builder": {"name": "builder"}}]},
    }
    values.update(overrides)
    return ResourceModel(**values)


class TestApplyOptions:
    """Test cases for resolving server-side apply options."""

    def test_provider_defaults(self, resource):
        options = resource.apply_options(build_model())

        assert options.field_manager == "platform-team"
        assert options.force_conflicts is True

    def test_resource_overrides(self, resource):
        options = resource.apply_options(
            build_model(field_manager="app-team", force_conflicts=False)
        )

        assert options.field_manager == "app-team"
        assert options.force_conflicts is False


class TestCreateAndUpdate:
    """Test cases for create and update."""

    def test_create_applies_full_document(self, resource, fake_client, context):
        fake_client.apply_response = build_document()

        result = resource.create(build_model(), context)

        assert fake_client.applied == [
            {
                "apiVersion": "camel.apache.org/v1",
                "kind": "Build",
                "metadata": {"name": "sample", "namespace": "default"},
                "spec": {"tasks": [{"builder": {"name": "builder"}}]},
            }
        ]
        assert result.id == "default/sample"
        assert result.spec == {"tasks": [{"builder": {"name": "builder"}}]}

    def test_update_waits_with_provider_defaults(
        self, resource, fake_client, context, clock
    ):
        """Wait blocks without timing inherit the provider defaults."""
        fake_client.set_timeline(
            (0, build_document()),
            (6, build_document(conditions=ready_conditions())),
        )
        model = build_model(
            wait_for_upsert=[
                {"jsonpath": "status.conditions[0].status", "value": "True"}
            ]
        )

        resource.update(model, context)

        assert context.sleeps == [4, 4]
        assert clock() == 8

    def test_wait_timeout_propagates(self, resource, fake_client, context):
        fake_client.set_timeline((0, build_document()))
        model = build_model(
            wait_for_upsert=[{"jsonpath": "status.phase", "timeout": 1, "poll_interval": 1}]
        )

        with pytest.raises(WaitTimeoutError):
            resource.create(model, context)

    def test_patch_failure_propagates(self, resource, fake_client, context):
        fake_client.apply_error = ClientError("conflict", status=409)

        with pytest.raises(PatchFailedError):
            resource.create(build_model(), context)

    def test_namespace_required(self, resource):
        with pytest.raises(ConfigurationError):
            resource.create(build_model(metadata={"name": "sample"}))


class TestRead:
    """Test cases for refreshing state."""

    def test_refreshes_from_live_object(self, resource, fake_client, context):
        live = build_document()
        live["metadata"]["labels"] = {"team": "a"}
        live["spec"] = {"tasks": []}
        fake_client.current = live

        result = resource.read(build_model(), context)

        assert result.metadata.labels == {"team": "a"}
        assert result.spec == {"tasks": []}
        assert result.id == "default/sample"

    def test_missing_object_returns_none(self, resource, fake_client, context):
        fake_client.current = ABSENT

        assert resource.read(build_model(), context) is None

    @patch("crd_apply_engine.observability.metrics.OPERATION_ERRORS")
    @patch("crd_apply_engine.observability.metrics.OPERATIONS_TOTAL")
    def test_missing_object_counts_as_success(
        self, mock_total, mock_errors, resource, fake_client, context
    ):
        fake_client.current = ABSENT

        resource.read(build_model(), context)

        mock_total.labels.assert_called_with(
            operation="read", resource_type=BUILD.type_name, result="success"
        )
        mock_errors.labels.assert_not_called()


class TestDelete:
    """Test cases for deletion."""

    def test_delete_with_wait(self, resource, fake_client, context):
        fake_client.set_timeline((0, build_document()), (4, ABSENT))
        model = build_model(
            deletion_propagation="background",
            wait_for_delete={"poll_interval": 2},
        )

        resource.delete(model, context)

        assert fake_client.deleted == [DeletionPropagation.BACKGROUND]
        assert fake_client.get_count == 3

    def test_delete_without_wait(self, resource, fake_client, context):
        fake_client.current = build_document()

        resource.delete(build_model(), context)

        assert fake_client.operations() == ["delete"]

    def test_delete_of_missing_object(self, resource, fake_client, context):
        resource.delete(build_model(wait_for_delete={}), context)

        assert fake_client.operations() == ["delete"]

    def test_wait_for_delete_uses_provider_default_timeout(
        self, fake_client, engine_settings
    ):
        resource = CustomResource(BUILD, fake_client, engine_settings)
        resource.deleter = MagicMock()
        model = build_model(wait_for_delete={"poll_interval": 1})

        resource.delete(model)

        call_args = resource.deleter.delete_and_wait.call_args
        assert call_args.args[2] == WaitPolicy(timeout=20, poll_interval=1)


class TestImport:
    """Test cases for import ID parsing."""

    def test_namespaced(self, resource):
        model = resource.import_state("default/sample")

        assert model.id == "default/sample"
        assert model.metadata.name == "sample"
        assert model.metadata.namespace == "default"

    @pytest.mark.parametrize("import_id", ["sample", "a/b/c", "/sample", "default/", ""])
    def test_namespaced_rejects_other_formats(self, resource, import_id):
        with pytest.raises(ConfigurationError) as exc_info:
            resource.import_state(import_id)

        assert exc_info.value.args[0] == (
            f"Expected import identifier with format: 'namespace/name' Got: '{import_id}'"
        )

    def test_cluster_scoped(self, fake_client):
        resource = CustomResource(CILIUM_NODE, fake_client)

        model = resource.import_state("node-1")

        assert model.metadata.name == "node-1"
        assert model.metadata.namespace is None

    def test_cluster_scoped_rejects_namespace(self, fake_client):
        resource = CustomResource(CILIUM_NODE, fake_client)

        with pytest.raises(ConfigurationError, match="format: 'name'"):
            resource.import_state("default/node-1")


class TestDataSource:
    """Test cases for looking up existing objects."""

    def test_found(self, resource, fake_client, context):
        fake_client.current = build_document(phase="Succeeded")

        model = resource.read_data_source("sample", "default", context)

        assert model.id == "default/sample"
        assert model.spec == build_document()["spec"]

    def test_missing(self, resource, fake_client, context):
        with pytest.raises(ResourceNotFoundError):
            resource.read_data_source("sample", "default", context)


class TestBuildResource:
    """Test cases for the adapter factory."""

    def test_from_registry(self, fake_client):
        registry = KindRegistry((BUILD,))

        resource = build_resource("camel_apache_org_build_v1", fake_client, registry)

        assert resource.kind is BUILD
        assert resource.type_name == "camel_apache_org_build_v1"

    def test_default_registry(self, fake_client):
        resource = build_resource("cilium_io_cilium_node_v2", fake_client)

        assert not resource.kind.namespaced

    def test_unknown(self, fake_client):
        with pytest.raises(ConfigurationError):
            build_resource("example_com_widget_v1", fake_client, KindRegistry())
