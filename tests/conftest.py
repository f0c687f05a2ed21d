# tests/conftest.py

import io
import uuid

import pytest
from rich.console import Console

from opmon.cluster.base import ClusterClient
from opmon.models.settings import SetupSettings
from opmon.reporters.console_reporter import ConsoleReporter


class FakeClusterClient(ClusterClient):
    """
    In-memory stand-in for the control plane. Attributes control how it answers;
    `calls` records every method invoked, in order.
    """

    def __init__(self):
        self.connected = True
        self.user = "kube:admin"
        self.allowed = True
        self.token = "eyJhbGciOiJSUzI1NiJ9.fake-token"
        self.route_host = "prometheus-k8s-openshift-monitoring.apps.example.com"
        self.pod_ready = True
        self.job_finished = True
        self.exec_output = "200"
        self.exec_error = None
        self.job_output = "SUCCESS\n"
        self.job_output_error = None
        self.launch_error = None
        self.delete_error = None

        self.namespaces = set()
        self.service_accounts = set()
        self.bindings = {}
        self.workloads = {}
        self.deleted = []
        self.launched = []
        self.exec_commands = []
        self.calls = []

    async def connect(self):
        self.calls.append("connect")
        return self.connected

    async def current_user(self):
        self.calls.append("current_user")
        return self.user

    async def can_i(self, verb, resource, namespace=None):
        self.calls.append("can_i")
        return self.allowed

    async def ensure_namespace(self, name):
        self.calls.append("ensure_namespace")
        if name in self.namespaces:
            return False
        self.namespaces.add(name)
        return True

    async def ensure_service_account(self, namespace, name):
        self.calls.append("ensure_service_account")
        key = (namespace, name)
        if key in self.service_accounts:
            return False
        self.service_accounts.add(key)
        return True

    async def bind_role(self, role, namespace, service_account):
        self.calls.append("bind_role")
        subjects = self.bindings.setdefault(role, [])
        subject = f"system:serviceaccount:{namespace}:{service_account}"
        if subject in subjects:
            return False
        subjects.append(subject)
        return True

    async def mint_token(self, namespace, service_account, duration_seconds):
        self.calls.append("mint_token")
        self.token_duration_seconds = duration_seconds
        return self.token

    async def resolve_route(self, namespace, name):
        self.calls.append("resolve_route")
        return self.route_host

    async def launch_workload(self, spec):
        self.calls.append("launch_workload")
        if self.launch_error:
            raise self.launch_error
        self.launched.append(spec)
        self.workloads[(spec.kind, spec.name)] = spec

    async def workload_ready(self, spec):
        return self.pod_ready

    async def workload_finished(self, spec):
        return self.job_finished

    async def exec_in_workload(self, spec, command):
        self.calls.append("exec_in_workload")
        self.exec_commands.append(command)
        if self.exec_error:
            raise self.exec_error
        return self.exec_output

    async def read_workload_output(self, spec):
        self.calls.append("read_workload_output")
        if self.job_output_error:
            raise self.job_output_error
        return self.job_output

    async def delete_resource(self, spec):
        self.calls.append("delete_resource")
        self.deleted.append((spec.kind, spec.name))
        if self.delete_error:
            raise self.delete_error
        self.workloads.pop((spec.kind, spec.name), None)


class FakeClock:
    """Clock whose sleep advances time instantly."""

    def __init__(self):
        self.now = 0.0
        self.sleeps = []

    def monotonic(self):
        return self.now

    async def sleep(self, seconds):
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture
def fake_cluster():
    return FakeClusterClient()


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def settings(tmp_path):
    """
    Settings with unique resource names and a temporary output directory, so
    tests never collide with each other or write into the working tree.
    """
    suffix = uuid.uuid4().hex[:6]
    return SetupSettings(
        namespace=f"dynatrace-monitoring-{suffix}",
        service_account=f"dynatrace-prometheus-{suffix}",
        output_dir=tmp_path,
        external_probe=False,
    )


@pytest.fixture
def reporter():
    """A console reporter writing into memory; read it with `reporter.console.export_text()`."""
    return ConsoleReporter(console=Console(record=True, width=200, file=io.StringIO()))


@pytest.fixture(autouse=True)
def reset_k8s_config_state():
    """
    Ensure each test starts without a cached Kubernetes configuration.
    """
    from opmon.core import k8s_client

    k8s_client.reset_k8s_config()
    yield
    k8s_client.reset_k8s_config()
