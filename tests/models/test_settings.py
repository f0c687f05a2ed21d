from pathlib import Path

import pytest
from pydantic import ValidationError

from opmon.core.config import Config
from opmon.models.endpoints import PrometheusEndpoints
from opmon.models.settings import SetupSettings


def test_defaults_match_original_resource_names():
    settings = SetupSettings()

    assert settings.namespace == "dynatrace-monitoring"
    assert settings.service_account == "dynatrace-prometheus"
    assert settings.cluster_role == "cluster-monitoring-view"
    assert settings.service_account_user == "system:serviceaccount:dynatrace-monitoring:dynatrace-prometheus"
    assert settings.internal_endpoint == "https://prometheus-k8s.openshift-monitoring.svc:9091"
    assert settings.output_path(settings.token_file) == Path(".") / "dynatrace-prometheus-token.txt"


def test_from_config_applies_overrides_and_ignores_none():
    cfg = Config()
    cfg.NAMESPACE = "from-env"
    cfg.SETTLE_TIME = 3.0

    settings = SetupSettings.from_config(cfg, service_account="custom-sa", namespace=None)

    assert settings.namespace == "from-env"
    assert settings.service_account == "custom-sa"
    assert settings.settle_time == 3.0


def test_invalid_duration_rejected():
    with pytest.raises(ValidationError):
        SetupSettings(token_duration="forever")


def test_negative_timeout_rejected():
    with pytest.raises(ValidationError):
        SetupSettings(ready_timeout=-5)


def test_unknown_field_rejected():
    with pytest.raises(ValidationError):
        SetupSettings(nmespace="typo")


def test_endpoint_query_urls():
    endpoints = PrometheusEndpoints(external="https://prom.apps.example.com/", internal="https://prom.svc:9091")

    assert endpoints.has_external
    assert endpoints.query_url("up") == "https://prom.svc:9091/api/v1/query?query=up"
    assert endpoints.query_url("up", external=True) == "https://prom.apps.example.com/api/v1/query?query=up"
    assert not PrometheusEndpoints(internal="https://prom.svc:9091").has_external
