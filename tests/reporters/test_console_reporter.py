# tests/reporters/test_console_reporter.py

from pathlib import Path

from opmon.models.report import SetupReport, StepStatus


def test_report_renders_outcomes_and_files(reporter):
    report = SetupReport()
    report.add("Namespace", StepStatus.OK, "Created namespace: dynatrace-monitoring")
    report.add("Connectivity", StepStatus.WARNING, "Could not verify Prometheus access (HTTP 403).")
    report.artifacts.append(Path("out/activegate-prometheus-config.yaml"))

    reporter.report(report)
    text = reporter.console.export_text()

    assert "Created namespace: dynatrace-monitoring" in text
    assert "warning" in text
    assert "out/activegate-prometheus-config.yaml" in text
    assert "Review: activegate-prometheus-config.yaml" in text
    assert "Setup completed with 1 warning(s)" in text


def test_clean_report(reporter):
    report = SetupReport()
    report.add("Token", StepStatus.OK, "Generated long-lived token (10 years)")

    reporter.report(report)

    assert "Setup completed successfully!" in reporter.console.export_text()


def test_narrative_symbols(reporter):
    reporter.header("Creating Namespace")
    reporter.success("done")
    reporter.warning("careful")
    reporter.error("broken")
    reporter.info("fyi")

    text = reporter.console.export_text()
    assert "Creating Namespace" in text
    for line in ("✓ done", "⚠ careful", "✗ broken", "ℹ fyi"):
        assert line in text
