# src/opmon/cli/setup.py
"""
Implements the `setup` and `check` commands of the opmon CLI.
"""

import asyncio
import logging
import traceback
from pathlib import Path
from typing import Optional

import typer
from pydantic import ValidationError
from typing_extensions import Annotated

from ..cluster.kubernetes import KubernetesClusterClient
from ..core.config import config
from ..core.exceptions import SetupError
from ..core.workflow import ProvisioningWorkflow
from ..models.report import SetupReport
from ..models.settings import SetupSettings
from ..reporters.console_reporter import ConsoleReporter

logger = logging.getLogger(__name__)


def build_settings(**overrides) -> SetupSettings:
    """Builds SetupSettings from the environment config, turning validation errors into CLI errors."""
    try:
        return SetupSettings.from_config(config, **overrides)
    except ValidationError as e:
        raise typer.BadParameter(str(e))


async def _run_setup(settings: SetupSettings, reporter: ConsoleReporter) -> SetupReport:
    cluster = KubernetesClusterClient(config_file=config.KUBECONFIG)
    try:
        workflow = ProvisioningWorkflow(cluster, settings=settings, reporter=reporter)
        return await workflow.run()
    finally:
        await cluster.close()


async def _run_check(settings: SetupSettings, reporter: ConsoleReporter) -> str:
    cluster = KubernetesClusterClient(config_file=config.KUBECONFIG)
    try:
        workflow = ProvisioningWorkflow(cluster, settings=settings, reporter=reporter)
        return await workflow.check_prerequisites()
    finally:
        await cluster.close()


def setup(
    namespace: Annotated[
        Optional[str], typer.Option("--namespace", "-n", help="Namespace to create for the monitoring identity.")
    ] = None,
    service_account: Annotated[
        Optional[str], typer.Option("--service-account", help="Service account used to query Prometheus.")
    ] = None,
    token_duration: Annotated[
        Optional[str], typer.Option("--token-duration", help="Token validity (e.g., '87600h', '365d').")
    ] = None,
    output_dir: Annotated[
        Optional[Path], typer.Option("--output-dir", "-o", help="Directory receiving the generated files.")
    ] = None,
    ready_timeout: Annotated[
        Optional[float], typer.Option("--ready-timeout", help="Seconds to wait for the probe pod.")
    ] = None,
    settle_time: Annotated[
        Optional[float], typer.Option("--settle-time", help="Seconds to wait for the verification job.")
    ] = None,
    skip_external_probe: Annotated[
        bool, typer.Option("--skip-external-probe", help="Do not probe the external route from this machine.")
    ] = False,
):
    """
    Configure the cluster for Dynatrace Prometheus scraping and write the connection artifacts.
    """
    settings = build_settings(
        namespace=namespace,
        service_account=service_account,
        token_duration=token_duration,
        output_dir=output_dir,
        ready_timeout=ready_timeout,
        settle_time=settle_time,
        external_probe=False if skip_external_probe else None,
    )
    reporter = ConsoleReporter()
    reporter.header("OpenShift Operator Monitoring Setup")
    reporter.console.print("This will configure Dynatrace monitoring for OpenShift cluster operators\n")

    try:
        report = asyncio.run(_run_setup(settings, reporter))
    except SetupError as e:
        logger.debug("Setup aborted: %s", e)
        raise typer.Exit(code=1)
    except Exception as e:
        logger.error(f"An unexpected error occurred during setup: {e}")
        logger.error("Setup failed: %s", traceback.format_exc())
        raise typer.Exit(code=1)

    reporter.report(report)


def check(
    namespace: Annotated[
        Optional[str], typer.Option("--namespace", "-n", help="Namespace the setup would create.")
    ] = None,
):
    """
    Verify the cluster session and privileges without changing anything.
    """
    settings = build_settings(namespace=namespace)
    reporter = ConsoleReporter()
    try:
        user = asyncio.run(_run_check(settings, reporter))
    except SetupError:
        raise typer.Exit(code=1)
    reporter.success(f"Ready to run setup as {user}")
