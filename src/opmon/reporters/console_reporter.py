# src/opmon/reporters/console_reporter.py
"""
A reporter that narrates the setup run and summarizes it in the console.
"""

import logging

from rich.console import Console
from rich.panel import Panel
from rich.rule import Rule
from rich.table import Table

from ..models.report import SetupReport, StepStatus
from .base_reporter import BaseReporter

logger = logging.getLogger(__name__)

NEXT_STEPS = """\
1. [green]Configure ActiveGate[/]
   - Review: {activegate}
   - Choose deployment method (custom.properties, UI, or ConfigMap)
   - Deploy configuration to your ActiveGate
   - Restart ActiveGate if using custom.properties

2. [green]Verify Metrics Ingestion[/]
   - Wait 2-3 minutes after ActiveGate configuration
   - In Dynatrace, go to: Data Explorer
   - Search for: cluster_operator_conditions

3. [green]Import Dashboard[/]
   - In Dynatrace: Dashboards > Import

4. [green]Configure Alerts[/]
   - Settings > Anomaly Detection > Metric events
   - Degraded operators (critical), unavailable operators (critical),
     stuck progressing state (warning)

5. [green]Test Alerting[/]
   - Simulate a degraded operator (in non-prod) and verify notification delivery"""


class ConsoleReporter(BaseReporter):
    """
    Renders the setup narrative to the console using the 'rich' library.
    """

    def __init__(self, console: Console = None):
        self.console = console or Console()

    def header(self, title: str):
        self.console.print(Rule(f"[bold blue]{title}[/]", style="blue"))

    def success(self, message: str):
        self.console.print(f"✓ {message}", style="green", highlight=False)

    def warning(self, message: str):
        self.console.print(f"⚠ {message}", style="yellow", highlight=False)

    def error(self, message: str):
        self.console.print(f"✗ {message}", style="bold red", highlight=False)

    def info(self, message: str):
        self.console.print(f"ℹ {message}", style="blue", highlight=False)

    def report(self, report: SetupReport):
        """
        Displays the per-step outcomes in a table, followed by the written files and next steps.
        """
        table = Table(
            title="Operator Monitoring Setup",
            header_style="bold magenta",
            show_lines=True,
        )
        table.add_column("Step", style="cyan")
        table.add_column("Status", justify="center")
        table.add_column("Details", style="white")

        styles = {StepStatus.OK: "green", StepStatus.WARNING: "yellow", StepStatus.INFO: "blue"}
        for outcome in report.outcomes:
            style = styles.get(outcome.status, "white")
            table.add_row(outcome.step, f"[{style}]{outcome.status.value}[/]", outcome.message)
        self.console.print(table)

        if report.artifacts:
            self.console.print("\n[yellow]Important Files Created:[/]")
            for path in report.artifacts:
                self.console.print(f"  - {path}", highlight=False)

        activegate = next((p.name for p in report.artifacts if p.suffix == ".yaml"), "the ActiveGate configuration")
        self.console.print(Panel(NEXT_STEPS.format(activegate=activegate), title="Next Steps", border_style="blue"))
        self.console.print(
            "[yellow]Security Reminder:[/] the generated token is long-lived. Store it securely and\n"
            "rotate it according to your organization's security policies."
        )

        if report.has_warnings:
            self.warning(f"Setup completed with {len(report.warnings)} warning(s). Review them above.")
        else:
            self.success("Setup completed successfully!")
