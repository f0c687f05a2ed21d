# src/opmon/reporters/base_reporter.py
"""
Defines the abstract base class for all reporters.
"""

from abc import ABC, abstractmethod

from ..models.report import SetupReport


class BaseReporter(ABC):
    """
    Abstract Base Class for all reporters.

    The workflow narrates each step through a reporter; the final summary is
    rendered from the SetupReport.
    """

    @abstractmethod
    def header(self, title: str):
        pass

    @abstractmethod
    def success(self, message: str):
        pass

    @abstractmethod
    def warning(self, message: str):
        pass

    @abstractmethod
    def error(self, message: str):
        pass

    @abstractmethod
    def info(self, message: str):
        pass

    @abstractmethod
    def report(self, report: SetupReport):
        """Present the outcome of a completed run."""
        pass
