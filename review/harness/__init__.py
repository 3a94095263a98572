"""Template test harness — instantiate and compile package templates."""

from review.harness.driver import TemplateHarness
from review.harness.runner import CommandRunner, SubprocessRunner

__all__ = ["TemplateHarness", "CommandRunner", "SubprocessRunner"]
