"""
Tests for the result models — fatal versus partial runs.
"""

from devsetup.core.models.result import ErrorKind, RunOutcome, RunReport, StepResult


def _missing(tool: str, **kwargs) -> StepResult:
    return StepResult.failure(tool, "missing dependency: x", ErrorKind.MISSING_PREREQUISITE, **kwargs)


class TestStepResultFatal:
    def test_optional_missing_dependency_is_not_fatal(self):
        assert not _missing("vscode").is_fatal

    def test_prerequisite_failure_is_fatal(self):
        result = StepResult.failure("miniconda", "exit 1", ErrorKind.EXTERNAL_COMMAND_FAILURE, prerequisite=True)
        assert result.is_fatal

    def test_broken_chain_is_fatal(self):
        assert _missing("curl", breaks_chain=True).is_fatal

    def test_success_is_never_fatal(self):
        assert not StepResult.installed("miniconda", prerequisite=True).is_fatal


class TestRunReportOutcome:
    def test_partial_when_only_optional_tools_fail(self):
        report = RunReport()
        report.add(StepResult.installed("curl"))
        report.add(_missing("vscode"))
        assert report.outcome == RunOutcome.PARTIAL
        assert report.exit_code == 0

    def test_fatal_when_chain_breaks(self):
        report = RunReport()
        report.add(_missing("environment", breaks_chain=True))
        assert report.outcome == RunOutcome.FATAL
        assert report.exit_code == 1

    def test_fatal_reason(self):
        report = RunReport(fatal_reason="Unsupported operating system")
        assert report.outcome == RunOutcome.FATAL
        assert report.to_dict()["results"] == []
