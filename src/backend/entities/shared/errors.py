"""Failure taxonomy for the command pipeline.

Components raise these; the orchestrator turns them into
``FailureEnvelope`` responses so no failure reaches the caller as an
unhandled exception.
"""


class PipelineError(Exception):
    """Base class for every failure the pipeline reports to callers."""


class GenerationFailure(PipelineError):
    """The text generator was unreachable or errored."""


class MalformedOutputFailure(PipelineError):
    """The text generator replied with a payload of the wrong shape."""


class ResponseParseFailure(MalformedOutputFailure):
    """The text generator's reply is not a JSON object."""


class ValidationFailure(PipelineError):
    """A structured query was rejected before execution."""


class UnsupportedOperationFailure(ValidationFailure):
    """The operation is outside SELECT/INSERT/UPDATE/DELETE."""


class EmptyStatementFailure(ValidationFailure):
    """The statement text is blank."""


class ParameterMismatchFailure(ValidationFailure):
    """Placeholders and parameters do not line up one-to-one."""


class ExecutionFailure(PipelineError):
    """The database rejected or failed the statement."""
