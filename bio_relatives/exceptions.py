"""
Exceptions raised by bio-relatives.

Every error the package raises on purpose derives from GenomeError, so
the command line can report a single diagnostic line for any of them.
"""

from typing import Optional


class GenomeError(Exception):
    """Base exception for all bio-relatives errors."""
    pass


class InvalidIntervalError(GenomeError, ValueError):
    """Raised when a genomic interval is malformed."""

    def __init__(self, message: str, chromosome: str = None, start: int = None,
                 end: int = None, label: str = None):
        self.chromosome = chromosome
        self.start = start
        self.end = end
        self.label = label

        if chromosome is not None:
            message = f"{message}: [{chromosome}, {start}, {end}, {label}]"

        super().__init__(message)


class InvalidRegionError(GenomeError, ValueError):
    """Raised when an assembled region violates its invariants."""
    pass


class GenomeFileError(GenomeError):
    """Raised when an input file is missing, unreadable or malformed."""

    def __init__(self, message: str, filename: str = None, line_number: int = None):
        self.filename = filename
        self.line_number = line_number

        if line_number is not None:
            message = f"line {line_number}: {message}"
        if filename is not None:
            message = f"File [{filename}] {message}"

        super().__init__(message)


class AssemblyError(GenomeError):
    """Raised when a region cannot be assembled for a person."""
    pass


class ComparisonError(GenomeError):
    """Raised when two regions cannot be compared."""
    pass


class LengthMismatchError(ComparisonError):
    """Raised by Hamming comparison when sequence lengths differ."""

    def __init__(self, first_length: int, second_length: int):
        self.first_length = first_length
        self.second_length = second_length
        super().__init__(
            f"length mismatch: {first_length} vs {second_length}"
        )


class RegionPairingError(ComparisonError):
    """Raised when two regions do not describe the same locus."""
    pass


class OutcomeTypeError(GenomeError, TypeError):
    """Raised when an aggregator receives an outcome for another mode."""
    pass


class EmptyResultError(GenomeError):
    """Raised when analysis is requested before any outcome was added."""

    def __init__(self, message: str = "no data to analyze"):
        super().__init__(message)


class FeatureComparisonError(GenomeError):
    """Wraps the first failure that aborted the comparison of one feature."""

    def __init__(self, feature, stage: str, cause: Optional[BaseException] = None):
        self.feature = feature
        self.stage = stage
        self.cause = cause

        message = f"Comparison of {feature} failed during {stage}"
        if cause is not None:
            message = f"{message}: {cause}"

        super().__init__(message)


class PipelineError(GenomeError):
    """Raised when a whole comparison run has to be abandoned."""
    pass


class ConfigurationError(GenomeError):
    """Raised for invalid configuration values."""

    def __init__(self, message: str, config_file: str = None, parameter: str = None):
        self.config_file = config_file
        self.parameter = parameter

        if config_file is not None:
            message = f"Configuration error in {config_file}: {message}"
        if parameter is not None:
            message = f"{message} (parameter: {parameter})"

        super().__init__(message)


class TaskCancelledError(GenomeError):
    """Raised inside a task that started after its group was cancelled."""
    pass
