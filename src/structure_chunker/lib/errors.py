"""Custom exception hierarchy for structure chunker configuration and processing."""


class StructureChunkerError(Exception):
    """Base exception for all structure chunker errors.

    All chunker-specific exceptions inherit from this class, enabling
    centralized exception handling by callers.
    """

    pass


class ConfigError(StructureChunkerError):
    """Exception raised for configuration errors.

    Raised when chunker configuration loading, parsing or validation fails.
    Carries the offending field so users can locate the problem quickly.

    Attributes:
        field: The configuration field that caused the error
        message: Human-readable error message describing the issue
    """

    def __init__(self, field: str, message: str) -> None:
        """Initialize ConfigError with field and message.

        Args:
            field: Configuration field name where error occurred
            message: Descriptive error message
        """
        self.field = field
        self.message = message
        super().__init__(f"Configuration error in '{field}': {message}")


class ValidationError(StructureChunkerError):
    """Exception raised when a single value fails validation.

    Attributes:
        field: The field that failed validation
        message: Description of the validation failure
        expected: Human description of expected value/type
        actual: The actual value that failed validation
    """

    def __init__(
        self,
        field: str,
        message: str,
        expected: str,
        actual: str,
    ) -> None:
        """Initialize ValidationError with detailed information.

        Args:
            field: Field that failed validation (dot notation for nested fields)
            message: Description of what went wrong
            expected: Human-readable description of expected value
            actual: The actual value that failed
        """
        self.field = field
        self.message = message
        self.expected = expected
        self.actual = actual
        full_message = (
            f"Validation error in '{field}': {message}\n"
            f"  Expected: {expected}\n"
            f"  Got: {actual}"
        )
        super().__init__(full_message)


class FileNotFoundError(StructureChunkerError):
    """Exception raised when a chunker configuration file is missing.

    Attributes:
        path: Path to the file that was not found
        message: Human-readable error message
    """

    def __init__(self, path: str, message: str) -> None:
        """Initialize FileNotFoundError with path and message.

        Args:
            path: Path to the file that was not found
            message: Descriptive error message, optionally with suggestions
        """
        self.path = path
        self.message = message
        super().__init__(f"File not found: {path}\n{message}")


class RuleError(StructureChunkerError):
    """Exception raised when a chunking rule or rule set is malformed.

    Attributes:
        rule_name: Name of the offending rule (or "rules" for the whole set)
        message: Human-readable error message
    """

    def __init__(self, rule_name: str, message: str) -> None:
        """Create a rule error with the rule name for context."""
        self.rule_name = rule_name
        self.message = message
        super().__init__(f"Invalid chunking rule '{rule_name}': {message}")


class ChunkingError(StructureChunkerError):
    """Exception raised when a document cannot be processed."""

    def __init__(self, message: str) -> None:
        """Create a chunking error."""
        self.message = message
        super().__init__(message)


class GraphIntegrityError(StructureChunkerError):
    """Exception raised when a structural graph violates its invariants.

    Covers elements with more than one hierarchical parent, cycles in the
    hierarchical subgraph, and overlapping element offsets.

    Attributes:
        message: Human-readable error message
    """

    def __init__(self, message: str) -> None:
        """Create a graph integrity error."""
        self.message = message
        super().__init__(message)
