"""Custom exceptions for the clipmix pipeline"""


class ClipmixError(Exception):
    """
    Base exception for all clipmix errors.

    Attributes:
        message (str): A description of the error.
        module (str): The module where the error originated.

    Usage:
        raise ClipmixError("An error occurred", module="segmentation")
    """
    def __init__(self, message: str, module: str = None):
        self.message = message
        self.module = module or "unknown"
        super().__init__(f"[{self.module}] {self.message}")


class DiscoveryError(ClipmixError):
    """
    Raised when the input folder is missing.

    This aborts the run before any file is touched.
    """


class ProbeError(ClipmixError):
    """Raised when ffprobe output has no parsable duration or dimensions"""
    def __init__(self, message: str, property_name: str = None, module: str = "ffprobe"):
        self.property_name = property_name
        super().__init__(message, module)


class ToolFailure(ClipmixError):
    """
    Raised when an external tool exits with a non-zero code and error output.

    Attributes:
        stderr (str): The captured error output of the tool.
        returncode (int): The process exit code.
    """
    def __init__(self, stderr: str, returncode: int = 1, module: str = "runner"):
        self.stderr = stderr
        self.returncode = returncode
        super().__init__(stderr, module)


class FingerprintError(ClipmixError):
    """Raised when a thumbnail frame cannot be decoded into a fingerprint"""


class InsufficientSegmentsError(ClipmixError):
    """Raised when fewer segments remain than a mix requires"""


class InsufficientDurationError(ClipmixError):
    """Raised when a source is too short for the requested direct-mix shape"""


class ConfigurationError(ClipmixError):
    """Error in run options or configuration"""


class DependencyError(ClipmixError):
    """Missing required external tools"""


class Cancelled(ClipmixError):
    """
    Raised when cancellation of the run has been requested.

    This is the only error allowed to unwind the whole batch; per-file
    handlers must re-raise it.
    """
    def __init__(self, message: str = "Operation cancelled", module: str = None):
        super().__init__(message, module)
