"""
Error taxonomy for a generation run.

Every failure that can happen between pressing "Run generator" and a room
landing in the map store derives from GenerationError. The pipeline catches
GenerationError at the run trigger, so none of these ever reach the render
stage or leave the map store half-updated.

    GenerationError
    ├── MissingPathsError      run requested with an incomplete path set
    ├── ProcessSpawnFailure    OS refused to start the process
    ├── ProcessExitFailure     non-zero exit status
    ├── GenerationTimeout      run exceeded the configured timeout
    ├── GenerationCancelled    user cancelled the run
    ├── TextDecodeFailure      output was not valid UTF-8
    └── DecodeError
        ├── ParseError         output was not well-formed JSON
        ├── ShapeError         top level is not a usable single-key object
        └── SchemaError        room fields missing or mistyped
"""

from typing import Optional, Sequence


class GenerationError(Exception):
    """Base class for recoverable failures of a single generation run."""


class MissingPathsError(GenerationError):
    """Raised when one or more generator paths are unset."""

    def __init__(self, missing: Sequence[str]):
        self.missing = tuple(missing)
        super().__init__(
            f"Some paths are missing, script cannot be run: {', '.join(self.missing)}"
        )


class ProcessSpawnFailure(GenerationError):
    """Raised when the operating system cannot start the generator process."""

    def __init__(self, command: Sequence[str], reason: str):
        self.command = list(command)
        self.reason = reason
        super().__init__(f"Failed to execute process {self.command[0]!r}: {reason}")


class ProcessExitFailure(GenerationError):
    """Raised when the generator exits with a non-zero status."""

    def __init__(self, returncode: int, stderr: str = ""):
        self.returncode = returncode
        self.stderr = stderr
        detail = stderr.strip().splitlines()[-1] if stderr.strip() else "no stderr output"
        super().__init__(f"Generator exited with status {returncode}: {detail}")


class GenerationTimeout(GenerationError):
    """Raised when a run exceeds its timeout; the process has been killed."""

    def __init__(self, timeout: float):
        self.timeout = timeout
        super().__init__(f"Generator did not finish within {timeout:g}s and was killed")


class GenerationCancelled(GenerationError):
    """Raised when the user cancels an in-flight run."""

    def __init__(self, run_id: Optional[int] = None):
        self.run_id = run_id
        super().__init__("Generation cancelled by user")


class TextDecodeFailure(GenerationError):
    """Raised when captured output bytes are not valid UTF-8."""

    def __init__(self, error: UnicodeDecodeError):
        self.position = error.start
        super().__init__(f"Generator output is not valid UTF-8 (byte {error.start}): {error.reason}")


class DecodeError(GenerationError):
    """Base class for failures turning output text into a Room."""


class ParseError(DecodeError):
    """Output text is not well-formed JSON."""


class ShapeError(DecodeError):
    """Top-level document is not an object with a usable room key."""


class SchemaError(DecodeError):
    """Room content is missing required fields or has mistyped ones."""

    def __init__(self, room_name: str, path: str, problem: str):
        self.room_name = room_name
        self.path = path
        super().__init__(f"Room {room_name!r}: {path} {problem}")


class StateTransitionError(RuntimeError):
    """Raised on a transition the application state machine does not allow."""
