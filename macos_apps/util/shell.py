"""Safe subprocess execution utilities."""

import subprocess
from dataclasses import dataclass


@dataclass
class ShellResult:
    """Result from a shell command execution."""

    code: int
    out: str
    err: str

    @property
    def success(self) -> bool:
        """Check if the command succeeded (exit code 0)."""
        return self.code == 0

    def __bool__(self) -> bool:
        return self.success

    def lines(self) -> list[str]:
        """Return non-empty stdout lines."""
        return [line for line in self.out.split("\n") if line.strip()]


def run(cmd: list[str], timeout: float = 6) -> ShellResult:
    """
    Execute a command without shell interpretation.

    Args:
        cmd: Command and arguments as a list of strings (e.g., ['mdfind', '-onlyin', '/Applications', ...])
        timeout: Maximum execution time in seconds (default: 6)

    Returns:
        ShellResult with exit code, stdout, and stderr

    Raises:
        TimeoutError: If command execution exceeds timeout
        FileNotFoundError: If the command executable is not found

    Example:
        >>> result = run(['iconutil', '-c', 'iconset', 'AppIcon.icns', '-o', '/tmp/AppIcon.iconset'])
        >>> if not result.success:
        ...     print(result.err)
    """
    try:
        completed = subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            timeout=timeout,
            shell=False,
            check=False
        )
    except subprocess.TimeoutExpired as e:
        raise TimeoutError(
            f"Command timed out after {timeout}s: {' '.join(cmd)}"
        ) from e

    return ShellResult(
        code=completed.returncode,
        out=_normalize_output(completed.stdout),
        err=_normalize_output(completed.stderr)
    )


def _normalize_output(text: str) -> str:
    """Normalize line endings and trim surrounding whitespace."""
    if not text:
        return ""

    normalized = text.replace("\r\n", "\n").replace("\r", "\n")
    return normalized.strip()
