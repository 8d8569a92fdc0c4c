"""
Console reporting shared by the generator, the attacks and the driver.
"""

# Levels that are printed even when verbose mode is off
ALWAYS_SHOWN = ('WARNING', 'ERROR', 'SUCCESS')

PREFIXES = {
    'SUCCESS': "[✓]",
    'ERROR': "[✗]",
    'WARNING': "[!]",
}


class Reporter:
    """Mixin that gives a class a verbose-gated ``log`` method."""

    def __init__(self, verbose: bool = False):
        self.verbose = verbose

    def log(self, message: str, level: str = 'INFO') -> None:
        """Print a message if verbose mode is enabled or for important messages."""
        if self.verbose or level in ALWAYS_SHOWN:
            prefix = PREFIXES.get(level, f"[{level}]")
            print(f"{prefix} {message}")

    def progress(self, message: str) -> None:
        """Overwrite the current console line with a progress update (verbose only)."""
        if self.verbose:
            print(message, end='\r')
