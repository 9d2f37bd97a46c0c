import subprocess

from funlog import log_calls
from rich import get_console, reconfigure
from rich import print as rprint

SRC_PATHS = ["src", "tests", "devtools"]
DOC_PATHS = ["README.md"]


reconfigure(emoji=not get_console().options.legacy_windows)  # No emojis on legacy windows.


def main(with_tests: bool = False):
    rprint()

    errcount = 0
    errcount += run(["codespell", "--write-changes", *SRC_PATHS, *DOC_PATHS])
    errcount += run(["ruff", "check", "--fix", *SRC_PATHS])
    errcount += run(["ruff", "format", *SRC_PATHS])
    errcount += run(["basedpyright", "--level", "error", "--stats", "src"], expect="0 errors")
    if with_tests:
        errcount += run(["pytest", "-q"])

    rprint()

    if errcount != 0:
        rprint(f"[bold red]:x: Lint failed with {errcount} errors.[/bold red]")
    else:
        rprint("[bold green]:white_check_mark: Lint passed![/bold green]")
    rprint()

    return errcount


@log_calls(level="warning", show_timing_only=True)
def run(cmd: list[str], expect: str | None = None) -> int:
    """Run a tool; with `expect`, also require that text in its stdout."""
    rprint()
    rprint(f"[bold green]>> {' '.join(cmd)}[/bold green]")
    try:
        result = subprocess.run(cmd, text=True, capture_output=expect is not None, check=expect is None)
    except KeyboardInterrupt:
        rprint("[yellow]Keyboard interrupt - Cancelled[/yellow]")
        return 1
    except subprocess.CalledProcessError as e:
        rprint(f"[bold red]Error: {e}[/bold red]")
        return 1

    if expect is not None:
        rprint(result.stdout)
        if result.stderr:
            rprint(result.stderr)
        if expect not in result.stdout:
            return 1
    return 0


if __name__ == "__main__":
    import sys

    exit(main(with_tests="--tests" in sys.argv))
