"""Interactive REPL (Read-Eval-Print Loop) for the simulator.

The classic loop:

    1. **Read** — display a prompt and read user input.
    2. **Eval** — pass the command to ``shell.execute()``.
    3. **Print** — display the result.
    4. **Loop** — repeat until the shell returns the exit sentinel.

The shell is fully testable (returns strings, no I/O); the REPL is the
thin I/O wrapper that connects it to ``stdin``/``stdout``.
"""

import readline
from collections.abc import Callable

from py_ossim import __version__
from py_ossim.shell import Shell

_BANNER_WIDTH = 38
PROMPT = "ossim $ "


def format_banner() -> str:
    """Return the start-up banner."""
    border = "=" * _BANNER_WIDTH
    return (
        f"\n  {border}\n            PyOSSim v{__version__}\n"
        f"   Deadlock & CPU scheduling simulator\n  {border}\n"
        "\nType 'help' for commands, 'exit' to quit.\n"
    )


def make_completer(shell: Shell) -> Callable[[str, int], str | None]:
    """Return a readline completer over the shell's command names."""

    def complete(text: str, state: int) -> str | None:
        matches = [name for name in shell.command_names if name.startswith(text)]
        return matches[state] if state < len(matches) else None

    return complete


def run() -> None:
    """Run the interactive REPL.

    Handles Ctrl+C and Ctrl+D as a graceful exit.
    """
    shell = Shell()

    readline.set_completer(make_completer(shell))
    readline.set_completer_delims(" \t")
    readline.parse_and_bind("tab: complete")

    print(format_banner())  # noqa: T201

    try:
        while True:
            try:
                command = input(PROMPT)
            except EOFError:
                # Ctrl+D — graceful exit
                print()  # noqa: T201
                break

            result = shell.execute(command)
            if result == Shell.EXIT_SENTINEL:
                break
            if result:
                print(result)  # noqa: T201

    except KeyboardInterrupt:
        print("\nInterrupted.")  # noqa: T201

    finally:
        print("Bye.")  # noqa: T201
