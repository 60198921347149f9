"""CLI entry point for polaris."""

from __future__ import annotations

import asyncio
import logging
import sys
import threading

import typer

from polaris.config import PolarisConfig

app = typer.Typer(
    name="polaris",
    help="Terminal session backend of the Polaris editor.",
    no_args_is_help=True,
)


def setup_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


@app.command()
def info(
    config_file: str | None = typer.Option(
        None, "--config", "-c", help="Config file path."
    ),
) -> None:
    """Show platform, default shell, working directory and terminal backend."""
    from polaris.pty.platform import resolve_backend
    from polaris.system import get_current_directory, get_platform, get_shell_path

    config = PolarisConfig.load(config_file)
    typer.echo(f"Platform: {get_platform()}")
    typer.echo(f"Shell: {config.terminal.shell or get_shell_path()}")
    typer.echo(f"Directory: {get_current_directory()}")
    typer.echo(f"Backend: {resolve_backend(config.terminal.backend)}")


@app.command()
def run(
    command: str = typer.Argument(help="Command line to run once (e.g. 'help', 'ls -la')."),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug logging."
    ),
    config_file: str | None = typer.Option(
        None, "--config", "-c", help="Config file path."
    ),
) -> None:
    """Run a one-shot command the way the editor's command bar does."""
    from polaris.runner import CommandFailed, execute_command

    setup_logging(verbose)
    config = PolarisConfig.load(config_file)
    try:
        output = asyncio.run(execute_command(command, timeout=config.runner.timeout))
    except CommandFailed as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(e.exit_code or 1)
    typer.echo(output, nl=not output.endswith("\n"))


@app.command()
def shell(
    shell_path: str | None = typer.Option(
        None, "--shell", "-s", help="Shell to spawn (default: from env/config/platform)."
    ),
    cwd: str | None = typer.Option(None, "--cwd", "-d", help="Working directory."),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug logging."
    ),
    config_file: str | None = typer.Option(
        None, "--config", "-c", help="Config file path."
    ),
) -> None:
    """Open an interactive session in line mode (input is sent per line)."""
    from polaris.pty.errors import TerminalError

    setup_logging(verbose)
    config = PolarisConfig.load(config_file)
    try:
        exit_code = asyncio.run(_run_shell(config, shell_path, cwd))
    except TerminalError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)
    if exit_code:
        raise typer.Exit(exit_code)


async def _run_shell(config: PolarisConfig, shell_path: str | None, cwd: str | None) -> int:
    """Stream one session to stdout while forwarding stdin lines to it."""
    from polaris.pty.errors import TerminalError
    from polaris.pty.manager import TerminalManager
    from polaris.session.wire import EventType

    manager = TerminalManager(config.terminal)
    wire = manager.wire
    loop = asyncio.get_running_loop()

    session_id = manager.create(shell_path, cwd)
    events = wire.subscribe()
    await manager.start_streaming(session_id)

    lines: asyncio.Queue[str | None] = asyncio.Queue()

    # Daemon thread: a blocked readline must not keep the process alive.
    def _read_stdin() -> None:
        for line in sys.stdin:
            loop.call_soon_threadsafe(lines.put_nowait, line)
        loop.call_soon_threadsafe(lines.put_nowait, None)

    threading.Thread(target=_read_stdin, daemon=True, name="polaris-stdin").start()

    exit_code = 0

    async def _consume_wire() -> None:
        nonlocal exit_code
        while True:
            event = await events.get()
            if event is None:
                break
            if event.type == EventType.PTY_OUTPUT:
                sys.stdout.write(event.data["data"])
                sys.stdout.flush()
            elif event.type == EventType.PTY_EXIT:
                exit_code = event.data.get("exit_code") or 0
                break

    async def _forward_input() -> None:
        while True:
            line = await lines.get()
            eof = line is None
            try:
                # End of input: ask the shell to leave so pending output drains
                await loop.run_in_executor(
                    None, manager.write, session_id, "exit\n" if eof else line
                )
            except TerminalError as e:
                typer.echo(f"\nError: {e}", err=True)
                break
            if eof:
                break

    consumer = asyncio.create_task(_consume_wire())
    forwarder = asyncio.create_task(_forward_input())
    await asyncio.wait({consumer, forwarder}, return_when=asyncio.FIRST_COMPLETED)
    if forwarder.done() and not consumer.done():
        await asyncio.wait({consumer}, timeout=config.terminal.kill_timeout)

    forwarder.cancel()
    await manager.cleanup()
    wire.close()
    await consumer
    wire.unsubscribe(events)
    return exit_code


def main() -> None:
    app()


if __name__ == "__main__":
    main()
