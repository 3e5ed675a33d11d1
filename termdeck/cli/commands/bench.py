"""Benchmark command for the session store and dispatcher."""

import asyncio

import click

from ...core.context import SessionContext
from ...core.dispatcher import CommandDispatcher
from ...core.parser import parse_command
from ...core.performance import PerformanceTracker
from ...core.session_store import SessionStore
from ..helpers import load_store_config, print_table, store_options

SAMPLE_LINE = 'open --file "a b.txt" --line 3'


async def _dispatch_burst(store: SessionStore, tracker: PerformanceTracker, count: int) -> None:
    dispatcher = CommandDispatcher(store=store, tracker=tracker)
    for session in store.list_sessions():
        context = SessionContext(store, session.id)
        for _ in range(count):
            dispatcher.submit('pwd', context, session.id)
    await dispatcher.drain()


def run_benchmark(store: SessionStore, tracker: PerformanceTracker,
                  sessions: int, lines: int, commands: int) -> None:
    """Drive the store, parser and dispatcher under the tracker."""
    for _ in range(sessions):
        with tracker.timed('create_session'):
            store.create_session()

    for session in store.list_sessions():
        for number in range(lines):
            with tracker.timed('add_output'):
                store.add_output(session.id, f"output line {number}")
        for number in range(commands):
            with tracker.timed('add_to_history'):
                store.add_to_history(session.id, f"echo {number}")

    for _ in range(commands):
        with tracker.timed('parse_command'):
            parse_command(SAMPLE_LINE)

    asyncio.run(_dispatch_burst(store, tracker, commands))

    with tracker.timed('cleanup_sessions'):
        store.cleanup_sessions()


@click.command()
@click.option('--sessions', 'session_count', default=12, show_default=True,
              type=click.IntRange(min=1), help='Sessions to create')
@click.option('--lines', default=6000, show_default=True,
              type=click.IntRange(min=0), help='Output lines written per session')
@click.option('--commands', default=200, show_default=True,
              type=click.IntRange(min=0), help='Commands parsed and dispatched per session')
@store_options
def bench(session_count, lines, commands, **store_limits):
    """Time store, parser and dispatcher operations"""
    config = load_store_config(store_limits)
    store = SessionStore(config)
    tracker = PerformanceTracker()

    click.echo(f"Running benchmark: {session_count} sessions, {lines} lines, {commands} commands")
    run_benchmark(store, tracker, session_count, lines, commands)

    rows = []
    for label, metrics in sorted(tracker.get_all_metrics().items()):
        rows.append([label, metrics.count, f"{metrics.avg:.4f}",
                     f"{metrics.min:.4f}", f"{metrics.max:.4f}"])
    print_table(["OPERATION", "COUNT", "AVG MS", "MIN MS", "MAX MS"], rows)

    largest = max((len(s.output_buffer) for s in store.list_sessions()), default=0)
    click.echo(f"\nLive sessions: {len(store)} (limit {config.max_sessions})")
    click.echo(f"Largest output buffer: {largest} lines (limit {config.max_output_lines})")
