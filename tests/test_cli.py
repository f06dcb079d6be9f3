import io

import pytest
from rich.console import Console
from rich.table import Table

from resource_sim.cli import CommandLineInterface, parse_arguments, pid_color
from resource_sim.workbench import Workbench


@pytest.fixture
def cli():
    console = Console(file=io.StringIO(), width=140)
    return CommandLineInterface(Workbench(), console=console)


def render(cli, line):
    result = cli.execute(line)
    if result is not None:
        cli.console.print(result)
    return cli.console.file.getvalue()


def test_cpu_run_prints_averages(cli):
    result = cli.execute("cpu run")
    gantt, metrics = result.renderables
    assert metrics.caption == "Avg TAT 10.33 • Avg WT 5.67"
    cli.console.print(result)
    assert "Gantt chart" in cli.console.file.getvalue()


def test_cpu_step_shows_dispatcher(cli):
    output = render(cli, "cpu step 3")
    assert "t=3" in output
    assert "Ready queue" in output


def test_round_robin_trace(cli):
    render(cli, "cpu policy RR 2")
    result = cli.execute("cpu run")
    assert cli.bench.cpu.quantum == 2
    assert "partial" not in result.renderables[1].caption
    table = cli.execute("cpu trace 5")
    assert isinstance(table, Table)
    assert table.row_count == 5
    assert any(r["event"] == "PREEMPT" for r in cli.bench.cpu.trace.records())


def test_memory_and_paging_commands(cli):
    render(cli, "mem policy best_fit")
    output = render(cli, "mem run")
    assert "External fragmentation" in output
    output = render(cli, "vm run")
    assert "Fault rate" in output
    output = render(cli, "vm compare")
    assert "OPTIMAL" in output


def test_unknown_command_and_blank_line(cli):
    assert cli.execute("   ") is None
    output = render(cli, "format c:")
    assert "Unknown command" in output


def test_invalid_policy_raises_value_error(cli):
    with pytest.raises(ValueError):
        cli.execute("cpu policy LOTTERY")


def test_concept_and_metric_cards(cli):
    output = render(cli, "concept fcfs")
    assert "First Come First Serve" in output
    output = render(cli, "concept WT")
    assert "WT = TAT - BT" in output


def test_demo_runs_every_engine(cli):
    output = render(cli, "demo")
    assert "Demo finished" in output
    assert len(cli.bench.get_timeline()) > 0


def test_exit_stops_loop(cli):
    cli.execute("exit")
    assert cli.bench.running is False


def test_parse_arguments():
    args = parse_arguments(["--demo"])
    assert args.demo is True
    assert args.verbose is False


def test_pid_color_is_stable():
    assert pid_color("P1") == pid_color("P1")
