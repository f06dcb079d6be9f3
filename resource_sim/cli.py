import argparse
import logging

from rich import box
from rich.console import Console, Group
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from . import comparison
from .concepts import METRIC_EXPLANATIONS, get_card
from .workbench import Workbench
from .workload import to_int


PID_COLORS = ['blue', 'magenta', 'green', 'yellow', 'cyan', 'red', 'bright_blue', 'bright_magenta',
              'bright_green', 'dark_orange']

STATE_COLORS = {
    'NEW': 'bright_black',
    'READY': 'green',
    'RUNNING': 'cyan',
    'TERMINATED': 'red',
}

EVENT_COLORS = {
    'ARRIVAL': 'green',
    'DISPATCH': 'cyan',
    'PREEMPT': 'yellow',
    'IDLE': 'bright_black',
    'COMPLETE': 'red',
    'TICK': 'white',
    'ALLOCATED': 'green',
    'FAILED': 'red',
    'hit': 'green',
    'fault': 'red',
    'evict': 'yellow',
    'load': 'cyan',
}


def pid_color(pid):
    value = 0
    for char in str(pid):
        value = (value * 31 + ord(char)) & 0xFFFFFFFF
    return PID_COLORS[value % len(PID_COLORS)]


class CommandLineInterface:
    def __init__(self, bench=None, console=None):
        self.bench = bench or Workbench()
        self.console = console or Console()
        self.palette = {
            'primary': 'cyan',
            'success': 'green',
            'warning': 'yellow',
            'danger': 'red',
            'muted': 'bright_black'
        }
        self.commands = {
            'help': self._help,
            'cpu': self._cpu_command,
            'mem': self._mem_command,
            'vm': self._vm_command,
            'concept': self._concept,
            'timeline': self._timeline,
            'demo': self._demo_sequence,
            'clear': self._clear,
            'exit': self._exit,
        }

    def _help(self, args):
        sections = {
            "CPU": [
                "`cpu policy <FCFS|SJF|SRTF|PRIORITY|RR> [quantum]` - Select policy",
                "`cpu add <pid> <arrival> <burst> [priority]` - Add a process",
                "`cpu clear` - Remove every process",
                "`cpu step [n]` - Advance n clock units",
                "`cpu run` / `cpu reset` - Run to completion / restart",
                "`cpu show` - Processes, running and ready queue",
                "`cpu gantt` / `cpu trace [n]` / `cpu metrics` - Results",
                "`cpu flow <pid>` - Lifecycle of a process",
                "`cpu compare` - Every policy on the same workload",
            ],
            "Memory": [
                "`mem policy <FIRST_FIT|BEST_FIT|WORST_FIT>` - Select policy",
                "`mem holes <size> ...` - Initial free holes",
                "`mem unit <n>` - Allocation unit",
                "`mem add <pid> <size>` / `mem clear` - Edit requests",
                "`mem step` / `mem run` / `mem reset` / `mem show`",
                "`mem compare` - Every policy on the same requests",
            ],
            "Paging": [
                "`vm policy <FIFO|LRU|OPTIMAL>` - Select policy",
                "`vm frames <n>` - Frame count (minimum 3)",
                "`vm add <pid> <pages> <ref,ref,...>` / `vm clear`",
                "`vm step` / `vm run` / `vm reset` / `vm show`",
                "`vm compare` - Every policy with 3, 4 and 5 frames",
            ],
            "Other": [
                "`concept <ALGORITHM>` - Explain an algorithm",
                "`timeline [n]` - Session events",
                "`demo` - Guided sequence",
                "`clear` / `help` / `exit`",
            ],
        }
        grid = Table.grid(padding=1)
        grid.add_column(justify="left")
        grid.add_column(justify="left")
        for title, commands in sections.items():
            grid.add_row(f"[bold]{title}[/]", "\n".join(commands))
        return Panel(grid, title="Commands", border_style=self.palette['primary'], box=box.ROUNDED)

    # CPU scheduling

    def _cpu_command(self, args):
        sub = args[0].lower() if args else "show"
        rest = args[1:]
        bench = self.bench
        if sub == "policy":
            if not rest:
                return "Usage: cpu policy <FCFS|SJF|SRTF|PRIORITY|RR> [quantum]"
            ok, msg = bench.set_cpu_policy(rest[0], rest[1] if len(rest) > 1 else None)
            return self._styled_feedback(msg, ok, title="Policy")
        if sub == "add":
            if len(rest) < 3:
                return "Usage: cpu add <pid> <arrival> <burst> [priority]"
            priority = rest[3] if len(rest) > 3 else 0
            ok, msg = bench.add_process(rest[0], rest[1], rest[2], priority)
            return self._styled_feedback(msg, ok, title="Process")
        if sub == "clear":
            bench.clear_processes()
            return self._styled_feedback("Process list cleared", True, title="Process")
        if sub == "step":
            count = to_int(rest[0], 1, minimum=1) if rest else 1
            for _ in range(count):
                bench.cpu.step()
            return self._render_cpu_state()
        if sub == "run":
            bench.cpu.run_to_end()
            bench.log_event("CPU", f"{bench.cpu_algorithm.value} run finished at t={bench.cpu.time}")
            return Group(self._render_gantt(), self._render_cpu_metrics())
        if sub == "reset":
            bench.cpu.reset()
            return self._styled_feedback("Scheduler reset to t=0", True, title="CPU")
        if sub == "show":
            return self._render_cpu_state()
        if sub == "gantt":
            return self._render_gantt()
        if sub == "trace":
            limit = to_int(rest[0], 10, minimum=1) if rest else 10
            return self._render_trace(limit)
        if sub == "metrics":
            return self._render_cpu_metrics()
        if sub == "flow":
            if not rest:
                return "Usage: cpu flow <pid>"
            return self._render_flow(rest[0])
        if sub == "compare":
            return self._render_cpu_comparison()
        return self._styled_feedback("Unknown cpu subcommand", success=False, title="CPU")

    def _render_cpu_state(self):
        snapshot = self.bench.cpu.get_snapshot()
        table = Table(
            title=f"Processes ({snapshot['algorithm']}, t={snapshot['time']})",
            header_style="bold cyan",
            box=box.SIMPLE_HEAVY
        )
        table.add_column("PID", style="bold")
        table.add_column("AT", justify="right")
        table.add_column("BT", justify="right")
        table.add_column("Remaining", justify="right")
        table.add_column("Priority", justify="center")
        table.add_column("State")
        table.add_column("CT", justify="right")
        for p in snapshot['processes']:
            color = STATE_COLORS.get(p['state'], 'white')
            table.add_row(
                p['pid'],
                str(p['arrival_time']),
                str(p['burst_time']),
                str(p['remaining_time']),
                str(p['priority']),
                f"[{color}]{p['state']}[/]",
                "-" if p['completion_time'] is None else str(p['completion_time'])
            )
        running = snapshot['running']
        cpu_text = f"{running['pid']} ({running['remaining_time']}/{running['burst_time']} left)" if running else "idle"
        ready = ", ".join(p['pid'] for p in snapshot['ready']) or "empty"
        status = Panel(
            f"CPU: {cpu_text}\nReady queue: {ready}\nContext switches: {snapshot['context_switches']}"
            f" • Idle time: {snapshot['idle_time']}",
            title="Dispatcher",
            border_style="green" if running else self.palette['muted'],
            box=box.ROUNDED
        )
        return Group(table, status)

    def _render_gantt(self):
        gantt = self.bench.cpu.get_snapshot()['gantt']
        if not gantt:
            return self._styled_feedback("Nothing has executed yet", success=False, title="Gantt")
        bar = Text()
        scale = Text()
        cursor = 0
        for segment in gantt:
            if segment['start'] > cursor:
                gap = (segment['start'] - cursor) * 3
                bar.append("·" * gap, style="bright_black")
                scale.append(str(cursor).ljust(gap))
            width = (segment['end'] - segment['start']) * 3
            bar.append(segment['pid'].center(width)[:width], style=f"bold white on {pid_color(segment['pid'])}")
            scale.append(str(segment['start']).ljust(width))
            cursor = segment['end']
        scale.append(str(cursor))
        return Panel(Group(bar, scale), title="Gantt chart", border_style="magenta", box=box.ROUNDED)

    def _render_trace(self, limit):
        records = self.bench.cpu.trace.latest(limit)
        if not records:
            return self._styled_feedback("No trace events yet", success=False, title="Trace")
        table = Table(title="Scheduler trace", box=box.SIMPLE_HEAVY, row_styles=["dim", "none"])
        table.add_column("#", justify="right")
        table.add_column("t", justify="right")
        table.add_column("Event")
        table.add_column("Ready")
        table.add_column("Why")
        for record in records:
            color = EVENT_COLORS.get(record['event'], 'white')
            table.add_row(
                str(record['step']),
                str(record['time']),
                f"[{color}]{record['event']}[/]",
                ", ".join(record['ready']) or "-",
                record['explanation']
            )
        return table

    def _render_cpu_metrics(self):
        result = self.bench.cpu.finalize_metrics()
        table = Table(title=f"{result['algorithm']} metrics", box=box.ROUNDED)
        table.add_column("PID", style="bold")
        for key in ('AT', 'BT', 'CT', 'TAT', 'WT'):
            table.add_column(key, justify="right")
        for p in result['processes']:
            table.add_row(p['pid'], *[
                "-" if value is None else str(value)
                for value in (p['arrival_time'], p['burst_time'], p['completion_time'],
                              p['turnaround_time'], p['waiting_time'])
            ])
        averages = result['averages']
        caption = f"Avg TAT {averages['turnaround']:.2f} • Avg WT {averages['waiting']:.2f}"
        if not result['complete']:
            caption += " (partial run)"
        table.caption = caption
        return table

    def _render_flow(self, pid):
        flow = self.bench.cpu.get_process_flow(pid)
        if flow is None:
            return self._styled_feedback("Process not found", success=False, title="Lifecycle")
        table = Table(title=f"Lifecycle {pid}", box=box.ROUNDED)
        table.add_column("t", justify="right")
        table.add_column("State")
        table.add_column("Note")
        for entry in flow:
            table.add_row(str(entry['time']), entry['state'], entry['note'] or "-")
        return table

    def _render_cpu_comparison(self):
        rows = comparison.compare_scheduling(self.bench.processes, quantum=self.bench.quantum)
        table = Table(title=f"Policy comparison (RR quantum={self.bench.quantum})", box=box.SIMPLE_HEAVY)
        table.add_column("Policy", style="bold")
        table.add_column("Avg WT", justify="right")
        table.add_column("Avg TAT", justify="right")
        table.add_column("Makespan", justify="right")
        table.add_column("Switches", justify="right")
        for row in rows:
            table.add_row(row['algorithm'], f"{row['average_waiting']:.2f}", f"{row['average_turnaround']:.2f}",
                          str(row['final_clock']), str(row['context_switches']))
        return table

    # Contiguous allocation

    def _mem_command(self, args):
        sub = args[0].lower() if args else "show"
        rest = args[1:]
        bench = self.bench
        if sub == "policy":
            if not rest:
                return "Usage: mem policy <FIRST_FIT|BEST_FIT|WORST_FIT>"
            ok, msg = bench.set_memory_policy(rest[0])
            return self._styled_feedback(msg, ok, title="Policy")
        if sub == "holes":
            if not rest:
                return "Usage: mem holes <size> [size ...]"
            ok, msg = bench.set_holes(rest)
            return self._styled_feedback(msg, ok, title="Memory")
        if sub == "unit":
            if not rest:
                return "Usage: mem unit <n>"
            ok, msg = bench.set_allocation_unit(rest[0])
            return self._styled_feedback(msg, ok, title="Memory")
        if sub == "add":
            if len(rest) < 2:
                return "Usage: mem add <pid> <size>"
            ok, msg = bench.add_memory_request(rest[0], rest[1])
            return self._styled_feedback(msg, ok, title="Memory")
        if sub == "clear":
            bench.clear_memory_requests()
            return self._styled_feedback("Request list cleared", True, title="Memory")
        if sub == "step":
            bench.memory.step()
            return self._render_memory_state()
        if sub == "run":
            bench.memory.run_to_end()
            bench.log_event("MEMORY", f"{bench.memory_algorithm.value} allocation finished")
            return self._render_memory_state()
        if sub == "reset":
            bench.memory.reset()
            return self._styled_feedback("Memory restored to the initial holes", True, title="Memory")
        if sub == "show":
            return self._render_memory_state()
        if sub == "compare":
            return self._render_memory_comparison()
        return self._styled_feedback("Unknown mem subcommand", success=False, title="Memory")

    def _render_memory_state(self):
        snapshot = self.bench.memory.get_snapshot()
        segments = Table(title=f"Segments ({snapshot['algorithm']})", box=box.SIMPLE_HEAVY)
        segments.add_column("Start", justify="right")
        segments.add_column("Size", justify="right")
        segments.add_column("Owner")
        for segment in snapshot['segments']:
            owner = "[green]free[/]" if segment['free'] else f"[{pid_color(segment['process_id'])}]{segment['process_id']}[/]"
            segments.add_row(str(segment['start']), str(segment['size']), owner)
        requests = Table(title="Requests", box=box.SIMPLE)
        requests.add_column("PID", style="bold")
        requests.add_column("Size", justify="right")
        requests.add_column("Status")
        requests.add_column("Placed at", justify="right")
        for request in snapshot['requests']:
            color = {'ALLOCATED': 'green', 'FAILED': 'red'}.get(request['status'], 'bright_black')
            placed = str(request['allocation']['start']) if request['allocation'] else "-"
            requests.add_row(request['pid'], str(request['size']), f"[{color}]{request['status']}[/]", placed)
        metrics = snapshot['metrics']
        used = 100 * metrics['allocated'] / metrics['total_memory'] if metrics['total_memory'] else 0
        summary = Table.grid(padding=(0, 1))
        summary.add_column(justify="left")
        summary.add_column(justify="right")
        summary.add_row("Allocated", f"{metrics['allocated']} / {metrics['total_memory']}")
        summary.add_row("Largest hole", str(metrics['largest_hole']))
        summary.add_row("Internal fragmentation", str(metrics['internal_fragmentation']))
        summary.add_row("External fragmentation", str(metrics['external_fragmentation']))
        summary.add_row(" ", self._build_usage_bar(used))
        parts = [segments, requests, Panel(summary, title="Memory", border_style="blue", box=box.ROUNDED)]
        if snapshot['last_event']:
            event = snapshot['last_event']
            parts.append(self._styled_feedback(event['description'], event['type'] == 'ALLOCATED',
                                               title=event['type']))
        return Group(*parts)

    def _render_memory_comparison(self):
        bench = self.bench
        rows = comparison.compare_allocation(bench.memory_requests, bench.holes, bench.allocation_unit)
        table = Table(title="Allocation policy comparison", box=box.SIMPLE_HEAVY)
        table.add_column("Policy", style="bold")
        table.add_column("Allocated", justify="right")
        table.add_column("Failed", justify="right")
        table.add_column("Largest hole", justify="right")
        table.add_column("External frag.", justify="right")
        for row in rows:
            table.add_row(row['algorithm'], str(row['allocated']), str(row['failed']),
                          str(row['largest_hole']), str(row['external_fragmentation']))
        return table

    # Paging

    def _vm_command(self, args):
        sub = args[0].lower() if args else "show"
        rest = args[1:]
        bench = self.bench
        if sub == "policy":
            if not rest:
                return "Usage: vm policy <FIFO|LRU|OPTIMAL>"
            ok, msg = bench.set_paging_policy(rest[0])
            return self._styled_feedback(msg, ok, title="Policy")
        if sub == "frames":
            if not rest:
                return "Usage: vm frames <n>"
            ok, msg = bench.set_frame_count(rest[0])
            return self._styled_feedback(msg, ok, title="Paging")
        if sub == "add":
            if len(rest) < 3:
                return "Usage: vm add <pid> <pages> <ref,ref,...>"
            ok, msg = bench.add_paging_process(rest[0], rest[1], " ".join(rest[2:]))
            return self._styled_feedback(msg, ok, title="Paging")
        if sub == "clear":
            bench.clear_paging_processes()
            return self._styled_feedback("Paging workload cleared", True, title="Paging")
        if sub == "step":
            bench.paging.step()
            return self._render_paging_state()
        if sub == "run":
            bench.paging.run_to_end()
            bench.log_event("PAGING", f"{bench.paging_algorithm.value} run finished")
            return self._render_paging_state()
        if sub == "reset":
            bench.paging.reset()
            return self._styled_feedback("Frames emptied, reference stream rewound", True, title="Paging")
        if sub == "show":
            return self._render_paging_state()
        if sub == "compare":
            return self._render_paging_comparison()
        return self._styled_feedback("Unknown vm subcommand", success=False, title="Paging")

    def _render_paging_state(self):
        snapshot = self.bench.paging.get_snapshot()
        frames = Table(title=f"Frames ({snapshot['algorithm']})", box=box.ROUNDED)
        frames.add_column("Frame", justify="right")
        frames.add_column("Content")
        for frame in snapshot['frames']:
            if frame['is_free']:
                content = "[bright_black]free[/]"
            else:
                content = f"[{pid_color(frame['process_id'])}]{frame['process_id']}:{frame['page_id']}[/]"
            frames.add_row(str(frame['frame_id']), content)
        log = Table(title="Recent accesses", box=box.SIMPLE)
        log.add_column("#", justify="right")
        log.add_column("Event")
        log.add_column("Detail")
        for record in snapshot['logs']:
            color = EVENT_COLORS.get(record['type'], 'white')
            log.add_row(str(record['step']), f"[{color}]{record['type'].upper()}[/]", record['message'])
        metrics = snapshot['metrics']
        summary = Table.grid(padding=(0, 1))
        summary.add_column(justify="left")
        summary.add_column(justify="right")
        summary.add_row("References", f"{metrics['total_references']} / {len(snapshot['reference_queue'])}")
        summary.add_row("Faults / Hits", f"{metrics['page_faults']} / {metrics['page_hits']}")
        summary.add_row("Fault rate", f"{metrics['page_fault_rate']}%")
        summary.add_row("Frames used", f"{metrics['frames_used']} / {metrics['frame_count']}")
        upcoming = snapshot['next_reference']
        summary.add_row("Next", f"{upcoming['pid']}:{upcoming['page']}" if upcoming else "done")
        return Group(frames, log, Panel(summary, title="Paging", border_style="blue", box=box.ROUNDED))

    def _render_paging_comparison(self):
        rows = comparison.compare_paging(self.bench.paging_processes, frame_counts=(3, 4, 5))
        table = Table(title="Replacement policy comparison", box=box.SIMPLE_HEAVY)
        table.add_column("Frames", justify="right")
        table.add_column("Policy", style="bold")
        table.add_column("Faults", justify="right")
        table.add_column("Hits", justify="right")
        table.add_column("Fault rate", justify="right")
        for row in rows:
            table.add_row(str(row['frame_count']), row['algorithm'], str(row['page_faults']),
                          str(row['page_hits']), f"{row['page_fault_rate']}%")
        return table

    # Misc

    def _concept(self, args):
        if not args:
            return "Usage: concept <ALGORITHM|AT|BT|CT|TAT|WT>"
        metric = METRIC_EXPLANATIONS.get(args[0].upper())
        if metric:
            return Panel(f"{metric['formula']}\n{metric['meaning']}", title=metric['name'],
                         border_style=self.palette['primary'], box=box.ROUNDED)
        card = get_card(args[0])
        if card is None:
            return self._styled_feedback("Unknown algorithm", success=False, title="Concept")
        grid = Table.grid(padding=(0, 1))
        grid.add_column(style="bold")
        grid.add_column()
        grid.add_row("Idea", card['concept'])
        grid.add_row("Pros", "\n".join(f"+ {item}" for item in card['pros']))
        grid.add_row("Cons", "\n".join(f"- {item}" for item in card['cons']))
        grid.add_row("Example", card['example'])
        if card['preemptive'] is not None:
            grid.add_row("Preemptive", "yes" if card['preemptive'] else "no")
        return Panel(grid, title=card['title'], border_style=self.palette['primary'], box=box.ROUNDED)

    def _timeline(self, args):
        limit = None
        if args and args[0].isdigit():
            limit = int(args[0])
        events = self.bench.get_timeline(limit)
        if not events:
            return self._styled_feedback("No session events yet", success=False, title="Timeline")
        table = Table(title="Session timeline", box=box.SIMPLE_HEAVY, row_styles=["dim", "none"])
        table.add_column("#", justify="right")
        table.add_column("Type")
        table.add_column("Detail")
        for event in events:
            table.add_row(str(event['step']), event['category'], event['message'])
        return table

    def _demo_sequence(self, args):
        script = [
            ["cpu", "policy", "FCFS"], ["cpu", "run"],
            ["cpu", "policy", "RR", "2"], ["cpu", "run"], ["cpu", "trace", "6"],
            ["cpu", "compare"],
            ["mem", "policy", "BEST_FIT"], ["mem", "run"],
            ["vm", "policy", "OPTIMAL"], ["vm", "run"], ["vm", "compare"],
        ]
        for command in script:
            self._print(Text(f"OS> {' '.join(command)}", style=self.palette['muted']))
            result = self.commands[command[0]](command[1:])
            if result is not None:
                self._print(result)
        return self._styled_feedback("Demo finished", True, title="Demo")

    def _clear(self, args):
        self.console.clear()
        return None

    def _exit(self, args):
        self.bench.running = False
        return "Leaving the simulator..."

    def execute(self, line):
        parts = line.strip().split()
        if not parts:
            return None
        command = parts[0].lower()
        handler = self.commands.get(command)
        if handler is None:
            return self._styled_feedback("Unknown command. Type 'help' for help.", success=False, title="Error")
        return handler(parts[1:])

    def run(self):
        self._render_banner()
        self._print("Type 'help' to list the available commands\n")
        while self.bench.running:
            try:
                command_input = self.console.input("OS> ")
                result = self.execute(command_input)
                if result is not None:
                    self._print(result)
            except (KeyboardInterrupt, EOFError):
                self._print("\n\nLeaving the simulator...")
                self.bench.running = False
            except ValueError as e:
                self._print(self._styled_feedback(str(e), success=False, title="Error"))

    def _build_usage_bar(self, percent, width=30, color="blue"):
        percent = max(0, min(100, float(percent)))
        filled = int((percent / 100) * width)
        empty = width - filled
        return f"[{color}]" + "█" * filled + "[/]" + "·" * empty + f" {percent:.1f}%"

    def _styled_feedback(self, message, success=True, title=None):
        style = self.palette['success'] if success else self.palette['danger']
        panel_title = title or ("Done" if success else "Error")
        return Panel(message, title=panel_title, border_style=style, box=box.ROUNDED)

    def _render_banner(self):
        banner_text = ("[bold cyan]OS RESOURCE SIMULATOR[/]\n"
                       "[bright_black]CPU scheduling • Contiguous allocation • Paging[/]")
        self._print(Panel(banner_text, border_style=self.palette['primary'], padding=(1, 2), box=box.DOUBLE))

    def _print(self, message):
        self.console.print(message)


def parse_arguments(argv=None):
    parser = argparse.ArgumentParser(description="Step through CPU scheduling, memory allocation and paging.")
    parser.add_argument("--demo", action="store_true", help="Run the guided demo and exit.")
    parser.add_argument("--verbose", action="store_true", help="Show engine debug logging.")
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_arguments(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(show_path=False)],
    )
    cli = CommandLineInterface(Workbench())
    if args.demo:
        cli._print(cli._demo_sequence([]))
        return
    cli.run()
