# src/cli/plan_cli.py
"""
Plan a single task from a JSON file and render the result.

    python -m cli.plan_cli task.json
    python -m cli.plan_cli task.json --context ctx.json --envelope
    python -m cli.plan_cli task.json --envelope --simulate
"""

import argparse
import json
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import Any, Dict, List, Optional

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from agent.logging_config import configure_logging
from env.loader import load_runtime_settings
from envelope.adapter import EnvelopeAdapter
from runtime_client.client import RuntimeClient
from runtime_client.simulator import ManualScheduler, RuntimeSimulator
from spec.types import Plan
from tasks import default_registry

log = logging.getLogger(__name__)

STATUS_STYLES = {"blocked": "yellow", "failed": "red"}


def _load_json(path: Optional[str]) -> Dict[str, Any]:
    if not path:
        return {}
    with Path(path).open("r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"{path} must contain a JSON object")
    return data


def render_plan(plan: Plan) -> Panel:
    status = plan.status or "ok"
    header = Text()
    header.append("Summary: ", style="bold")
    header.append(f"{plan.summary}\n")
    header.append("Status: ", style="bold")
    header.append(f"{status}\n", style=STATUS_STYLES.get(status, "green"))
    header.append("Estimated: ", style="bold")
    header.append(f"{plan.estimated_duration} ms\n")
    if plan.error:
        header.append("Error: ", style="bold red")
        header.append(f"{plan.error}\n")
    if plan.suggestion:
        header.append("Suggestion: ", style="bold")
        header.append(f"{plan.suggestion}\n")
    if plan.personality_bias:
        header.append("Personality: ", style="bold")
        header.append(", ".join(plan.personality_bias.get("matches", [])) + "\n")

    steps = Table(show_header=True, header_style="bold magenta")
    steps.add_column("#", justify="right", width=3)
    steps.add_column("Step", style="bold")
    steps.add_column("Type")
    steps.add_column("Description")
    for index, step in enumerate(plan.steps, start=1):
        steps.add_row(str(index), step.title, step.type, step.description)
    if not plan.steps:
        steps.add_row("-", "<none>", "-", "-")

    details = Table.grid(pad_edge=False)
    details.add_column(justify="left")
    details.add_row(header)
    details.add_row(steps)
    details.add_row(f"[bold]Resources:[/bold] {', '.join(plan.resources) or '<none>'}")
    details.add_row(f"[bold]Risks:[/bold] {'; '.join(plan.risks) or '<none>'}")
    if plan.notes:
        details.add_row(f"[bold]Notes:[/bold] {'; '.join(plan.notes)}")

    return Panel(details, title=f"Plan: {plan.action}", border_style=STATUS_STYLES.get(status, "cyan"))


def simulate(envelope: Dict[str, Any], settings: Any) -> List[Dict[str, Any]]:
    """Run `envelope` through the simulator on a virtual clock and collect its events."""
    scheduler = ManualScheduler()
    client = RuntimeClient(
        replace(settings.client, submit_url=None),
        runtime_fallback=RuntimeSimulator(settings.simulator, scheduler=scheduler),
    )
    events: List[Dict[str, Any]] = []
    client.on("event", lambda event: events.append({"at": scheduler.now_ms, **event}))
    client.submit(envelope)
    scheduler.run_all()
    client.close()
    return events


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Plan one task and render the plan.")
    parser.add_argument("task", help="Path to a JSON task ({action, details, target, metadata, ...})")
    parser.add_argument("--context", help="Path to a JSON planning context")
    parser.add_argument("--config", help="Runtime config YAML (default: config/runtime.yaml)")
    parser.add_argument("--envelope", action="store_true", help="Also print the wire command")
    parser.add_argument("--simulate", action="store_true", help="Run the envelope through the simulator")
    parser.add_argument("--json", action="store_true", help="Print the plan as JSON instead of a table")
    parser.add_argument("--log-level", default="WARNING")
    args = parser.parse_args(argv)

    configure_logging(args.log_level)
    console = Console()

    task = _load_json(args.task)
    context = _load_json(args.context)
    settings = load_runtime_settings(Path(args.config) if args.config else None)

    plan = default_registry.plan_task(task, context)
    if plan is None:
        console.print(f"[bold red]No planner for action {task.get('action')!r}[/bold red]")
        return 2

    if args.json:
        console.print_json(json.dumps(plan.to_dict()))
    else:
        console.print(render_plan(plan))

    if args.envelope or args.simulate:
        adapter = EnvelopeAdapter(settings.envelope)
        envelope = adapter.build_envelope(task)
        if args.envelope:
            console.print(Panel(Text(adapter.build_command_from_envelope(envelope)), title="Envelope",
                                border_style="green"))
        if args.simulate:
            timeline = Table(show_header=True, header_style="bold magenta")
            timeline.add_column("t (ms)", justify="right")
            timeline.add_column("Event", style="bold")
            timeline.add_column("Detail")
            for event in simulate(envelope, settings):
                detail = event.get("hazard") or event.get("status") or event.get("reason") or ""
                timeline.add_row(str(event["at"]), str(event.get("type")), str(detail))
            console.print(Panel(timeline, title="Simulated runtime", border_style="blue"))

    return 0 if plan.ok else 1


if __name__ == "__main__":
    sys.exit(main())
