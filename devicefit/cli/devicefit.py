"""
devicefit CLI: evaluate device-aware placement decisions from the command line.

Usage:
    devicefit evaluate CLUSTER_FILE    Filter, score and normalize a cluster for one request
    devicefit queue QUEUE_FILE         Print pending workloads in scheduling order
    devicefit config                   Show the active configuration
"""

import json
from datetime import date, datetime
from pathlib import Path
from typing import Any, Dict, List

import typer
import yaml
from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ..config import get_config
from ..errors import DeviceFitError
from ..types import LABEL_PRIORITY, ResourceRequest, Workload
from ..scheduler.inventory import InMemoryInventoryStore
from ..scheduler.plugin import DeviceFitPlugin, run_cycle
from ..scheduler.queue_sort import sort_queue

console = Console()
cli = typer.Typer(
    name="devicefit",
    help="Device-aware node filtering, scoring and queue ordering.",
    no_args_is_help=True,
)


def _load_yaml(path: Path) -> Dict[str, Any]:
    with open(path, "r") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise typer.BadParameter(f"{path} must contain a mapping at the top level")
    return data


def _load_workloads(data: Dict[str, Any]) -> List[Workload]:
    workloads = []
    for entry in data.get("workloads", []):
        labels = {k: str(v) for k, v in (entry.get("labels") or {}).items()}
        if "priority" in entry:
            labels.setdefault(LABEL_PRIORITY, str(entry["priority"]))

        created_at = entry.get("created_at")
        if isinstance(created_at, str):
            created_at = datetime.fromisoformat(created_at)
        elif isinstance(created_at, date) and not isinstance(created_at, datetime):
            created_at = datetime.combine(created_at, datetime.min.time())

        workloads.append(
            Workload.from_labels(
                name=entry["name"],
                labels=labels,
                namespace=entry.get("namespace", "default"),
                uid=entry.get("uid"),
                created_at=created_at,
            )
        )
    return workloads


@cli.command()
def evaluate(
    cluster_file: Path = typer.Argument(..., exists=True, dir_okay=False, help="Cluster YAML file"),
    count: int = typer.Option(1, "--count", "-n", help="Devices requested"),
    memory: int = typer.Option(0, "--memory", "-m", help="Minimum memory per device (MiB)"),
    clock: int = typer.Option(0, "--clock", "-c", help="Minimum clock per device (MHz)"),
    name: str = typer.Option("cli-workload", "--name", help="Workload name"),
    output_json: bool = typer.Option(False, "--json", help="Output decisions as JSON"),
):
    """Run one scheduling cycle for a request against a cluster description."""
    try:
        data = _load_yaml(cluster_file)
        store = InMemoryInventoryStore.from_mapping(data.get("machines") or {})
        workload = Workload(
            name=name,
            request=ResourceRequest(count=count, memory_per_unit=memory, clock_per_unit=clock),
        )
        result = run_cycle(DeviceFitPlugin(store), workload)
    except DeviceFitError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(code=1)
    except ValueError as e:
        console.print(f"[red]Validation error:[/red] {e}")
        raise typer.Exit(code=1)

    scores = {s.name: s.score for s in result.scores}

    if output_json:
        payload = {
            "workload": workload.to_dict(),
            "cycle_id": result.cycle_id,
            "maxima": {d.value: v for d, v in result.maxima.items()},
            "nodes": [
                {
                    "name": node,
                    "status": status.code.name,
                    "reason": status.reason,
                    "score": scores.get(node),
                }
                for node, status in result.statuses.items()
            ],
            "best_node": result.best_node,
        }
        typer.echo(json.dumps(payload, indent=2))
        return

    console.print(Panel(
        f"Workload: {workload.key}\n"
        f"Request: count={count} memory={memory} clock={clock}\n"
        f"Maxima: " + ", ".join(f"{d.value}={v}" for d, v in result.maxima.items()),
        title="Scheduling Cycle",
        border_style="yellow",
    ))

    table = Table(title="Node Decisions", box=box.ROUNDED)
    table.add_column("Node", style="bold")
    table.add_column("Status")
    table.add_column("Score")
    table.add_column("Reason")

    for node, status in result.statuses.items():
        style = "green" if status.is_success() else "red"
        table.add_row(
            node,
            f"[{style}]{status.code.name}[/{style}]",
            str(scores[node]) if node in scores else "-",
            status.reason,
        )

    console.print(table)
    console.print(f"\nBest node: [bold]{result.best_node or 'none'}[/bold]")


@cli.command()
def queue(
    queue_file: Path = typer.Argument(..., exists=True, dir_okay=False, help="Queue YAML file"),
):
    """Print pending workloads in the order the scheduling queue pops them."""
    try:
        workloads = sort_queue(_load_workloads(_load_yaml(queue_file)))
    except DeviceFitError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(code=1)
    except (KeyError, ValueError) as e:
        console.print(f"[red]Validation error:[/red] {e}")
        raise typer.Exit(code=1)

    table = Table(title="Scheduling Queue", box=box.ROUNDED)
    table.add_column("#", style="dim")
    table.add_column("Workload", style="bold")
    table.add_column("Priority")
    table.add_column("Created")
    table.add_column("Request")

    for i, workload in enumerate(workloads):
        req = workload.request
        table.add_row(
            str(i + 1),
            workload.key,
            str(workload.priority),
            workload.created_at.isoformat(),
            f"{req.count} x {req.memory_per_unit}MiB @ {req.clock_per_unit}MHz",
        )

    console.print(table)


@cli.command()
def config():
    """Show the active configuration."""
    cfg = get_config()

    for section, values in cfg.to_dict().items():
        section_table = Table(show_header=False, box=box.SIMPLE)
        section_table.add_column("Setting", style="bold")
        section_table.add_column("Value")
        for key, value in values.items():
            section_table.add_row(key, str(value))
        console.print(Panel(section_table, title=f"{section.title()} Configuration"))

    errors = cfg.validate()
    if errors:
        for error in errors:
            console.print(f"[yellow]Warning:[/yellow] {error}")


def main():
    cli()


if __name__ == "__main__":
    main()
