"""
CLI for the workflow builder.

Provides terminal access to:
- Node kinds
- Template listing
- Simulated runs of a template
- Workflow export
"""

import argparse
import sys

from node_registry import get_node_registry
from workflow_runtime import (
    ExecutionEvent,
    ExecutionEventType,
    RandomOutcomeSource,
    RunStatus,
    WorkflowError,
)
from workflow_studio.config import get_settings
from workflow_studio.export import to_json
from workflow_studio.notifications import MemoryNotifier
from workflow_studio.observability import setup_logging
from workflow_studio.session import WorkflowSession


def build_session(args: argparse.Namespace) -> WorkflowSession:
    """Create a session configured from command-line overrides."""
    settings = get_settings()
    outcome_source = RandomOutcomeSource(
        success_probability=(
            args.success_probability
            if getattr(args, "success_probability", None) is not None
            else settings.success_probability
        ),
        min_duration_ms=settings.node_min_duration_ms,
        max_duration_ms=settings.node_max_duration_ms,
        seed=args.seed if getattr(args, "seed", None) is not None else settings.random_seed,
    )
    sleep = (lambda duration_ms: None) if getattr(args, "fast", False) else None
    return WorkflowSession(
        outcome_source=outcome_source,
        sleep=sleep,
        notifier=MemoryNotifier(),
        settings=settings,
    )


def cmd_kinds(args: argparse.Namespace) -> int:
    """List node kinds and their ports."""
    for spec in get_node_registry().kinds():
        inputs = ", ".join(spec.inputs) or "-"
        outputs = ", ".join(spec.outputs) or "-"
        print(f"{spec.kind.value:<10} {spec.default_name:<16} in: {inputs:<6} out: {outputs}")
    return 0


def cmd_templates(args: argparse.Namespace) -> int:
    """List workflow templates."""
    session = build_session(args)
    templates = session.templates.list(category=args.category)
    if not templates:
        print("No templates found")
        return 1

    for template in templates:
        print(f"[{template.id}] {template.name} ({template.complexity.value}, {template.category})")
        print(f"    {template.description}")
        print(
            f"    {len(template.nodes)} nodes, {template.estimated_time}, "
            f"{template.usage_count:,} uses, rating {template.rating}"
        )
    return 0


def _print_event(event: ExecutionEvent) -> None:
    if event.event_type == ExecutionEventType.NODE_STARTED:
        print(f"  > {event.node_name} ...")
    elif event.event_type == ExecutionEventType.NODE_FINISHED and event.log is not None:
        mark = "ok" if event.log.status.value == "success" else "FAILED"
        print(f"    {mark:<6} {event.log.message} ({event.log.duration_ms / 1000:.2f}s)")


def cmd_run(args: argparse.Namespace) -> int:
    """Load a template and run it."""
    setup_logging(level="WARNING")
    session = build_session(args)

    try:
        session.load_template(args.template)
    except WorkflowError as e:
        print(f"Error: {e}")
        return 1

    template = session.templates.get(args.template)
    print(f"Running '{template.name}' ({len(session.graph)} nodes)")
    session.executor.subscribe(_print_event)

    try:
        result = session.run()
    except WorkflowError as e:
        print(f"Error: {e}")
        return 1

    metrics = result.metrics
    print("\n" + "=" * 60)
    print(f"Status:        {result.status.value}")
    print(f"Nodes run:     {metrics.nodes_executed}/{len(session.graph)}")
    print(f"Success rate:  {metrics.success_rate:.0f}%")
    print(f"Elapsed:       {metrics.total_execution_time_ms / 1000:.2f}s")
    print(f"Throughput:    {metrics.throughput:.2f} nodes/s")
    for message in session.notifier.messages:
        print(message)

    return 0 if result.status == RunStatus.COMPLETED else 1


def cmd_export(args: argparse.Namespace) -> int:
    """Load a template and export it as a workflow document."""
    session = build_session(args)

    try:
        session.load_template(args.template)
    except WorkflowError as e:
        print(f"Error: {e}")
        return 1

    if args.output:
        path = session.save(args.output)
        print(f"Workflow written to {path}")
    else:
        print(to_json(session.export()))
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="workflow-studio",
        description="Workflow Studio CLI - build and simulate workflows",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    # kinds command
    subparsers.add_parser("kinds", help="List node kinds")

    # templates command
    templates_parser = subparsers.add_parser("templates", help="List workflow templates")
    templates_parser.add_argument("--category", help="Only templates in this category")

    # run command
    run_parser = subparsers.add_parser("run", help="Run a template through the simulator")
    run_parser.add_argument("--template", required=True, help="Template ID")
    run_parser.add_argument("--seed", type=int, help="Random seed for outcomes")
    run_parser.add_argument("--success-probability", type=float, help="Per-node success probability")
    run_parser.add_argument("--fast", action="store_true", help="Skip simulated waits")

    # export command
    export_parser = subparsers.add_parser("export", help="Export a template as workflow JSON")
    export_parser.add_argument("--template", required=True, help="Template ID")
    export_parser.add_argument("--output", help="File or directory to write (prints to stdout if omitted)")

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    if args.command == "kinds":
        return cmd_kinds(args)
    elif args.command == "templates":
        return cmd_templates(args)
    elif args.command == "run":
        return cmd_run(args)
    elif args.command == "export":
        return cmd_export(args)
    else:
        print(f"Unknown command: {args.command}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
