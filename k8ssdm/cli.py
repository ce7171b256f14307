"""
CLI for k8ssdm - prepare the SDM for deployment to Kubernetes.

Commands:
    augment     Augment an application descriptor for self-deployment
    bootstrap   Generate the cluster-wide bootstrap manifests
    context     Show the current Kubernetes config context
    validate    Validate application descriptor and goal files
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, List, Optional

import yaml

from .augment import prepare_for_self_deploy
from .config import kube_config_context, load_document
from .generators import generate_all_manifests
from .schema import load_application, load_goal, validate_application, validate_goal
from .types import BootstrapConfig


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="k8ssdm",
        description="Prepare the SDM for deployment to Kubernetes",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose output",
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # augment command
    augment_parser = subparsers.add_parser(
        "augment",
        help="Augment an application descriptor for self-deployment",
    )
    augment_parser.add_argument(
        "-f", "--file",
        required=True,
        help="Path to the application descriptor (YAML or JSON)",
    )
    augment_parser.add_argument(
        "-g", "--goal",
        help="Path to the deployment goal (default: SDM client configuration)",
    )
    augment_parser.add_argument(
        "--context",
        help="Kubernetes context (default: current context of the kube config)",
    )
    augment_parser.add_argument(
        "--kubeconfig",
        help="Path to the kube config file",
    )
    augment_parser.add_argument(
        "-o", "--output",
        help="Output directory (default: stdout)",
    )
    augment_parser.add_argument(
        "--format",
        choices=["yaml", "json"],
        default="yaml",
        help="Output format (default: yaml)",
    )

    # bootstrap command
    bootstrap_parser = subparsers.add_parser(
        "bootstrap",
        help="Generate the cluster-wide bootstrap manifests",
    )
    bootstrap_parser.add_argument(
        "-c", "--config",
        help="Path to bootstrap settings (YAML or JSON)",
    )
    bootstrap_parser.add_argument(
        "--image",
        help="SDM container image",
    )
    bootstrap_parser.add_argument(
        "-o", "--output",
        help="Output directory (default: stdout)",
    )
    bootstrap_parser.add_argument(
        "--format",
        choices=["yaml", "json"],
        default="yaml",
        help="Output format (default: yaml)",
    )

    # context command
    context_parser = subparsers.add_parser(
        "context",
        help="Show the current Kubernetes config context",
    )
    context_parser.add_argument(
        "--kubeconfig",
        help="Path to the kube config file",
    )

    # validate command
    validate_parser = subparsers.add_parser(
        "validate",
        help="Validate application descriptor and goal files",
    )
    validate_parser.add_argument(
        "-f", "--file",
        required=True,
        help="Path to the application descriptor",
    )
    validate_parser.add_argument(
        "-g", "--goal",
        help="Path to the deployment goal",
    )

    return parser


def render(documents: List[Any], output_format: str) -> str:
    """Render documents as a JSON list or multi-document YAML."""
    if output_format == "json":
        return json.dumps(documents, indent=2)
    docs = [yaml.dump(d, default_flow_style=False, sort_keys=False) for d in documents]
    return "---\n" + "---\n".join(docs)


def output_documents(
    documents: List[Any],
    output_format: str,
    output_path: Optional[str] = None,
    name: str = "manifests",
) -> None:
    """Output documents to file or stdout."""
    content = render(documents, output_format)

    if output_path:
        out_dir = Path(output_path)
        out_dir.mkdir(parents=True, exist_ok=True)
        out_file = out_dir / f"{name}.{output_format}"
        out_file.write_text(content)
        print(f"Written: {out_file}", file=sys.stderr)
    else:
        print(content)


def cmd_augment(args: argparse.Namespace) -> int:
    """Handle augment command."""
    try:
        app = load_application(args.file)
        goal = load_goal(args.goal)
    except (FileNotFoundError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    context = args.context
    if context is None:
        context = kube_config_context(args.kubeconfig)

    augmented = prepare_for_self_deploy(app, goal, context)
    output_documents([augmented.to_dict()], args.format, args.output, name=augmented.name)
    return 0


def cmd_bootstrap(args: argparse.Namespace) -> int:
    """Handle bootstrap command."""
    data = {}
    if args.config:
        try:
            data = load_document(args.config)
        except (FileNotFoundError, ValueError) as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1
    if args.image:
        data["image"] = args.image

    config = BootstrapConfig.from_dict(data)
    manifests = generate_all_manifests(config)
    output_documents(manifests, args.format, args.output, name="cluster-wide")

    if args.verbose:
        print(f"Generated {len(manifests)} manifests for {config.name}", file=sys.stderr)
    return 0


def cmd_context(args: argparse.Namespace) -> int:
    """Handle context command."""
    context = kube_config_context(args.kubeconfig)
    if not context:
        print("No current Kubernetes context", file=sys.stderr)
        return 1
    print(context)
    return 0


def cmd_validate(args: argparse.Namespace) -> int:
    """Handle validate command."""
    checks = [(args.file, validate_application)]
    if args.goal:
        checks.append((args.goal, validate_goal))

    failed = False
    for path, validate in checks:
        try:
            data = load_document(path)
        except (FileNotFoundError, ValueError) as e:
            print(f"Error: {e}", file=sys.stderr)
            failed = True
            continue

        errors = validate(data)
        if errors:
            print(f"Validation errors in {path}:", file=sys.stderr)
            for error in errors:
                print(f"  - {error}", file=sys.stderr)
            failed = True
        else:
            print(f"✓ {path} is valid")

    return 1 if failed else 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    if not args.command:
        parser.print_help()
        return 0

    commands = {
        "augment": cmd_augment,
        "bootstrap": cmd_bootstrap,
        "context": cmd_context,
        "validate": cmd_validate,
    }

    handler = commands.get(args.command)
    if handler:
        return handler(args)

    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
