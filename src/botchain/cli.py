"""botchain CLI: publish, inspect and verify chatbot definition chains."""

import argparse
import json
import logging
import sys
from importlib.metadata import version as get_version, PackageNotFoundError
from pathlib import Path
from typing import Optional

from pydantic import ValidationError


def _configure_logging(verbose: bool) -> None:
    logger = logging.getLogger("botchain")
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    # Without --verbose, warnings fall through to logging's last-resort stderr handler
    if verbose and not logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter("%(levelname)s | %(name)s | %(message)s"))
        logger.addHandler(handler)


def main():
    """Main CLI entry point for botchain commands."""
    try:
        botchain_version = get_version("botchain")
    except PackageNotFoundError:
        botchain_version = "dev"

    parser = argparse.ArgumentParser(
        prog="botchain",
        description="botchain: hash-linked version history for chatbot definitions"
    )
    parser.add_argument("--version", action="version", version=f"botchain {botchain_version}")
    # Common arguments
    parent_parser = argparse.ArgumentParser(add_help=False)
    parent_parser.add_argument(
        "--store",
        type=Path,
        default=None,
        help="Path to chain store (defaults to $BOTCHAIN_STORE or botchain.jsonl)"
    )
    parent_parser.add_argument(
        "--algorithm",
        default=None,
        help="Digest algorithm (defaults to $BOTCHAIN_ALGORITHM, else the store header, else sha256)"
    )
    parent_parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress all non-error output."
    )
    parent_parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging on stderr."
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # append command
    append_parser = subparsers.add_parser(
        "append",
        help="Append a chatbot definition JSON file as a new version",
        parents=[parent_parser]
    )
    append_parser.add_argument(
        "definition_path",
        type=Path,
        help="Path to chatbot definition JSON"
    )

    # show command
    show_parser = subparsers.add_parser(
        "show",
        help="Show the definition stored at a position",
        parents=[parent_parser]
    )
    show_parser.add_argument(
        "position",
        type=int,
        help="Record position (0-based)"
    )
    show_parser.add_argument(
        "--raw",
        action="store_true",
        help="Print raw payload text instead of the decoded definition"
    )

    # log command
    subparsers.add_parser(
        "log",
        help="List all stored versions",
        parents=[parent_parser]
    )

    # verify command
    verify_parser = subparsers.add_parser(
        "verify",
        help="Verify chain integrity of a store",
        parents=[parent_parser]
    )
    verify_parser.add_argument(
        "--output-dir",
        type=Path,
        default=None,
        help="Output directory for verify_report.json"
    )

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    _configure_logging(args.verbose)

    # Lazy import: only load the store layer once a command is dispatched
    from botchain.api import history, load_definition, open_store, publish_to_store, verify_store
    from botchain.config import StoreSettings
    from botchain.definition import ChatbotDefinition
    from botchain.errors import ChainIntegrityError, ChainStoreError, DefinitionDecodeError

    try:
        settings = StoreSettings.from_env(path=args.store, algorithm=args.algorithm)
    except ValidationError as e:
        print(f"Error: {e.errors()[0]['msg']}", file=sys.stderr)
        sys.exit(1)

    def _fail(message: str) -> None:
        print(f"Error: {message}", file=sys.stderr)
        sys.exit(1)

    def _open_chain():
        try:
            return open_store(settings)
        except ChainIntegrityError as e:
            _fail(f"{settings.path}: {e.report.message}")
        except ChainStoreError as e:
            _fail(f"{settings.path}: {e}")

    if args.command == "append":
        try:
            data = json.loads(args.definition_path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            _fail(f"Definition file not found: {args.definition_path}")
        except OSError as e:
            _fail(f"{args.definition_path}: cannot read ({e.strerror or e})")
        except UnicodeDecodeError:
            _fail(f"{args.definition_path}: not valid UTF-8")
        except json.JSONDecodeError as e:
            _fail(f"{args.definition_path}: invalid JSON ({e.msg})")
        try:
            definition = ChatbotDefinition.from_dict(data)
            record = publish_to_store(settings, definition)
        except DefinitionDecodeError as e:
            _fail(f"{args.definition_path}: {e}")
        except ChainIntegrityError as e:
            _fail(f"{settings.path}: {e.report.message}")
        except ChainStoreError as e:
            _fail(f"{settings.path}: {e}")
        if not args.quiet:
            print(f"[OK] Appended {definition.name!r}")
            print(f"  Position: {record.position}")
            print(f"  Hash: {record.hash}")

    elif args.command == "show":
        chain = _open_chain()
        record = chain.get(args.position)
        if record is None:
            _fail(f"No record at position {args.position} (chain has {len(chain)} records)")
        if args.raw:
            sys.stdout.write(record.payload.decode("utf-8", errors="replace") + "\n")
            return
        try:
            definition = load_definition(chain, args.position)
        except DefinitionDecodeError as e:
            _fail(f"Position {args.position}: {e}")
        print(json.dumps(definition.to_dict(), indent=2, ensure_ascii=False))

    elif args.command == "log":
        chain = _open_chain()
        if not args.quiet:
            for row in history(chain):
                name = row["name"] if row["name"] is not None else "<undecodable>"
                print(f"{row['position']:>6}  {row['hash']}  {name}")
            print(f"{len(chain)} records, head {chain.head_hash}")

    elif args.command == "verify":
        try:
            report = verify_store(settings.path, algorithm=settings.algorithm)
        except ChainStoreError as e:
            _fail(f"{settings.path}: {e}")
        _write_verify_report(report, args.output_dir, args.quiet)
        if not report.ok:
            sys.exit(1)


def _write_verify_report(report, output_dir: Optional[Path], quiet: bool) -> None:
    from botchain._internal.canonical_json import canonical_dumps

    if output_dir is not None:
        output_dir.mkdir(parents=True, exist_ok=True)
        report_out = output_dir / "verify_report.json"
        report_out.write_text(canonical_dumps(report.model_dump(mode="json")) + "\n", encoding="utf-8")
        if not quiet:
            print("[OK] Verification complete")
            print(f"  Report: {report_out}")
    elif not quiet:
        status = "OK" if report.ok else "FAILED"
        print(f"[{status}] Verification complete")
    if not quiet:
        print(f"  Status: {'OK' if report.ok else 'FAILED'}")
        print(f"  Checked: {report.checked}")
        print(f"  Algorithm: {report.algorithm}")
        print(f"  Head: {report.head_hash}")
        if report.broken_at is not None:
            print(f"  Broken at: {report.broken_at}")
            for issue in report.issues:
                print(f"    [{issue.position}] {issue.code.value}: {issue.message}")


if __name__ == "__main__":
    main()
