import argparse
import logging
import sys

import yaml

from iso20022_generator.builder import Pain001Builder
from iso20022_generator.integrations.pydantic import PydanticBatch, from_dataclass
from iso20022_generator.parser import Pain001Parser
from iso20022_generator.validator import Validator

logger = logging.getLogger(__name__)


def load_batch(path: str) -> PydanticBatch:
    """Reads a YAML (or JSON) batch file into its validated input model."""
    with open(path, "r", encoding="utf-8") as f:
        # Every scalar stays a string, pydantic parses dates and amounts
        data = yaml.load(f, Loader=yaml.BaseLoader)
    return PydanticBatch.model_validate(data or {})


def collect_errors(batch: PydanticBatch) -> list:
    """Runs the optional validator over every record of a batch."""
    errors = []
    report = Validator.validate_initialization(batch.initialization.to_dataclass())
    errors.extend(report.errors)
    for i, entry in enumerate(batch.transactions):
        report = Validator.validate_transaction(
            entry.receiver.to_dataclass(), entry.transaction.to_dataclass()
        )
        errors.extend(f"[Entry {i}] {err}" for err in report.errors)
    return errors


def handle_build(args):
    """Handles the 'build' subcommand: Writes a pain.001 message from a batch file."""
    try:
        batch = load_batch(args.file)

        if args.strict:
            errors = collect_errors(batch)
            if errors:
                print("❌ Validation Failed:", file=sys.stderr)
                for err in errors:
                    print(f"  - {err}", file=sys.stderr)
                sys.exit(1)

        builder = Pain001Builder(batch.initialization.to_dataclass())
        for entry in batch.transactions:
            builder.add_transaction(entry.receiver.to_dataclass(), entry.transaction.to_dataclass())

        if args.output:
            builder.save(args.output)
            print(f"✅ Wrote {len(batch.transactions)} transaction(s) to {args.output}")
        else:
            sys.stdout.write(builder.to_string())

    except Exception as e:
        logger.debug("build failed", exc_info=True)
        print(f"Error building message: {e}", file=sys.stderr)
        sys.exit(1)


def handle_validate(args):
    """Handles the 'validate' subcommand: Checks a batch file without building."""
    try:
        batch = load_batch(args.file)
        errors = collect_errors(batch)
        if errors:
            print("⚠️ Data Validation Failed:")
            for err in errors:
                print(f"  - {err}")
            sys.exit(1)

        print("✅ Validation Successful: Batch is valid.")

    except Exception as e:
        logger.debug("validate failed", exc_info=True)
        print(f"Error validating file: {e}", file=sys.stderr)
        sys.exit(1)


def handle_inspect(args):
    """Handles the 'inspect' subcommand: Outputs a pain.001 file as JSON."""
    try:
        with open(args.file, "rb") as f:
            raw_data = f.read()

        document = Pain001Parser(raw_data).parse()
        print(from_dataclass(document).model_dump_json(indent=2))

    except Exception as e:
        logger.debug("inspect failed", exc_info=True)
        print(f"Error parsing file: {e}", file=sys.stderr)
        sys.exit(1)


def main():
    parser = argparse.ArgumentParser(
        prog="iso20022-generator",
        description="Generate ISO 20022 pain.001 credit transfer initiation messages."
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity (default: WARNING).",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    # Subcommand: build
    build_parser = subparsers.add_parser("build", help="Build a pain.001 XML file from a batch file.")
    build_parser.add_argument("file", help="Path to the YAML or JSON batch file.")
    build_parser.add_argument("-o", "--output", help="Output XML path (default: stdout).")
    build_parser.add_argument(
        "--strict", action="store_true", help="Refuse to build when the batch fails validation."
    )
    build_parser.set_defaults(func=handle_build)

    # Subcommand: validate
    validate_parser = subparsers.add_parser("validate", help="Validate the records of a batch file.")
    validate_parser.add_argument("file", help="Path to the YAML or JSON batch file.")
    validate_parser.set_defaults(func=handle_validate)

    # Subcommand: inspect
    inspect_parser = subparsers.add_parser("inspect", help="Parse a pain.001 file and output JSON.")
    inspect_parser.add_argument("file", help="Path to the pain.001 XML file.")
    inspect_parser.set_defaults(func=handle_inspect)

    args = parser.parse_args()
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )
    args.func(args)


if __name__ == "__main__":
    main()
