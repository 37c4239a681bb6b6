#!/usr/bin/env python3
"""
SIMPLE-DDNS - Dynamic DNS Client for AWS Route 53

Command-line entry point: single run, daemon mode and record store
import/export.

Created: 2026-10-19
Author: Manuel Ziel
License: MIT
"""

################################################################################
# IMPORTS & DEPENDENCIES
################################################################################

# Standard library imports
import argparse
import json
import logging
import sys
from typing import Any, Dict, List, Optional

# Third-party imports
import yaml

# Internal imports
from . import __software_name__, __version__
from .application import Application
from .config import DEFAULT_CONFIG_PATH, ConfigManager
from .daemon import DaemonManager
from .database import RecordStore
from .exceptions import DynDNSException, ValidationError
from .logger import LoggerManager
from .network import PUBLIC_IP_PATH, AddressResolver
from .records import DomainRecord

################################################################################
# ARGUMENT PARSING - Command-Line Interface
################################################################################

def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse CLI arguments with subcommands (import, export, ip)."""
    parser = argparse.ArgumentParser(
        prog='simple-ddns',
        description='Simple DDNS - keeps Route 53 records pointed at this host',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s                          # Single reconciliation cycle
  %(prog)s --daemon                 # Continuous monitoring mode
  %(prog)s import records.yaml      # Seed the record store
  %(prog)s export --format json     # Dump active records
  %(prog)s ip                       # Show current public addresses
        """
    )

    parser.add_argument('-v', '--version', action='version', version=f'%(prog)s {__version__}')
    parser.add_argument('--config', '-c', default=DEFAULT_CONFIG_PATH, help=f'Config file (default: {DEFAULT_CONFIG_PATH})')
    parser.add_argument('--account', '-a', default=None, help='Only update zones of this provider account')
    parser.add_argument('--daemon', '-d', action='store_true', help='Run in daemon mode (continuous monitoring)')

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    parser_import = subparsers.add_parser('import', help='Seed the record store from a YAML/JSON file')
    parser_import.add_argument('file', type=str, help='Path to records file (YAML or JSON)')

    parser_export = subparsers.add_parser('export', help='Export active records')
    parser_export.add_argument('--output', type=str, default=None, help='Output file path (default: stdout)')
    parser_export.add_argument('--format', type=str, choices=['yaml', 'json'], default='yaml', help='Output format (default: yaml)')

    subparsers.add_parser('ip', help='Show current public IP addresses')

    return parser.parse_args(argv)

################################################################################
# RECORD FILES - Import / Export
################################################################################

def load_records_file(path: str) -> List[DomainRecord]:
    """Read {records: [{fqdn, type, value}]} from a YAML or JSON file. Raises ValidationError."""
    try:
        with open(path, 'r', encoding='utf-8') as f:
            if path.endswith('.json'):
                data = json.load(f)
            else:
                data = yaml.safe_load(f)
    except OSError as e:
        raise ValidationError(f"Cannot read {path}: {e}")
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ValidationError(f"Invalid records file {path}: {e}")

    entries = data.get('records') if isinstance(data, dict) else data
    if not isinstance(entries, list):
        raise ValidationError(f"{path}: expected a 'records' list")

    return [DomainRecord.from_dict(entry) for entry in entries]


def dump_records(records: List[DomainRecord], format: str) -> str:
    data: Dict[str, Any] = {'records': [record.to_dict() for record in records]}
    if format == 'json':
        return json.dumps(data, indent=2) + "\n"
    return yaml.safe_dump(data, sort_keys=False)

################################################################################
# CLI COMMAND HANDLERS - Subcommand Processing
################################################################################

def handle_cli_command(args: argparse.Namespace, config: ConfigManager, logger: logging.Logger) -> int:
    """Handle CLI subcommands (import, export, ip). Returns: Exit code (0=success)."""
    if args.command == 'import':
        records = load_records_file(args.file)
        store = RecordStore.from_config(config, logger=logger)
        store.init_records(records)
        logger.success(f"Imported {len(records)} records from {args.file}")
        return 0

    elif args.command == 'export':
        store = RecordStore.from_config(config, logger=logger)
        output = dump_records(store.get_active_records(), args.format)
        if args.output:
            with open(args.output, 'w', encoding='utf-8') as f:
                f.write(output)
            logger.info(f"Exported records to {args.output}")
        else:
            sys.stdout.write(output)
        return 0

    elif args.command == 'ip':
        address = AddressResolver.from_config(config, logger=logger).resolve()
        print(f"IPv4: {address.v4 or '-'}")
        print(f"IPv6: {address.v6 or '-'}")
        return 0 if not address.empty else 1

    return 0

################################################################################
# MAIN APPLICATION - Entry Point and Initialization
################################################################################

def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point. Load config, set up logging, run a subcommand, a single cycle or the daemon."""
    args = parse_arguments(argv)

    try:
        config = ConfigManager(args.config)
    except DynDNSException as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    log_level = getattr(logging, config.log_level, logging.INFO)
    logger = LoggerManager.get_logger(__software_name__, level=log_level, daemon_mode=args.daemon)

    try:
        if args.command:
            return handle_cli_command(args, config, logger)

        run_mode = "daemon" if args.daemon else "once"
        logger.info(f"{__software_name__} {__version__} starting... (mode: {run_mode})")

        app = Application.from_config(config, logger=logger, account=args.account)

        if args.daemon:
            interval = config.decode_int(f"{PUBLIC_IP_PATH}.check-period-mins", 5) * 60
            DaemonManager(app, logger, cycle_interval=interval).run_forever()
            return 0

        try:
            if app.run_cycle():
                logger.info("Single update completed successfully")
                return 0
            logger.warning("Single update completed with errors")
            return 1
        finally:
            app.cleanup()

    except DynDNSException as e:
        logger.error(f"{e}")
        return 1
    except KeyboardInterrupt:
        logger.warning("Application interrupted by user")
        return 130


if __name__ == "__main__":
    sys.exit(main())
