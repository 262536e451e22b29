"""
Main Entry Point for the Smart Parking Allotment engine

Command-line front end: park and release vehicles, list slots and history,
show analytics, export history and reset the facility.
"""

import sys
import json
import logging
import argparse
import yaml
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent))

from parking_allotment.models import ParkingConfig
from parking_allotment.persistence import SnapshotPersistence, JsonFileKeyValueStore, DEFAULT_STORAGE_KEY
from parking_allotment.service import ParkingService
from parking_allotment.mqtt_client import MQTTClient
from parking_allotment.events import ParkingEventPublisher
from parking_allotment.reports import format_duration, format_timestamp, export_csv, export_tsv, invoice_text
from parking_allotment.validation import normalize_plate, normalize_owner, is_valid_plate, is_valid_owner

DEFAULT_CONFIG_PATH = "config/config.yaml"


def load_config(config_path: str = DEFAULT_CONFIG_PATH) -> dict:
    """Load configuration from YAML file"""
    path = Path(config_path)
    if not path.exists():
        return {}
    with open(path, 'r') as f:
        return yaml.safe_load(f) or {}


def setup_logging(config: dict):
    """Configure logging based on config"""
    log_config = config.get('logging', {})
    level = getattr(logging, log_config.get('level', 'WARNING'))
    format_str = log_config.get('format', '%(asctime)s - %(name)s - %(levelname)s - %(message)s')

    handlers = [logging.StreamHandler()]
    if log_config.get('file'):
        handlers.append(logging.FileHandler(log_config['file']))

    logging.basicConfig(level=level, format=format_str, handlers=handlers)


def build_mqtt_client(config: dict):
    mqtt_config = config.get('mqtt', {})
    if not mqtt_config.get('enabled', False):
        return None
    return MQTTClient(
        broker=mqtt_config.get('broker', 'localhost'),
        port=mqtt_config.get('port', 1883),
        client_id=mqtt_config.get('client_id', 'parking_allotment')
    )


def build_service(config: dict, mqtt_client: MQTTClient = None) -> ParkingService:
    """Wire configuration, storage and notifications into a ParkingService"""
    storage_config = config.get('storage', {})
    persistence = SnapshotPersistence(
        JsonFileKeyValueStore(storage_config.get('path', 'data/parking.json')),
        key=storage_config.get('key', DEFAULT_STORAGE_KEY)
    )

    publisher = None
    if mqtt_client is not None:
        publisher = ParkingEventPublisher(
            mqtt_client,
            facility_id=config.get('mqtt', {}).get('facility_id', 'main')
        )

    return ParkingService(
        config=ParkingConfig.from_dict(config.get('parking')),
        persistence=persistence,
        publisher=publisher
    )


def cmd_park(service: ParkingService, args) -> int:
    plate = normalize_plate(args.plate)
    owner = normalize_owner(args.owner)
    if not is_valid_plate(plate):
        print("Enter a valid vehicle number (e.g., TN 38 AB 1234)")
        return 1
    if not is_valid_owner(owner):
        print("Enter owner name")
        return 1

    result = service.allocate(args.type, plate, owner)
    if not result.ok:
        print(f"Error: {result.error}")
        return 1
    slot = result.slot
    print(f"Assigned slot {slot.id} to {plate} ({slot.session.category.label}) "
          f"at {format_timestamp(slot.session.entry_time)}")
    return 0


def cmd_release(service: ParkingService, args) -> int:
    result = service.release(args.slot_id)
    if not result.ok:
        print(f"Error: {result.error}")
        return 1
    print(invoice_text(result.record))
    return 0


def cmd_slots(service: ParkingService, args) -> int:
    views = service.occupancy_view()
    if args.json:
        print(json.dumps([v.to_dict() for v in views], indent=2))
        return 0
    for view in views:
        slot = view.slot
        if slot.occupied:
            print(f"#{slot.id:<3} {slot.category.label:<6} {slot.session.vehicle_plate:<14} "
                  f"{slot.session.owner_name:<20} {format_duration(view.elapsed_ms)}")
        else:
            print(f"#{slot.id:<3} {slot.category.label:<6} empty")
    return 0


def cmd_history(service: ParkingService, args) -> int:
    records = service.ledger_snapshot(args.limit)
    if args.json:
        print(json.dumps([r.to_dict() for r in records], indent=2))
        return 0
    if not records:
        print("No history yet")
    for record in records:
        print(f"{record.vehicle_plate:<14} slot {record.slot_id:<3} "
              f"{format_timestamp(record.exit_time)}  {format_duration(record.duration_ms)}  {record.fee}")
    return 0


def cmd_analytics(service: ParkingService, args) -> int:
    if args.days < 1:
        print("--days must be at least 1")
        return 1
    summary = service.analytics_summary(args.days)
    if args.json:
        print(json.dumps(summary.to_dict(), indent=2))
        return 0
    print(f"Total vehicles today: {summary.vehicles_today}")
    print(f"Total revenue:        {summary.total_revenue}")
    print(f"Average duration:     {format_duration(summary.average_duration_ms)}")
    print(f"Currently parked:     {summary.currently_parked}")
    for category, count in summary.counts_by_category.items():
        print(f"  {category.label:<6} {count}")
    for bucket in summary.revenue_by_day:
        print(f"  {bucket.label:>5} {bucket.revenue}")
    return 0


def cmd_export(service: ParkingService, args) -> int:
    records = service.ledger_snapshot()
    content = export_csv(records) if args.format == 'csv' else export_tsv(records)
    if args.output:
        Path(args.output).write_text(content, encoding='utf-8')
        print(f"Exported {len(records)} records to {args.output}")
    else:
        print(content)
    return 0


def cmd_reset(service: ParkingService, args) -> int:
    if not args.yes:
        print("This will clear slots and history. Re-run with --yes to confirm.")
        return 1
    service.reset()
    print("Data reset")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Smart Parking Allotment")
    parser.add_argument('--config', default=DEFAULT_CONFIG_PATH, help='Path to YAML configuration')
    sub = parser.add_subparsers(dest='command', required=True)

    park = sub.add_parser('park', help='Assign the nearest empty slot to a vehicle')
    park.add_argument('--plate', required=True)
    park.add_argument('--owner', required=True)
    park.add_argument('--type', required=True, choices=['car', 'bike', 'truck'])
    park.set_defaults(handler=cmd_park)

    release = sub.add_parser('release', help='Remove a vehicle and print its invoice')
    release.add_argument('slot_id', type=int)
    release.set_defaults(handler=cmd_release)

    slots = sub.add_parser('slots', help='Show every slot')
    slots.add_argument('--json', action='store_true')
    slots.set_defaults(handler=cmd_slots)

    history = sub.add_parser('history', help='Show completed sessions, newest first')
    history.add_argument('--limit', type=int)
    history.add_argument('--json', action='store_true')
    history.set_defaults(handler=cmd_history)

    stats = sub.add_parser('analytics', help='Show revenue and occupancy figures')
    stats.add_argument('--days', type=int, default=7)
    stats.add_argument('--json', action='store_true')
    stats.set_defaults(handler=cmd_analytics)

    export = sub.add_parser('export', help='Export history as CSV or TSV')
    export.add_argument('--format', choices=['csv', 'tsv'], default='csv')
    export.add_argument('--output')
    export.set_defaults(handler=cmd_export)

    reset = sub.add_parser('reset', help='Clear slots and history')
    reset.add_argument('--yes', action='store_true')
    reset.set_defaults(handler=cmd_reset)

    return parser


def main(argv=None) -> int:
    """Main entry point"""
    args = build_parser().parse_args(argv)
    config = load_config(args.config)
    setup_logging(config)

    mqtt_client = build_mqtt_client(config)
    if mqtt_client is not None and mqtt_client.connect():
        mqtt_client.start()

    try:
        service = build_service(config, mqtt_client)
        return args.handler(service, args)
    finally:
        if mqtt_client is not None:
            mqtt_client.flush(config.get('mqtt', {}).get('flush_timeout', 5.0))
            mqtt_client.stop()
            mqtt_client.disconnect()


if __name__ == "__main__":
    sys.exit(main())
