"""CLI entrypoint for saved city/township location records."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from citytown.common.config_loader import AppConfig, load_app_config
from citytown.common.constants import EXIT_HARD_FAIL, EXIT_SUCCESS, EXIT_USER_ERROR
from citytown.common.errors import (
    LocationError,
    RecordNotFoundError,
    ValidationError,
)
from citytown.common.http import HttpClient
from citytown.common.ids import generate_session_id
from citytown.common.logging import build_logger, close_logger, log_event
from citytown.records.materializer import RecordMaterializer
from citytown.records.service import LocationListView, LocationService
from citytown.records.store import JsonFileRecordStore
from citytown.reference.source import ReferenceSource, build_reference_source
from citytown.selection.reconciler import SelectionReconciler, SelectorState

USER_ERRORS = (ValidationError, RecordNotFoundError)


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--config-dir", default="./config")
    parser.add_argument("--overlay-config-dir", default=None)
    parser.add_argument("--data-dir", default="./data")
    parser.add_argument("--reference-url", default=None)
    parser.add_argument("--session-id", default=None)
    parser.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARN", "ERROR"])

    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("cities")
    townships = sub.add_parser("townships")
    townships.add_argument("city_id")
    sub.add_parser("list")
    get = sub.add_parser("get")
    get.add_argument("record_id")
    create = sub.add_parser("create")
    create.add_argument("--city", required=True)
    create.add_argument("--township", required=True)
    update = sub.add_parser("update")
    update.add_argument("record_id")
    update.add_argument("--city", default=None)
    update.add_argument("--township", default=None)
    delete = sub.add_parser("delete")
    delete.add_argument("record_id")
    delete.add_argument("--yes", action="store_true", help="confirm deletion")
    return parser.parse_args(argv)


def _print_json(payload) -> None:
    print(json.dumps(payload, ensure_ascii=False, indent=2))


def _ready_selector(source: ReferenceSource, logger: logging.Logger, seed_city: str = "", seed_township: str = "") -> SelectionReconciler:
    reconciler = SelectionReconciler(source, logger=logger)
    if reconciler.initialize(seed_city, seed_township) is SelectorState.FAILED:
        raise reconciler.error
    return reconciler


def _settle(reconciler: SelectionReconciler) -> None:
    if reconciler.state is SelectorState.FAILED:
        raise reconciler.error


def execute_command(args: argparse.Namespace, config: AppConfig, source: ReferenceSource, logger: logging.Logger) -> int:
    service = LocationService(
        RecordMaterializer(source, logger=logger),
        JsonFileRecordStore(config.store_path),
        logger=logger,
    )

    if args.command == "cities":
        for city in _ready_selector(source, logger).cities:
            print(f"{city.id}\t{city.name}")
    elif args.command == "townships":
        reconciler = _ready_selector(source, logger)
        reconciler.set_city(args.city_id)
        _settle(reconciler)
        for township in reconciler.townships:
            print(f"{township.id}\t{township.name}")
    elif args.command == "list":
        view = LocationListView(service)
        if not view.refresh():
            raise view.error
        if not view.records:
            print("No saved locations")
        for record in view.records:
            print(f"{record.id}\t{record.label}\t{record.created_at}")
    elif args.command == "get":
        _print_json(service.get_location(args.record_id).to_dict())
    elif args.command == "create":
        reconciler = _ready_selector(source, logger)
        reconciler.set_city(args.city)
        _settle(reconciler)
        reconciler.set_township(args.township)
        record = service.create_location(reconciler.current_selection())
        _print_json(record.to_dict())
    elif args.command == "update":
        existing = service.get_location(args.record_id)
        reconciler = _ready_selector(source, logger, existing.city_id, existing.township_id)
        if args.city is not None:
            reconciler.set_city(args.city)
            _settle(reconciler)
        if args.township is not None:
            reconciler.set_township(args.township)
        record = service.update_location(existing.id, reconciler.current_selection())
        _print_json(record.to_dict())
    elif args.command == "delete":
        if not args.yes:
            print(f"Refusing to delete {args.record_id} without --yes", file=sys.stderr)
            return EXIT_USER_ERROR
        service.delete_location(args.record_id)
        print(f"Deleted {args.record_id}")
    else:
        raise ValueError(f"Unknown command: {args.command}")
    return EXIT_SUCCESS


def run_command(args: argparse.Namespace) -> int:
    session_id = args.session_id or generate_session_id()
    data_dir = Path(args.data_dir)
    logger = build_logger(session_id, data_dir=data_dir, level=args.log_level, command=args.command)

    http_client = None
    try:
        config = load_app_config(
            Path(args.config_dir),
            data_dir=data_dir,
            overlay_config_dir=Path(args.overlay_config_dir) if args.overlay_config_dir else None,
            reference_url=args.reference_url,
        )
        if config.reference.base_url:
            http_client = HttpClient(timeout=config.reference.timeout, retry=config.reference.retry)
        source = build_reference_source(config.reference, http_client=http_client)

        log_event(logger, "command start", event="COMMAND_START", status="ok")
        exit_code = execute_command(args, config, source, logger)
        log_event(logger, "command end", event="COMMAND_END", status="ok")
        return exit_code
    except USER_ERRORS as exc:
        print(f"error: {exc}", file=sys.stderr)
        log_event(logger, str(exc), event="COMMAND_FAIL", status="error", error_code=exc.error_code)
        return EXIT_USER_ERROR
    except LocationError as exc:
        print(f"error: {exc}", file=sys.stderr)
        log_event(logger, str(exc), event="COMMAND_FAIL", status="error", error_code=exc.error_code)
        return EXIT_HARD_FAIL
    except Exception:
        logger.exception(
            "unexpected failure",
            extra={"event": "COMMAND_FAIL", "status": "error", "error_code": "UNEXPECTED_ERROR"},
        )
        return EXIT_HARD_FAIL
    finally:
        if http_client is not None:
            http_client.close()
        close_logger(logger)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv if argv is not None else sys.argv[1:])
    return run_command(args)


if __name__ == "__main__":
    raise SystemExit(main())
