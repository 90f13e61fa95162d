"""Modbus master/slave test bench entry point."""

import argparse
import sys
import time

from modbus_bench.client import ClientError, ClientManager, ModbusRequestError, ModbusService
from modbus_bench.config import AppConfig
from modbus_bench.logging_system import LogManager
from modbus_bench.server import SeedError, SlaveController, build_pipeline, read_seed
from modbus_bench.server.store import ModbusStore

READ_OPERATIONS = {
    'read-coils': 'read_coils',
    'read-discrete-inputs': 'read_discrete_inputs',
    'read-holding-registers': 'read_holding_registers',
    'read-input-registers': 'read_input_registers',
}

WRITE_OPERATIONS = {
    'write-coil': 'write_single_coil',
    'write-register': 'write_single_register',
    'write-coils': 'write_multiple_coils',
    'write-registers': 'write_multiple_registers',
}

COIL_WRITES = ('write-coil', 'write-coils')


def parse_bool(text: str) -> bool:
    value = text.strip().lower()
    if value in ('1', 'true', 'on'):
        return True
    if value in ('0', 'false', 'off'):
        return False
    raise argparse.ArgumentTypeError(f"not a coil value: {text}")


def parse_register(text: str) -> int:
    value = int(text, 0)
    if not 0 <= value <= 0xFFFF:
        raise argparse.ArgumentTypeError(f"register value out of range: {text}")
    return value


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='Modbus test bench - slave with simulated field data, and a master'
    )
    parser.add_argument('--debug', action='store_true', help='Record debug events')
    subparsers = parser.add_subparsers(dest='role', required=True)

    server = subparsers.add_parser('server', help='Run the Modbus slave')
    server.add_argument('--seed', default=None, help='Seed JSON file (default: seed.json)')
    server.add_argument('--transport', choices=['tcp', 'rtu'], default=None)
    server.add_argument('--host', default=None, help='Address to listen on (tcp)')
    server.add_argument('--modbus-port', type=int, default=None, help='Modbus TCP port (default: 5502)')
    server.add_argument('--serial-port', default=None, help='Serial device (rtu)')
    server.add_argument('--baudrate', type=int, default=None)
    server.add_argument('--unit', type=int, default=None, help='Unit id to answer (default: 1)')
    server.add_argument('--simulate', action='store_true', help='Start the activity simulation')
    server.add_argument(
        '--view',
        choices=['tui', 'web', 'logs'],
        default='tui',
        help='UI mode: tui (textual interface), web (browser dashboard), logs (headless)'
    )
    server.add_argument(
        '--port',
        type=int,
        default=7681,
        help='Port for web server (only used with --view web, default: 7681)'
    )

    client = subparsers.add_parser('client', help='Run one master request')
    client.add_argument('--transport', choices=['tcp', 'rtu'], default=None)
    client.add_argument('--host', default=None)
    client.add_argument('--modbus-port', type=int, default=None)
    client.add_argument('--serial-port', default=None)
    client.add_argument('--baudrate', type=int, default=None)
    client.add_argument('--unit', type=int, default=None)
    client.add_argument(
        '--mock-seed',
        default=None,
        help='Answer from an in-process slave seeded from this file instead of the network'
    )
    client.add_argument('operation', choices=list(READ_OPERATIONS) + list(WRITE_OPERATIONS))
    client.add_argument('address', type=lambda s: int(s, 0))
    client.add_argument('values', nargs='*', help='Count for reads, value(s) for writes')
    return parser


def apply_overrides(section, args) -> None:
    """Copy command-line flags that were given onto a config section."""
    overrides = {
        'transport': args.transport,
        'host': args.host,
        'port': args.modbus_port,
        'serial_port': args.serial_port,
        'baudrate': args.baudrate,
        'unit_id': args.unit,
    }
    for name, value in overrides.items():
        if value is not None:
            setattr(section, name, value)


def run_server(args, config: AppConfig, log_manager: LogManager) -> int:
    apply_overrides(config.server, args)
    if args.seed:
        config.server.seed_file = args.seed

    try:
        seed = read_seed(config.server.seed_file)
    except SeedError as e:
        log_manager.critical(f"Cannot load seed: {e}")
        print(f"Cannot load seed: {e}", file=sys.stderr)
        return 1

    controller = SlaveController(config, seed, log_manager)
    controller.start_server()
    if args.simulate:
        controller.start_simulation()

    try:
        if args.view == 'web':
            from modbus_bench.server.web_server import run_web_dashboard
            log_manager.info(f"Starting in WEB mode on port {args.port}")
            run_web_dashboard(controller, log_manager, port=args.port)

        elif args.view == 'logs':
            log_manager.add_subscriber(lambda entry: print(entry.format(), flush=True))
            log_manager.info("Starting in LOGS-ONLY mode (headless)")
            log_manager.info("Press Ctrl+C to stop")
            while True:
                time.sleep(60)
                log_manager.rotate_log_file()

        else:  # args.view == 'tui' (default)
            from modbus_bench.server.tui import run_tui
            log_manager.info("Starting in TUI mode")
            run_tui(controller, config)

    except KeyboardInterrupt:
        log_manager.info("Shutting down")
    finally:
        controller.shutdown()
    return 0


def run_client(args, config: AppConfig, log_manager: LogManager) -> int:
    apply_overrides(config.client, args)

    pipeline = None
    if args.mock_seed:
        try:
            store = ModbusStore.from_dump(read_seed(args.mock_seed))
        except SeedError as e:
            print(f"Cannot load seed: {e}", file=sys.stderr)
            return 1
        pipeline = build_pipeline(store, log_manager, unit_id=config.client.unit_id)

    try:
        values = parse_values(args.operation, args.values)
    except (argparse.ArgumentTypeError, ValueError) as e:
        print(f"Invalid arguments: {e}", file=sys.stderr)
        return 2

    manager = ClientManager(config.client, log_manager, mock_pipeline=pipeline)
    service = ModbusService(
        manager, log_manager, unit_id=config.client.unit_id, retries=config.client.retries
    )

    try:
        manager.connect(config.client.transport, config.client.host, config.client.port)
    except ClientError as e:
        print(f"Cannot connect: {e}", file=sys.stderr)
        return 1

    try:
        if args.operation in READ_OPERATIONS:
            result = getattr(service, READ_OPERATIONS[args.operation])(args.address, values)
            for offset, value in enumerate(result):
                print(f"{args.address + offset:5d}  {value}")
        else:
            method = getattr(service, WRITE_OPERATIONS[args.operation])
            if args.operation in ('write-coil', 'write-register'):
                method(args.address, values[0])
            else:
                method(args.address, values)
            print("OK")
    except ModbusRequestError as e:
        print(f"Request failed: {e}", file=sys.stderr)
        return 1
    finally:
        manager.disconnect()
    return 0


def parse_values(operation: str, raw: list):
    """Turn positional values into a read count or write values."""
    if operation in READ_OPERATIONS:
        if len(raw) > 1:
            raise ValueError("reads take a single count")
        return int(raw[0]) if raw else 1

    if not raw:
        raise ValueError(f"{operation} needs at least one value")
    if operation in ('write-coil', 'write-register') and len(raw) != 1:
        raise ValueError(f"{operation} takes exactly one value")

    convert = parse_bool if operation in COIL_WRITES else parse_register
    return [convert(value) for value in raw]


def main(argv=None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)
    config = AppConfig.create_default(debug=True if args.debug else None)

    log_manager = LogManager(
        max_entries=config.system.log_stack_size,
        log_file=config.system.log_file,
        debug_mode=config.system.debug,
        persist=args.role == 'server',
    )

    if args.role == 'server':
        return run_server(args, config, log_manager)
    return run_client(args, config, log_manager)


if __name__ == "__main__":
    sys.exit(main())
