# rover_monitor/main.py

import logging
import sys

from .cli import build_parser
from .config import Config, apply_overrides
from .errors import ConfigError, RoverConnectionError
from .logging import ConsoleLog, StructuredLog, RunLogEntry

from .services.rover_client import RoverClient
from .services.poller import Poller
from .services.sinks import SinkChain
from .services.output_formatter import emit_json, emit_human, emit_identity
from .services.notifiers.healthchecks import HealthchecksNotifier
from .services.uploader import ReadingUploader

EXIT_OK = 0
EXIT_CONFIG = 1
EXIT_CONNECT = 2


def build_sink(app_cfg, args, identity, log) -> SinkChain:
    sink = SinkChain(log)

    if not args.quiet:
        if args.json:
            sink.add("stdout", lambda reading: emit_json(reading, identity, compact=args.compact))
        else:
            sink.add("stdout", emit_human)

    structured_logger = StructuredLog(
        app_cfg.logging.structured_path,
        app_cfg.logging.structured_enabled,
    )
    if structured_logger.enabled:
        sink.add(
            "structured-log",
            lambda reading: structured_logger.write(RunLogEntry.from_reading(reading, identity)),
        )

    healthchecks = HealthchecksNotifier(app_cfg.healthchecks, log)
    if healthchecks.enabled:
        sink.add("healthchecks", healthchecks.report)

    uploader = ReadingUploader(app_cfg.upload, log)
    if uploader.enabled:
        sink.add("upload", lambda reading: uploader.upload(reading, identity))

    log.debug("Reading sinks: %s", ", ".join(sink.names) or "none")
    return sink


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        app_cfg = Config.load(args.config)
        app_cfg = apply_overrides(
            app_cfg,
            port=args.port,
            interval=getattr(args, "interval", None),
            trace=args.trace,
        )
    except (ConfigError, FileNotFoundError) as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        parser.print_usage(sys.stderr)
        return EXIT_CONFIG

    console_logger = ConsoleLog(
        level="DEBUG" if args.debug or app_cfg.connection.trace else app_cfg.logging.console_level,
        quiet=args.quiet or app_cfg.logging.console_quiet,
        debug_modules=app_cfg.logging.debug_modules,
    )
    log = console_logger.setup()
    if args.debug:
        logging.getLogger("pymodbus").setLevel(logging.INFO)

    log.info(
        "port=%s interval=%ss",
        app_cfg.connection.port,
        app_cfg.polling.interval,
    )

    client = RoverClient(app_cfg.connection, log)
    poller = Poller(
        client,
        log,
        interval=app_cfg.polling.interval,
        supported_model=app_cfg.polling.supported_model,
        include_status=app_cfg.polling.include_status,
    )

    try:
        identity = poller.start()
    except RoverConnectionError:
        return EXIT_CONNECT

    try:
        if args.command == "identify":
            emit_identity(identity, as_json=args.json)
        elif args.command == "read":
            poller.run(build_sink(app_cfg, args, identity, log), max_cycles=1)
        elif args.command == "monitor":
            poller.run(build_sink(app_cfg, args, identity, log))
        else:
            raise ValueError(f"Unsupported command: {args.command}")
    except KeyboardInterrupt:
        log.info("Interrupted; stopping monitor.")
        poller.stop()
    finally:
        client.close()

    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
