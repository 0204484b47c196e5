#!/usr/bin/env python3
import argparse
import logging

from rtdblib.config import ClientConfig, DEFAULT_DATABASE_URL, DEFAULT_USER_AGENT
from rtdblib.database import Database
from rtdblib.demo import run_demo
from rtdblib.errors import RtdbError
from rtdblib.prometheus_exporter import PrometheusExporter


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Create, read, update and delete one user in a Realtime Database over REST.")
    parser.add_argument("--url", default=DEFAULT_DATABASE_URL, help="Database root URL (https).")
    parser.add_argument("--timeout", type=float, default=15.0, help="HTTP read timeout in seconds.")
    parser.add_argument("--user-agent", default=DEFAULT_USER_AGENT, help="User-Agent header to send.")
    parser.add_argument("--retries", type=int, default=0, help="Transport retries for GET/PUT/DELETE.")
    parser.add_argument("--max-connections", type=int, default=4, help="Max connections in the HTTP pool.")
    parser.add_argument("--prometheus-port", type=int, default=0, help="Port for Prometheus metrics endpoint (0 to disable).")
    parser.add_argument("-v", "--verbose", action="count", default=0, help="Increase logging verbosity.")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    log_level = logging.WARNING
    if args.verbose == 1:
        log_level = logging.INFO
    elif args.verbose >= 2:
        log_level = logging.DEBUG
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )

    config = ClientConfig(
        database_url=args.url,
        request_timeout=max(1.0, args.timeout),
        user_agent=args.user_agent,
        max_connections=max(1, args.max_connections),
        retries=max(0, args.retries),
    )

    try:
        db = Database(config=config)
    except RtdbError as exc:
        logging.error("Invalid configuration: %s", exc)
        return 1

    exporter = None
    try:
        if args.prometheus_port > 0:
            exporter = PrometheusExporter(db.metrics, port=args.prometheus_port)
            try:
                exporter.start()
            except OSError as exc:
                logging.error("Cannot serve metrics on port %d: %s", args.prometheus_port, exc)
                return 1
            logging.info("Prometheus metrics available at http://0.0.0.0:%d/metrics", args.prometheus_port)
        run_demo(db)
    except RtdbError as exc:
        logging.error("CRUD demo failed: %s", exc)
        return 1
    finally:
        logging.info(db.metrics.summary())
        if exporter:
            exporter.stop()
        db.close()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
