"""Entry point — ships lines from stdin or a file to CloudWatch Logs."""

import logging
import signal
import sys
import threading

from cloudwatch_hook.config import load_config
from cloudwatch_hook.errors import InitializationError
from cloudwatch_hook.pipeline import install


def main():
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s — %(message)s",
        stream=sys.stderr,
    )

    config = load_config()
    shutdown_event = threading.Event()

    def signal_handler(signum, frame):
        logging.getLogger(__name__).info("Received signal %d, shutting down...", signum)
        shutdown_event.set()

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    logger = logging.getLogger(__name__)
    logger.info("Starting CloudWatch shipper — group=%s, stream=%s, level=%s, async=%s",
                config.group_name, config.stream_name, config.level.name, config.is_async)

    shipper_logger = logging.getLogger("shipper")
    shipper_logger.setLevel(logging.DEBUG)
    # Console output comes from the handler's own next stage.
    shipper_logger.propagate = False

    if config.log_file:
        try:
            source = open(config.log_file, encoding="utf-8")
        except OSError as e:
            logger.error("Could not open %s: %s", config.log_file, e)
            sys.exit(1)
    else:
        source = sys.stdin

    try:
        install(config, logger=shipper_logger)
    except InitializationError as e:
        logger.error("Could not set up CloudWatch stream: %s", e)
        if source is not sys.stdin:
            source.close()
        sys.exit(1)

    shipped = 0
    try:
        for lineno, line in enumerate(source, start=1):
            if shutdown_event.is_set():
                break
            line = line.rstrip("\n")
            if not line:
                continue
            shipper_logger.info(line, extra={"fields": {"line": lineno}})
            shipped += 1
    finally:
        if source is not sys.stdin:
            source.close()
        logger.info("Shipper finished: shipped=%d", shipped)


if __name__ == "__main__":
    main()
