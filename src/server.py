"""Protean Engine runner for the Payflow domain.

Starts the Engine that processes events asynchronously, keeping the
payment projections up to date when event processing is "async".

Usage:
    python src/server.py
    python src/server.py --test-mode   # Drain pending messages and exit
"""

import argparse

from protean.server.engine import Engine

from payflow.domain import payflow
from payflow.utils.logging import configure_logging


def main():
    parser = argparse.ArgumentParser(description="Payflow Engine runner")
    parser.add_argument(
        "--test-mode",
        action="store_true",
        help="Process pending messages once and exit",
    )
    args = parser.parse_args()

    configure_logging()
    payflow.init()

    engine = Engine(payflow, test_mode=args.test_mode)
    engine.run()


if __name__ == "__main__":
    main()
