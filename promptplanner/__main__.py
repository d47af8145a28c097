#!/usr/bin/env python3
"""
Run the relay server.
Supports: python -m promptplanner --host <host> --port <port>
"""

import argparse

from promptplanner import config as app_config


def main():
    """Main entry point for the relay"""
    parser = argparse.ArgumentParser(description="PromptPlanner relay - forwards planner requests to AI vendors")
    parser.add_argument("--host", default=app_config.RELAY_HOST, help="Interface to bind to")
    parser.add_argument("--port", "-p", type=int, default=app_config.RELAY_PORT, help="Port to listen on")

    args = parser.parse_args()

    from promptplanner.relay import run_relay
    run_relay(args.host, args.port)


if __name__ == "__main__":
    main()
