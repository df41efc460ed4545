#!/usr/bin/env python3
"""
Entry point for serving /llms.txt over HTTP.

Usage:
    python -m llms_generator.web.run --host 0.0.0.0 --port 5000 --config llms.config.json
"""

import argparse
import os

from llms_generator.config import load_config
from llms_generator.utils.log import setup_logger
from llms_generator.web.app import RouteConfig, run_app


def main():
    """Parse arguments and run the web application."""
    parser = argparse.ArgumentParser(
        description='Serve a generated llms-full document at /llms.txt'
    )
    parser.add_argument(
        '--host',
        default='127.0.0.1',
        help='Host to bind to (default: 127.0.0.1)'
    )
    parser.add_argument(
        '--port', '-p',
        type=int,
        default=5000,
        help='Port to listen on (default: 5000)'
    )
    parser.add_argument(
        '--config', '-c',
        default=None,
        help='JSON config file with generator options'
    )
    parser.add_argument(
        '--cache-ttl',
        type=float,
        default=60,
        help='Cache lifetime in minutes (default: 60)'
    )
    parser.add_argument(
        '--no-cache',
        action='store_true',
        help='Regenerate the document on every request'
    )
    parser.add_argument(
        '--revalidation-secret',
        default=os.environ.get('LLMS_REVALIDATION_SECRET'),
        help='Enable ?revalidate=true&secret=... cache clearing with this secret'
    )
    parser.add_argument(
        '--debug',
        action='store_true',
        help='Enable debug mode'
    )

    args = parser.parse_args()
    setup_logger()

    config = RouteConfig(
        generator_options=load_config(args.config),
        cache_ttl=args.cache_ttl,
        enable_cache=not args.no_cache,
        enable_revalidation=bool(args.revalidation_secret),
        revalidation_secret=args.revalidation_secret
    )

    print(f"Serving llms.txt at http://{args.host}:{args.port}/llms.txt")
    run_app(host=args.host, port=args.port, debug=args.debug, config=config)


if __name__ == '__main__':
    main()
