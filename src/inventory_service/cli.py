#!/usr/bin/env python3
"""
Command-line interface for Inventory Service
"""
import os
import sys
import argparse
from pathlib import Path
from typing import Optional


def serve_command(host: str, port: int, cache: Path) -> int:
    """Prepare the cache directory and run the inventory API server."""
    cache = Path(cache).resolve()

    if cache.exists() and not cache.is_dir():
        print(f"❌ Cache path {cache} exists and is not a directory")
        return 1

    if not cache.exists():
        cache.mkdir(parents=True)
        print(f"✅ Created cache directory: {cache}")

    print(f"🚀 Starting Inventory API Server...")
    print(f"🌐 Server running at: http://{host}:{port}")
    print(f"📂 Cache directory: {cache}")
    print(f"📖 API docs: http://{host}:{port}/docs")
    print(f"📝 Register form: http://{host}:{port}/RegisterForm.html")
    print(f"🔍 Search form: http://{host}:{port}/SearchForm.html")
    print(f"Press Ctrl+C to stop\n")

    import uvicorn
    from .api_server import create_app

    try:
        uvicorn.run(create_app(cache), host=host, port=port, log_level="info")
    except KeyboardInterrupt:
        print("\n\n👋 Server stopped")
    return 0


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser. Options fall back to INVENTORY_* env variables."""
    env_host = os.environ.get('INVENTORY_HOST')
    env_port = os.environ.get('INVENTORY_PORT')
    env_cache = os.environ.get('INVENTORY_CACHE')

    parser_cli = argparse.ArgumentParser(
        prog='inventory-service',
        description="Inventory Service - Register and manage inventory items with photos",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Serve on localhost:3000, storing photos in ./cache
  inventory-service --host 127.0.0.1 --port 3000 --cache ./cache

  # Same, configured from the environment
  INVENTORY_HOST=0.0.0.0 INVENTORY_PORT=3000 INVENTORY_CACHE=/var/cache/inventory inventory-service
        """
    )

    parser_cli.add_argument('--host', '-H', type=str, default=env_host, required=env_host is None,
                            help='Server address (env: INVENTORY_HOST)')
    parser_cli.add_argument('--port', '-p', type=int, default=env_port, required=env_port is None,
                            help='Server port (env: INVENTORY_PORT)')
    parser_cli.add_argument('--cache', '-c', type=Path, default=env_cache, required=env_cache is None,
                            help='Directory for cached photo files (env: INVENTORY_CACHE)')
    return parser_cli


def main(argv: Optional[list] = None) -> int:
    """Main entry point for the CLI."""
    args = build_parser().parse_args(argv)
    return serve_command(args.host, args.port, args.cache)


if __name__ == '__main__':
    sys.exit(main())
