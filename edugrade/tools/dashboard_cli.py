"""CLI for launching the grading dashboard."""

import argparse
import logging
import webbrowser
from pathlib import Path
from threading import Timer

from edugrade.gradebook import Gradebook
from edugrade.libs.config_loader import get_config, load_all_configs
from edugrade.web.app import create_app, run_server

LOG = logging.getLogger(__name__)


def open_browser(url, delay=1.5):
    """Open browser after a delay."""
    def _open():
        webbrowser.open(url)
    Timer(delay, _open).start()


def main():
    """Main CLI entry point for the grading dashboard."""
    parser = argparse.ArgumentParser(
        description='Launch the web dashboard for grading and assignment analytics',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Example:
  # Serve gradebook.yaml on http://localhost:5000
  grade-dashboard --gradebook gradebook.yaml
        """
    )

    parser.add_argument(
        '--gradebook', '-g',
        type=Path,
        default=None,
        help='Path to the gradebook YAML file (default: gradebook.path from config)'
    )
    parser.add_argument(
        '--host',
        default=None,
        help='Host to bind to (default: dashboard.host from config)'
    )
    parser.add_argument(
        '--port',
        type=int,
        default=None,
        help='Port to bind to (default: dashboard.port from config)'
    )
    parser.add_argument(
        '--no-browser',
        action='store_true',
        help='Do not automatically open browser'
    )
    parser.add_argument(
        '--debug',
        action='store_true',
        help='Run in debug mode'
    )
    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Enable verbose logging'
    )

    args = parser.parse_args()

    log_level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(
        level=log_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    try:
        config = load_all_configs()
    except (ValueError, TypeError) as e:
        parser.error(f"Failed to load configuration: {e}")

    gradebook_path = args.gradebook or Path(get_config("gradebook.path", config, default="gradebook.yaml"))
    host = args.host or get_config("dashboard.host", config, default="127.0.0.1")
    port = args.port or get_config("dashboard.port", config, default=5000)

    LOG.info("Loading gradebook...")
    gradebook = Gradebook(gradebook_path.resolve())

    create_app(gradebook, configs=config)

    url = f"http://{host}:{port}"
    if not args.no_browser:
        LOG.info(f"Opening browser at {url}")
        open_browser(url)
    else:
        LOG.info(f"Server will be available at {url}")

    LOG.info(f"Starting server on {host}:{port}")
    print("\n" + "="*70)
    print("  EDUGRADE DASHBOARD")
    print("="*70)
    print(f"  Gradebook: {gradebook_path}")
    print(f"  URL:       {url}")
    print("  Press Ctrl+C to stop")
    print("="*70 + "\n")

    run_server(host=host, port=port, debug=args.debug)


if __name__ == "__main__":
    main()
