#!/usr/bin/env python3
"""
Membership Gate - shared-password login for the article analysis service.
"""

import argparse
import logging
import sys

# Configure logging
logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s", stream=sys.stderr
)

logger = logging.getLogger("membergate")

#
# NOTE: Keep server imports lazy (inside functions) so `--generate-secret` works
# without the web stack configured.
#


def check_config() -> int:
    """Validate JWT_SECRET / MEMBERSHIP_PASSWORD from the environment. Returns a process exit code."""
    from membergate.auth.config import AuthConfigError, load_auth_config

    try:
        cfg = load_auth_config()
    except AuthConfigError as e:
        print(f"❌ {e}", file=sys.stderr)
        return 1

    print(f"✅ Auth configuration OK (environment={cfg.environment}, cookie_secure={cfg.cookie_secure})")
    return 0


def generate_secret(nbytes: int = 32) -> str:
    """Generate a random signing key suitable for JWT_SECRET."""
    from membergate.auth.util import random_token

    return random_token(nbytes)


def main():
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Membership gate: password login and signed session cookies",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Generate a signing key for JWT_SECRET
  python main.py --generate-secret

  # Validate the environment before deploying
  python main.py --check-config

  # Run the HTTP server
  python main.py --serve --port 8080
        """,
    )
    parser.add_argument("--serve", action="store_true", help="Run the HTTP server")
    parser.add_argument("--host", default="0.0.0.0", help="Server bind host (default: 0.0.0.0)")
    parser.add_argument("--port", type=int, default=8080, help="Server listen port (default: 8080)")
    parser.add_argument(
        "--check-config", action="store_true", help="Validate JWT_SECRET and MEMBERSHIP_PASSWORD, then exit"
    )
    parser.add_argument("--generate-secret", action="store_true", help="Print a new random JWT_SECRET and exit")

    args = parser.parse_args()

    try:
        if args.generate_secret:
            print(generate_secret())
            return

        if args.check_config:
            sys.exit(check_config())

        if args.serve:
            from membergate.api.server import run

            run(host=args.host, port=args.port)
            return

        # No arguments provided
        parser.print_help()

    except Exception as e:
        logger.error("Error: %s", e)
        raise


if __name__ == "__main__":
    main()
