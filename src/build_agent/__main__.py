"""CLI entrypoint for probing the agent's server (build-agent-server-info)."""

from __future__ import annotations

import argparse
import asyncio
import sys
from typing import List, Optional

import structlog
from pydantic import ValidationError

from build_agent.core.config import Settings
from build_agent.core.exceptions import BuildAgentError
from build_agent.location import (
    HttpLocationServer,
    create_bearer_credentials,
    create_pat_credentials,
)
from build_agent.utils.logging import bind_server_context, setup_logging
from build_agent.utils.server_util import ServerUtil

logger = structlog.get_logger()


async def _deployment_type(server_url: str, credentials, trace_http: bool) -> bool:
    server_util = ServerUtil(trace=logger if trace_http else None)
    async with HttpLocationServer() as location_server:
        return await server_util.is_deployment_type_hosted(server_url, credentials, location_server)


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(prog="build-agent-server-info", description="Build agent server utilities")
    sub = parser.add_subparsers(dest="cmd")

    cmd_type = sub.add_parser("deployment-type", help="Print whether the server is hosted or onPremises")
    cmd_type.add_argument("--url", required=True, help="Server URL (organization or collection)")
    cmd_type.add_argument("--token", help="Access token (defaults to AGENT_ACCESS_TOKEN)")
    cmd_type.add_argument("--auth", choices=("pat", "bearer"), default="pat", help="Token kind")
    cmd_type.add_argument("--trace", action="store_true", help="Log HTTP requests and responses")

    args = parser.parse_args(argv)

    if args.cmd != "deployment-type":
        parser.print_help()
        return 1

    try:
        settings = Settings()
    except ValidationError as e:
        print(f"ERROR: invalid configuration: {e}", file=sys.stderr)
        return 1

    setup_logging("DEBUG" if args.trace else settings.log_level, settings.log_format)
    bind_server_context(server_url=args.url)

    try:
        token = args.token or settings.access_token
        credentials = None
        if token:
            if args.auth == "bearer":
                credentials = create_bearer_credentials(token)
            else:
                credentials = create_pat_credentials(token)

        hosted = asyncio.run(_deployment_type(args.url, credentials, args.trace))
    except BuildAgentError as e:
        logger.error("Unable to determine deployment type", error=str(e), code=e.code)
        return 1

    print("hosted" if hosted else "onPremises")
    return 0


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
