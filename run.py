#!/usr/bin/env python3
"""Entry point script for the Database Log MCP Server."""

import sys
import subprocess
import argparse


def main():
    """Main entry point with transport selection."""
    parser = argparse.ArgumentParser(
        description="Database Log MCP Server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Run with stdio transport (for desktop MCP clients)
  python run.py stdio

  # Run with SSE transport on a custom port with health API
  python run.py sse --port 3000 --health-port 8080

  # Read logs from a differently named table
  LOG_TABLE=app.event_log python run.py stdio
        """
    )

    parser.add_argument(
        "transport",
        choices=["stdio", "sse"],
        help="Transport mode: stdio for CLI, sse for HTTP streaming"
    )
    parser.add_argument(
        "--port",
        type=int,
        default=3000,
        help="Port for SSE server (default: 3000)"
    )
    parser.add_argument(
        "--host",
        default="0.0.0.0",
        help="Host for SSE server (default: 0.0.0.0)"
    )
    parser.add_argument(
        "--health-port",
        type=int,
        help="Port for health API (optional, enables health monitoring)"
    )

    args = parser.parse_args()

    cmd = [sys.executable, "-m", "dblog_mcp.cli.mcp_server", "--transport", args.transport]

    if args.transport == "sse":
        cmd.extend(["--host", args.host, "--port", str(args.port)])

    if args.health_port:
        cmd.extend(["--health-port", str(args.health_port)])
    else:
        cmd.append("--no-health-api")

    # stdout belongs to the stdio protocol
    print(f"Starting Database Log MCP Server ({args.transport})", file=sys.stderr)
    if args.transport == "sse":
        print(f"   Server: http://{args.host}:{args.port}/sse", file=sys.stderr)
    if args.health_port:
        print(f"   Health API: http://{args.host}:{args.health_port}/health", file=sys.stderr)

    try:
        sys.exit(subprocess.run(cmd).returncode)
    except KeyboardInterrupt:
        print("Server stopped", file=sys.stderr)
        sys.exit(0)


if __name__ == "__main__":
    main()
