"""Health monitoring API service."""

import logging
from typing import Dict, Any
from datetime import datetime
from fastapi import FastAPI, HTTPException
import uvicorn

from dblog_mcp import __version__
from dblog_mcp.services.connection_provider import fetch_one

PROBE_QUERY = "SELECT 1 AS health, current_setting('TimeZone') AS timezone"

logger = logging.getLogger(__name__)


class HealthAPI:
    """Health monitoring API service running beside the MCP server."""

    def __init__(self, provider=None, host: str = "0.0.0.0", port: int = 8080):
        """Initialize health API service.

        Args:
            provider: ConnectionProvider used for the database probe
            host: Host to bind the health API to
            port: Port to bind the health API to
        """
        self.provider = provider
        self.host = host
        self.port = port
        self.app = FastAPI(title="MCP Health API", version=__version__)
        self.start_time = datetime.now()
        self._setup_routes()

    def _setup_routes(self):
        """Set up FastAPI routes for health monitoring."""

        @self.app.get("/health")
        async def health_check() -> Dict[str, Any]:
            """Overall system health status."""
            try:
                uptime = (datetime.now() - self.start_time).total_seconds()
                db_healthy = self._check_database_health()

                return {
                    "status": "healthy" if db_healthy else "degraded",
                    "timestamp": datetime.now().isoformat(),
                    "uptime_seconds": uptime,
                    "version": __version__
                }
            except Exception as e:
                logger.error(f"Health check error: {e}")
                raise HTTPException(status_code=503, detail=str(e))

        @self.app.get("/health/database")
        async def database_health() -> Dict[str, Any]:
            """Probe a fresh connection and report its session time zone."""
            if not self.provider:
                return {
                    "status": "unavailable",
                    "message": "Database provider not configured"
                }

            try:
                with self.provider.acquire() as conn:
                    row = fetch_one(conn, PROBE_QUERY)
                is_healthy = row is not None and row.get('health') == 1

                return {
                    "status": "healthy" if is_healthy else "unhealthy",
                    "database": self.provider.config.get('database', 'unknown'),
                    "session_timezone": row.get('timezone') if row else None,
                    "timestamp": datetime.now().isoformat()
                }
            except Exception as e:
                logger.error(f"Database health check error: {e}")
                return {
                    "status": "unhealthy",
                    "error": str(e),
                    "timestamp": datetime.now().isoformat()
                }

    def _check_database_health(self) -> bool:
        """Check if a database connection can be opened and used."""
        if not self.provider:
            return False

        try:
            with self.provider.acquire() as conn:
                row = fetch_one(conn, PROBE_QUERY)
            return row is not None and row.get('health') == 1
        except Exception as e:
            logger.warning(f"Database health probe failed: {e}")
            return False

    def run(self):
        """Run the health API server."""
        logger.info(f"Starting Health API on {self.host}:{self.port}")
        uvicorn.run(
            self.app,
            host=self.host,
            port=self.port,
            log_level="warning"
        )
