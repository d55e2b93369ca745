"""Webhook service bootstrap.

Loads configuration, builds every collaborator once and injects it into the
workflow components, then serves the FastAPI application with uvicorn.
"""

import asyncio
import logging
import sys
from datetime import timedelta

import uvicorn
from fastapi import FastAPI

from prsentry.analysis import ServiceAnalysisGateway
from prsentry.config import Config, ConfigurationLoader
from prsentry.database import DatabaseConfig, DatabaseConnectionManager
from prsentry.github import (
    AuthProvider,
    GitHubAppAuth,
    GitHubClient,
    GitHubClientConfig,
    TokenAuth,
)
from prsentry.platform import GitHubPlatformGateway
from prsentry.server import create_app
from prsentry.workflow import (
    AutomationIdentityFilter,
    CommentInterpreter,
    ConflictAnalysisOrchestrator,
    ConflictValidationTracker,
    DeliveryLedger,
    EventDispatcher,
    PullRequestLifecycleManager,
)

logger = logging.getLogger(__name__)


def build_auth(config: Config) -> AuthProvider:
    """Create the GitHub auth provider for the configured credentials."""
    github = config.github
    if not github.uses_app_auth:
        return TokenAuth(github.token or "")

    return GitHubAppAuth(
        app_id=github.app_id or "",
        private_key=github.load_private_key(),
        installation_id=github.installation_id or 0,
        base_url=github.api_url,
        timeout=github.timeout,
    )


class WebhookService:
    """Owns the service's long-lived resources and the wired application.

    Manages:
    - Configuration loading
    - Database engine and schema
    - GitHub and analysis service clients
    - Workflow components and the HTTP application
    """

    def __init__(
        self,
        config_path: str | None = None,
        config: Config | None = None,
        database_config: DatabaseConfig | None = None,
    ):
        """Initialize webhook service.

        Args:
            config_path: Optional path to configuration file
            config: Already loaded configuration (takes precedence)
            database_config: Database settings; read from DATABASE_* if None
        """
        self.config_path = config_path
        self.config = config
        self.database_config = database_config

        self.connection_manager: DatabaseConnectionManager | None = None
        self.github_client: GitHubClient | None = None
        self.analysis_gateway: ServiceAnalysisGateway | None = None
        self.dispatcher: EventDispatcher | None = None
        self.app: FastAPI | None = None

    async def initialize(self) -> None:
        """Initialize service components and connections."""
        logger.info("Initializing webhook service...")

        try:
            self._load_configuration()
            await self._initialize_database()
            await self._initialize_github_client()
            self._initialize_components()
            logger.info("Webhook service initialized successfully")

        except Exception as e:
            logger.error(f"Failed to initialize webhook service: {e}")
            await self.cleanup()
            raise

    def _load_configuration(self) -> None:
        """Load and validate configuration."""
        if self.config is not None:
            return

        loader = ConfigurationLoader()
        if self.config_path:
            self.config = loader.load_from_file(self.config_path)
        else:
            self.config = loader.auto_load()

        logger.info(
            "Configuration loaded",
            extra={
                "environment": self.config.system.environment,
                "config_file": str(loader.config_file_path or "<environment>"),
            },
        )

    async def _initialize_database(self) -> None:
        """Initialize database connections."""
        self.connection_manager = DatabaseConnectionManager(self.database_config)

        if self.connection_manager.config.is_sqlite:
            await self.connection_manager.create_schema()

        if not await self.connection_manager.health_check():
            raise RuntimeError("Database is not reachable")

        logger.info("Database connections initialized")

    async def _initialize_github_client(self) -> None:
        """Initialize GitHub API client."""
        if self.config is None:
            raise RuntimeError("Configuration not loaded")

        github = self.config.github
        self.github_client = GitHubClient(
            auth=build_auth(self.config),
            config=GitHubClientConfig(
                base_url=github.api_url,
                timeout=github.timeout,
                max_retries=github.max_retries,
            ),
        )

        if github.uses_app_auth:
            app_info = await self.github_client.get_app()
            logger.info(f"Authenticated as GitHub App: {app_info.get('name')}")
        else:
            logger.info("GitHub client initialized with token authentication")

    def _initialize_components(self) -> None:
        """Wire workflow components and the HTTP application."""
        if (
            self.config is None
            or self.connection_manager is None
            or self.github_client is None
        ):
            raise RuntimeError("Service dependencies not initialized")

        session_scope = self.connection_manager.get_session
        automation = self.config.automation

        self.analysis_gateway = ServiceAnalysisGateway(
            self.github_client, self.config.analysis
        )
        platform = GitHubPlatformGateway(self.github_client)
        tracker = ConflictValidationTracker(session_scope)
        lifecycle = PullRequestLifecycleManager(session_scope)

        self.dispatcher = EventDispatcher(
            orchestrator=ConflictAnalysisOrchestrator(
                self.analysis_gateway, platform, tracker
            ),
            lifecycle=lifecycle,
            comments=CommentInterpreter(
                platform, tracker, conflict_label=automation.conflict_label
            ),
            analysis=self.analysis_gateway,
            identity_filter=AutomationIdentityFilter(
                markers=automation.bot_markers,
                account_types=automation.bot_account_types,
            ),
            deliveries=DeliveryLedger(
                session_scope,
                retention=timedelta(hours=self.config.server.delivery_retention_hours),
            ),
        )

        self.app = create_app(
            self.dispatcher,
            webhook_secret=self.config.github.webhook_secret,
            webhook_path=self.config.server.webhook_path,
        )

    async def serve(self) -> None:
        """Serve the application until uvicorn receives a shutdown signal."""
        if self.app is None or self.config is None:
            raise RuntimeError("Service not initialized")

        server = uvicorn.Server(
            uvicorn.Config(
                self.app,
                host=self.config.server.host,
                port=self.config.server.port,
                log_config=None,
            )
        )
        logger.info(
            f"Listening on {self.config.server.host}:{self.config.server.port}"
        )
        await server.serve()

    async def cleanup(self) -> None:
        """Clean up resources."""
        try:
            if self.analysis_gateway:
                await self.analysis_gateway.close()

            if self.github_client:
                await self.github_client.close()

            if self.connection_manager:
                await self.connection_manager.close()

            logger.info("Cleanup completed")

        except Exception as e:
            logger.error(f"Error during cleanup: {e}")


async def main() -> None:
    """Main entry point for the webhook service."""
    import argparse

    parser = argparse.ArgumentParser(description="prsentry webhook service")
    parser.add_argument("--config", help="Configuration file path")
    parser.add_argument("--log-level", default="INFO", help="Log level")

    args = parser.parse_args()

    # Configure logging
    logging.basicConfig(
        level=getattr(logging, args.log_level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    service = WebhookService(config_path=args.config)

    try:
        await service.initialize()
        await service.serve()
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
    except Exception as e:
        logger.error(f"Service failed: {e}")
        sys.exit(1)
    finally:
        await service.cleanup()


def run() -> None:
    """Console script entry point."""
    asyncio.run(main())


if __name__ == "__main__":
    run()
