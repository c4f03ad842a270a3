"""Documentation server using aiohttp.

Serves the not-found flow of the site: every request is resolved against
the fetch-result store and the resulting directive is rendered.
"""

from __future__ import annotations

import asyncio
import base64
import html
import logging
import signal
from urllib.parse import quote
from typing import Optional

from aiohttp import web

from ..config import ServerConfig
from ..constants import Constants
from ..errors import ModserveError
from ..resolution import ExperimentSet, ResolutionEngine
from ..store import FetchResultStore, SQLiteStore
from .decision import (
    Directive,
    ErrorPage,
    FetchPrompt,
    PassThrough,
    TemporaryRedirect,
    decide,
    decide_error,
)
from .urls import parse_request_path

logger = logging.getLogger(__name__)

_ERROR_TEMPLATES = {
    "not-found-without-fetch": (
        '<h3 class="Error-message">{status_text}</h3>'
        '<p class="Error-message">Check that you entered the URL correctly or try fetching it '
        'following the <a href="/about#adding-a-package">instructions here</a>.</p>'
    ),
    "invalid-version": (
        '<h3 class="Error-message">{version} is not a valid semantic version.</h3>'
        '<p class="Error-message">To search for packages like {path}, '
        '<a href="/search?q={query}">click here</a>.</p>'
    ),
}


def encode_flash(value: str) -> str:
    return base64.urlsafe_b64encode(value.encode()).decode()


def _page(status: int, title: str, body: str) -> web.Response:
    return web.Response(
        status=status,
        content_type="text/html",
        text=(
            "<!DOCTYPE html><html lang=\"en\"><head><meta charset=\"utf-8\">"
            f"<title>{html.escape(title)}</title></head><body>{body}</body></html>"
        ),
    )


def render(directive: Directive) -> web.Response:
    """Render a directive as an HTTP response."""
    if isinstance(directive, TemporaryRedirect):
        response = web.Response(status=302, headers={"Location": directive.target})
        response.set_cookie(directive.flash_key, encode_flash(directive.flash_value), path="/")
        return response
    if isinstance(directive, FetchPrompt):
        path = html.escape(directive.normalized_path)
        return _page(
            404,
            "Not Found",
            f'<h3 class="Error-message">{path} could not be found.</h3>'
            f'<form method="post" action="/fetch/{path}">'
            '<button type="submit" class="Error-fetchButton">Request</button></form>',
        )
    if isinstance(directive, ErrorPage):
        data = {k: html.escape(str(v)) for k, v in directive.message_data.items()}
        if directive.message_variant == "upstream":
            # Stored response text is sanitized when it is recorded.
            data["message"] = str(directive.message_data.get("message", ""))
            body = (
                f'<h3 class="Error-message">{data.get("status_text", "")}</h3>'
                f'<p class="Error-message">{data["message"]}</p>'
            )
        elif directive.message_variant == "invalid-version":
            data["query"] = html.escape(quote(str(directive.message_data.get("path", "")), safe="/"))
            body = _ERROR_TEMPLATES[directive.message_variant].format(**data)
        elif directive.message_variant in _ERROR_TEMPLATES:
            body = _ERROR_TEMPLATES[directive.message_variant].format(**data)
        else:
            body = f'<h3 class="Error-message">{data.get("status_text", "")}</h3>'
        return _page(
            int(directive.status), str(directive.message_data.get("status_text", "Error")), body
        )
    if isinstance(directive, PassThrough):
        record = directive.record
        return _page(
            200,
            record.module_path,
            f"<h1>{html.escape(record.module_path)}</h1>"
            f"<p>Version {html.escape(record.version)}</p>",
        )
    raise TypeError(f"unknown directive {directive!r}")


class DocServer:
    """HTTP front end over the resolution engine."""

    def __init__(self, config: ServerConfig, store: Optional[FetchResultStore] = None):
        """Initialize the server.

        Args:
            config: Server configuration.
            store: Store to resolve against; defaults to SQLite at config.db_path.
        """
        self._config = config
        self._store = store if store is not None else SQLiteStore(config.db_path)
        self._engine = ResolutionEngine(self._store)
        self._experiments: ExperimentSet = config.experiment_set
        self._app: Optional[web.Application] = None
        self._runner: Optional[web.AppRunner] = None

    def create_app(self) -> web.Application:
        """Create the aiohttp application."""
        app = web.Application()
        app.router.add_get(Constants.HEALTH_PATH, self._health_check)
        app.router.add_get("/{path:.+}", self._handle_request)
        app.on_cleanup.append(self._on_cleanup)
        return app

    async def _health_check(self, request: web.Request) -> web.Response:
        return web.json_response({
            "status": "ok",
            "experiments": self._config.experiments,
        })

    async def _on_cleanup(self, app: web.Application) -> None:
        await self._store.close()
        logger.info("Server stopped")

    async def _handle_request(self, request: web.Request) -> web.Response:
        """Resolve the requested path and render the outcome."""
        full_path, version = parse_request_path(request.match_info["path"])
        ctx = self._experiments.context_for(request.remote)
        try:
            resolution = await self._engine.resolve(full_path, version, ctx)
            directive = decide(resolution)
        except ModserveError as exc:
            logger.error("Resolving %s@%s failed: %s", full_path, version, exc)
            directive = decide_error(exc, full_path, version)
        logger.info("%s@%s -> %s", full_path, version, type(directive).__name__)
        return render(directive)

    async def start(self) -> None:
        """Start serving."""
        self._app = self.create_app()
        self._runner = web.AppRunner(self._app)
        await self._runner.setup()
        site = web.TCPSite(self._runner, self._config.host, self._config.port)
        await site.start()
        logger.info(
            "modserve listening on http://%s:%s", self._config.host, self._config.port
        )
        if self._config.experiments:
            logger.info("Experiments: %s", self._config.experiments)

    async def stop(self) -> None:
        """Stop serving and release the store."""
        if self._runner:
            await self._runner.cleanup()
            self._runner = None
            self._app = None


def run_server_sync(config: ServerConfig) -> None:
    """Run the server until SIGINT or SIGTERM.

    Args:
        config: Server configuration.
    """
    server = DocServer(config)
    loop = asyncio.new_event_loop()

    async def run():
        await server.start()
        stop_event = asyncio.Event()
        running_loop = asyncio.get_running_loop()
        for sig in (signal.SIGTERM, signal.SIGINT):
            running_loop.add_signal_handler(sig, stop_event.set)
        await stop_event.wait()
        logger.info("Shutdown signal received, stopping...")
        await server.stop()

    try:
        loop.run_until_complete(run())
    except KeyboardInterrupt:
        loop.run_until_complete(server.stop())
    finally:
        loop.close()
