import asyncio
import logging
import sys
import webbrowser
from typing import Callable, Optional

import uvicorn
from fastapi import BackgroundTasks, FastAPI
from fastapi.responses import PlainTextResponse

from watchlater.auth import build_authorization_url, create_flow, exchange_code
from watchlater.config import ConfigError, configure_logging, load_credentials, settings

logger = logging.getLogger(__name__)


async def finish_after(delay: float, on_finished: Callable[[], None]):
    await asyncio.sleep(delay)
    on_finished()


def create_app(flow, on_finished: Callable[[], None], exit_delay: float = settings.EXIT_DELAY) -> FastAPI:
    """Builds the one-route app that receives Google's OAuth redirect.

    ``flow`` must be the same Flow that produced the authorization URL, since it
    carries the PKCE code verifier. ``on_finished`` is called ``exit_delay``
    seconds after a token exchange was attempted, whatever its outcome.
    """
    app = FastAPI()

    @app.get("/oauth2callback")
    def oauth2callback(background_tasks: BackgroundTasks, code: Optional[str] = None):
        if not code:
            # Keep listening: the operator may retry the consent screen
            return PlainTextResponse("No code provided", status_code=400)

        background_tasks.add_task(finish_after, exit_delay, on_finished)
        try:
            refresh_token = exchange_code(flow, code)
        except Exception as e:
            logger.error(f"Error getting tokens: {e}")
            return PlainTextResponse("Error getting tokens", status_code=500)

        print("\nRefresh Token:", refresh_token)
        print("\nAdd this refresh token to your MCP settings configuration.")
        return PlainTextResponse("Authorization successful! You can close this window.")

    return app


class CallbackServer(uvicorn.Server):
    """uvicorn server that calls ``on_started`` once the port is bound."""

    def __init__(self, config: uvicorn.Config, on_started: Optional[Callable[[], None]] = None):
        super().__init__(config)
        self.on_started = on_started

    async def startup(self, sockets=None):
        await super().startup(sockets=sockets)
        # uvicorn exits during startup when the port is taken, so this only runs once listening
        if self.started and self.on_started:
            self.on_started()


def run():
    """Credential Acquirer entry point: browser consent, print refresh token, exit."""
    configure_logging()
    try:
        credentials = load_credentials(require_refresh_token=False)
    except ConfigError as e:
        print(e, file=sys.stderr)
        sys.exit(1)

    flow = create_flow(credentials)
    authorize_url = build_authorization_url(flow)
    server = None

    def open_browser():
        print(f"Server running at http://localhost:{settings.PORT}")
        print("\nOpening authorization page...")
        if not webbrowser.open(authorize_url):
            print(f"\nCould not open a browser, visit this URL instead:\n{authorize_url}")

    def stop_server():
        server.should_exit = True

    app = create_app(flow, on_finished=stop_server)
    config = uvicorn.Config(app, host="localhost", port=settings.PORT, log_level="warning")
    server = CallbackServer(config, on_started=open_browser)
    server.run()
    sys.exit(0)


if __name__ == "__main__":
    run()
