"""
FastAPI server for the Wyckoff chart pages.

Usage:
    python wyckoff_cli.py serve --port 8765
"""

import webbrowser
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse

from ..config import get_config
from ..utils.logger import get_logger


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    # Logger settings come from LOG_DIR / LOG_LEVEL
    get_logger()

    app = FastAPI(
        title="Wyckoff Trading Assistant",
        description="Synthetic Wyckoff charts and sample pattern analysis",
        version="0.1.0",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=get_config().viz.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    from .api.charts import router as charts_router
    from .api.samples import router as samples_router

    app.include_router(charts_router, prefix="/api")
    app.include_router(samples_router, prefix="/api")

    @app.get("/api/health")
    async def health_check() -> dict:
        """Health check endpoint."""
        return {"status": "ok", "service": "wyckoff-viz"}

    @app.get("/")
    async def index() -> HTMLResponse:
        """Landing page listing the API endpoints."""
        html = """
        <!DOCTYPE html>
        <html>
        <head>
            <title>Wyckoff Trading Assistant</title>
            <style>
                body {
                    font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif;
                    background: #131722;
                    color: #d1d4dc;
                    display: flex;
                    justify-content: center;
                    margin: 0;
                }
                .container { max-width: 600px; padding: 40px; }
                h1 { color: #26a69a; }
                .endpoint {
                    background: #1e222d;
                    padding: 15px;
                    border-radius: 8px;
                    margin: 10px 0;
                }
                .endpoint a { color: #26a69a; text-decoration: none; }
            </style>
        </head>
        <body>
            <div class="container">
                <h1>Wyckoff Trading Assistant</h1>
                <div class="endpoint"><a href="/api/health">/api/health</a> - Health check</div>
                <div class="endpoint"><a href="/api/charts/archetypes">/api/charts/archetypes</a> - Chart types</div>
                <div class="endpoint"><a href="/api/charts/accumulation?seed=42">/api/charts/accumulation</a> - Accumulation chart</div>
                <div class="endpoint"><a href="/api/samples/AAPL?seed=7">/api/samples/AAPL</a> - Sample analysis</div>
                <div class="endpoint"><a href="/docs">/docs</a> - OpenAPI documentation</div>
            </div>
        </body>
        </html>
        """
        return HTMLResponse(content=html)

    return app


def run_server(
    host: Optional[str] = None,
    port: Optional[int] = None,
    open_browser: Optional[bool] = None,
    reload: bool = False,
) -> None:
    """
    Run the visualization server.

    Args:
        host: Host to bind to (default: VIZ_HOST)
        port: Port to listen on (default: VIZ_PORT)
        open_browser: Open browser after starting (default: VIZ_OPEN_BROWSER)
        reload: Enable auto-reload for development
    """
    import uvicorn

    viz = get_config().viz
    host = host or viz.host
    port = port or viz.port
    if open_browser is None:
        open_browser = viz.open_browser

    if open_browser:
        import threading
        import time

        def open_after_delay():
            time.sleep(1.0)
            webbrowser.open(f"http://{host}:{port}")

        threading.Thread(target=open_after_delay, daemon=True).start()

    get_logger().info(f"Wyckoff viz server on http://{host}:{port} (docs: /docs)")

    uvicorn.run(
        "wyckoff_assistant.viz.server:create_app",
        host=host,
        port=port,
        reload=reload,
        factory=True,
        log_level="info",
    )


if __name__ == "__main__":
    run_server()
