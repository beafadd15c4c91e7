"""CLI entry point for launching the FastAPI app with uvicorn."""

import uvicorn

from src.task_manager import Config


def main() -> None:
    """Run the API server."""
    config = Config.from_yaml()
    uvicorn.run(
        "src.server.app:build_default_app",
        host=config.server.host,
        port=config.server.port,
        reload=config.server.reload,
        reload_dirs=["src"] if config.server.reload else None,
        factory=True,
    )


if __name__ == "__main__":
    main()
