import argparse
import logging

import uvicorn
from dotenv import load_dotenv

from .app import create_app
from .config import Settings

logger = logging.getLogger(__name__)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(prog="monopoly-service", description="Serve the Monopoly players and games API.")
    parser.add_argument("--host", help="interface to bind (default: $HOST or 0.0.0.0)")
    parser.add_argument("--port", type=int, help="port to listen on (default: $PORT or 3000)")
    parser.add_argument("--log-level", help="logging level (default: $LOG_LEVEL or INFO)")
    parser.add_argument("--env-file", default=".env", help="file of KEY=value pairs loaded before reading the environment (default: .env)")
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    # Real environment variables win over the file
    load_dotenv(args.env_file)
    settings = Settings.from_env()
    overrides = {
        "host": args.host,
        "port": args.port,
        "log_level": args.log_level.upper() if args.log_level else None,
    }
    settings = settings.model_copy(update={k: v for k, v in overrides.items() if v is not None})

    logging.basicConfig(level=settings.log_level)
    app = create_app(settings)

    # lifespan="on" makes a failed startup exit non-zero instead of serving
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower(), lifespan="on")


if __name__ == "__main__":
    main()
