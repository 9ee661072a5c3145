"""FastAPI application entrypoint."""

import argparse
import logging

parser = argparse.ArgumentParser()
parser.add_argument("--docker", action="store_true", help="Running with docker")
parser.add_argument("--host", required=True, help="Application host.")
parser.add_argument("--port", required=True, help="Application port.")
parser.add_argument(
    "--reload",
    required=False,
    help="Enable auto-reload for development purposes.",
)
args = parser.parse_args()
if not args.docker:
    from dotenv import load_dotenv

    load_dotenv("../../.env")

# settings are read on import, after the env file is loaded
from mireb.api import create_app  # noqa: E402
from mireb.configs import settings  # noqa: E402
from startup import create_seed_data  # noqa: E402

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

assert settings.ALLOWED_ORIGINS, "ALLOWED_ORIGINS shouldn't be empty, fill in the env file."

logger.info("Starting FastAPI application...")
app = create_app(init_db=True, seed=create_seed_data)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app:app", host=args.host, port=int(args.port), reload=(args.reload or False)
    )
