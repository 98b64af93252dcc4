"""Serve the requirement API with uvicorn."""

import argparse

import uvicorn

from backend.compliance.main import app


def main() -> None:
    parser = argparse.ArgumentParser(description="Run the compliance requirement API")
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=8000)
    args = parser.parse_args()

    uvicorn.run(app, host=args.host, port=args.port)


if __name__ == "__main__":
    main()
