"""
Terminal adapter for the fusion relay.

Architectural role:
- Builds the text-model payload from words and/or image files.
- Delegates generation to `fusion_relay.core.engine.generate_fusion`.
- Optionally starts the HTTP adapter under uvicorn.

Commands:
- `generate FIRST [SECOND] [--image1 PATH] [--image2 PATH] [--random] [--output PATH]`
- `serve [--host HOST] [--port PORT]`

Error handling strategy:
- Input validation and relay failures print a single error line to stderr
  and exit with status 1.

Side effects:
- Writes the decoded PNG when `--output` is given.
"""

from dotenv import load_dotenv

load_dotenv()

import argparse
import asyncio
import base64
import logging
import sys

import httpx

from fusion_relay.core.engine import generate_fusion
from fusion_relay.core.errors import RelayError
from fusion_relay.image.service import PNG_DATA_URI_PREFIX
from fusion_relay.prompting.prompt_builder import (
    FusionInput,
    build_fusion_payload,
    build_random_payload,
)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="fusion-relay",
        description="Fuse two concepts into an AI-generated name and illustration.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="enable info logging")
    commands = parser.add_subparsers(dest="command", required=True)

    gen = commands.add_parser("generate", help="run one fusion")
    gen.add_argument("first", nargs="?", default="", help="first word or phrase")
    gen.add_argument("second", nargs="?", default="", help="second word or phrase")
    gen.add_argument("--image1", help="PNG file used as the first subject")
    gen.add_argument("--image2", help="PNG file used as the second subject")
    gen.add_argument(
        "--random",
        action="store_true",
        help="fuse the first subject with a randomly chosen object",
    )
    gen.add_argument("-o", "--output", help="write the generated PNG to this path")

    serve = commands.add_parser("serve", help="start the HTTP relay")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=8000)

    return parser


def _load_input(text, image_path):
    if image_path:
        return FusionInput.from_file(image_path, text=text)
    return FusionInput.from_text(text)


def build_payload(args) -> dict:
    """Translate parsed arguments into the text-model payload."""
    first = _load_input(args.first, args.image1)
    second = _load_input(args.second, args.image2)

    if args.random:
        # Random mode takes whichever side was supplied as the primary subject.
        primary = first if not first.is_empty else second
        return build_random_payload(primary)
    return build_fusion_payload(first, second)


def write_image(data_uri: str, path: str) -> None:
    encoded = data_uri[len(PNG_DATA_URI_PREFIX):]
    with open(path, "wb") as f:
        f.write(base64.b64decode(encoded))


def run_generate(args) -> int:
    try:
        payload = build_payload(args)
        result = asyncio.run(generate_fusion(payload))
    except (ValueError, OSError, RelayError, httpx.RequestError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    print(f"Name:        {result.name}")
    print(f"Translation: {result.translation}")

    if args.output:
        write_image(result.image_data_uri, args.output)
        print(f"Image saved: {args.output}")

    return 0


def run_serve(args) -> int:
    import uvicorn

    uvicorn.run("fusion_relay.api.http_api:app", host=args.host, port=args.port)
    return 0


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.INFO if args.verbose else logging.WARNING)

    if args.command == "serve":
        return run_serve(args)
    return run_generate(args)


if __name__ == "__main__":
    sys.exit(main())
