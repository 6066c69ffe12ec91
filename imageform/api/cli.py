"""
Command-line entrypoint for one-off generations.

Architectural role:
- Terminal interface over the same `SubmissionHandler` used by the HTTP API.
- Builds the inbound field set from arguments so validation is identical.

Request lifecycle:
1. Parse arguments; fill unset fields from configuration defaults.
2. Run the handler with the Cloudflare client.
3. Decode the Base64 image and write it to `--out`.

Exit codes:
- 0 on success, 1 on a failed generation, 2 on configuration errors.
"""

import argparse
import base64
import sys
from pathlib import Path

from imageform.config.settings import load_config
from imageform.core.errors import ConfigError
from imageform.core.handler import SubmissionHandler
from imageform.image.client import CloudflareImageClient
from imageform.ui.form import FormState


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="imageform-cli", description="Generate one image.")
    parser.add_argument("--prompt", "-p", default="")
    parser.add_argument("--model", "-m", help="model id from the registry")
    parser.add_argument("--size", "-s", help="WxH image size")
    parser.add_argument("--steps", "-n", type=int, help="diffusion step count")
    parser.add_argument("--enhance", action="store_true", help="prefix the prompt with the enhancement marker")
    parser.add_argument("--out", "-o", type=Path, default=Path("generated.jpg"))
    parser.add_argument("--list-models", action="store_true", help="print the model registry and exit")
    return parser


def main(argv=None, generate_image=None):
    args = build_parser().parse_args(argv)

    try:
        config = load_config()
    except ConfigError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return 2

    if args.list_models:
        for model_id, path in config.models.items():
            marker = "*" if model_id == config.default_model_id else " "
            print(f"{marker} {model_id}\t{path}")
        return 0

    defaults = FormState.defaults(config)
    state = FormState(
        prompt=args.prompt,
        enhance=args.enhance,
        model_id=args.model or defaults.model_id,
        size=args.size or defaults.size,
        num_steps=args.steps if args.steps is not None else defaults.num_steps,
    )

    if generate_image is None:
        generate_image = CloudflareImageClient(config).generate_image
    result = SubmissionHandler(config, generate_image).handle_fields(state.to_form_fields())

    if not result.ok:
        print(f"[{result.status}] {result.message}", file=sys.stderr)
        return 1

    args.out.parent.mkdir(parents=True, exist_ok=True)
    args.out.write_bytes(base64.b64decode(result.image))
    print(f"saved -> {args.out}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
