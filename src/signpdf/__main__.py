"""Entry point for ``python -m signpdf``."""

from __future__ import annotations

import argparse
import base64
import dataclasses
import logging
import sys
from pathlib import Path

from signpdf.capture import FileSignatureCapture
from signpdf.client import DocumentStoreClient
from signpdf.component import ComponentConfig, SignPdfComponent
from signpdf.exceptions import ResourceLoadError
from signpdf.placement import PlacementPolicy

logger = logging.getLogger("signpdf")


class _PayloadRecorder:
    """State sink that keeps the last payload handed to the workflow."""

    def __init__(self) -> None:
        self.payload: str | None = None

    def update_state(self, payload: str) -> None:
        self.payload = payload


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="signpdf",
        description="Stamp a PNG signature onto a PDF document.",
    )
    parser.add_argument("source", type=Path, help="PDF document to sign")
    parser.add_argument("signature", type=Path, help="PNG signature image")
    parser.add_argument("output", type=Path, help="Where to write the result")
    parser.add_argument(
        "--policy",
        type=PlacementPolicy.parse,
        help="Placement policy: "
        + ", ".join(p.value for p in PlacementPolicy),
    )
    parser.add_argument("--scale", type=float, help="Signature scale factor")
    parser.add_argument(
        "--encoding",
        choices=("pdf", "base64", "data-uri"),
        default="pdf",
        help="Write raw PDF bytes (default) or serialized text",
    )
    parser.add_argument(
        "--submit",
        action="store_true",
        help="Also save the result to the configured document store",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)-8s %(name)s — %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
    )
    args = _parse_args(argv)

    try:
        config = ComponentConfig.from_env()
    except ValueError as exc:
        logger.error("Configuration error: %s", exc)
        sys.exit(1)

    overrides: dict[str, object] = {}
    if args.policy is not None:
        overrides["placement"] = args.policy
    if args.scale is not None:
        if args.scale <= 0:
            logger.error("Configuration error: --scale must be positive")
            sys.exit(1)
        overrides["scale"] = args.scale
    if args.encoding != "pdf":
        overrides["data_uri"] = args.encoding == "data-uri"
    config = dataclasses.replace(config, **overrides)

    if args.submit and not config.store_configured:
        logger.error(
            "Configuration error: --submit needs SIGNPDF_STORE_URL "
            "and SIGNPDF_STORE_TOKEN"
        )
        sys.exit(1)

    try:
        capture = FileSignatureCapture(args.signature)
        source_pdf = args.source.read_bytes()
    except ResourceLoadError as exc:
        logger.error("%s", exc)
        sys.exit(1)
    except OSError as exc:
        logger.error("Cannot read source document %s: %s", args.source, exc)
        sys.exit(1)

    store = None
    if args.submit:
        store = DocumentStoreClient(
            config.store_url, config.store_token, submit_path=config.submit_path
        )

    sink = _PayloadRecorder()
    try:
        with SignPdfComponent(config, capture, sink, store) as component:
            component.set_document(source_pdf)
            result = component.handle_save()
    finally:
        if store is not None:
            store.close()

    if not result.success:
        sys.exit(1)

    if args.encoding == "pdf":
        args.output.write_bytes(base64.b64decode(sink.payload))
    else:
        args.output.write_text(result.result_file)
    logger.info("Wrote %s", args.output)


if __name__ == "__main__":
    main()
