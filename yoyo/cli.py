"""Command line entry point for YOYO trait seeds and metadata."""

from __future__ import annotations

import argparse
import json
import logging
import os
import secrets
import sys
from typing import Any, Callable, Dict, Optional

from dotenv import load_dotenv


def _load_env_file(path: str | None = None) -> None:
    """Load ``YOYO_*`` settings from a ``.env`` file using python-dotenv."""

    env_path = path or os.path.join(os.path.dirname(__file__), "..", ".env")
    load_dotenv(dotenv_path=env_path)


_load_env_file()

_LOGGER = logging.getLogger("yoyo.cli")

from yoyo.agents.critic import MetadataCritic
from yoyo.agents.minter import MintingEngine
from yoyo.config import load_settings, store_path
from yoyo.core import Seed, TraitCountsConfig
from yoyo.exceptions import YoyoError
from yoyo.generator.metadata import decode_metadata, render_metadata
from yoyo.generator.names import DEFAULT_NAME_TABLE, TraitNameTable, load_name_table
from yoyo.generator.seed import available_hashes, derive_windows, generate_seed
from yoyo.store import SeedStore


def _configure_logging() -> None:
    log_level = os.getenv("YOYO_LOG_LEVEL", "INFO")
    level = getattr(logging, log_level.upper(), logging.INFO)
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


def _name_table() -> TraitNameTable:
    path = os.getenv("YOYO_NAME_TABLE")
    if path:
        return load_name_table(path)
    return DEFAULT_NAME_TABLE


def _build_engine() -> MintingEngine:
    store = SeedStore.load(store_path(), settings=load_settings())
    return MintingEngine(store, name_table=_name_table())


def _emit(payload: Any) -> None:
    print(json.dumps(payload, indent=2, ensure_ascii=False))


def _parse_seed(text: str) -> Seed:
    chunks = [chunk.strip() for chunk in text.split(",")]
    if not all(chunks):
        raise argparse.ArgumentTypeError(f"invalid seed {text!r}: empty entry")
    try:
        return Seed.from_sequence(int(chunk) for chunk in chunks)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid seed {text!r}: {exc}") from exc


def _parse_counts(text: str) -> TraitCountsConfig:
    try:
        return TraitCountsConfig.parse(text)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="YOYO trait seed and metadata CLI")
    subparsers = parser.add_subparsers(dest="command", required=True)

    seed_parser = subparsers.add_parser("seed", help="Derive the trait seed for mint inputs")
    seed_parser.add_argument("identifier", type=int, help="Item identifier")
    seed_parser.add_argument("--requester", required=True, help="20-byte requester address (0x...)")
    seed_parser.add_argument("--entropy", required=True, help="Entropy as 0x-prefixed hex")
    seed_parser.add_argument("--timestamp", type=int, required=True, help="Mint time in seconds")
    seed_parser.add_argument("--counts", type=_parse_counts, help="Comma separated trait counts")
    seed_parser.add_argument("--hash", dest="hash_name", choices=available_hashes(), help="Digest function")

    render_parser = subparsers.add_parser("render", help="Render metadata for an explicit seed")
    render_parser.add_argument("identifier", type=int, help="Item identifier")
    render_parser.add_argument("--seed", type=_parse_seed, required=True, help="Seven comma separated indices")
    render_parser.add_argument("--decoded", action="store_true", help="Print the JSON document instead of the URI")

    mint_parser = subparsers.add_parser("mint", help="Mint items into the seed store")
    mint_parser.add_argument("--requester", required=True, help="20-byte requester address (0x...)")
    mint_parser.add_argument("--count", type=int, default=1, help="Number of items to mint")
    mint_parser.add_argument("--entropy", help="Entropy as 0x-prefixed hex (random per item when omitted)")
    mint_parser.add_argument("--timestamp", type=int, help="Mint time in seconds (default: now)")

    uri_parser = subparsers.add_parser("token-uri", help="Render metadata for a minted item")
    uri_parser.add_argument("identifier", type=int, help="Item identifier")
    uri_parser.add_argument("--decoded", action="store_true", help="Print the JSON document instead of the URI")

    decode_parser = subparsers.add_parser("decode", help="Decode a metadata data URI")
    decode_parser.add_argument("uri", help="data:application/json;base64,... string")

    review_parser = subparsers.add_parser("review", help="Validate a metadata URI or minted identifier")
    review_parser.add_argument("target", help="Data URI or minted identifier")

    export_parser = subparsers.add_parser("export", help="Write <id>.json for every minted item")
    export_parser.add_argument("directory", help="Output directory")

    counts_parser = subparsers.add_parser("set-counts", help="Replace the trait counts")
    counts_parser.add_argument("counts", type=_parse_counts, help="Seven comma separated counts")

    image_parser = subparsers.add_parser("set-image-base-uri", help="Replace the image base URI")
    image_parser.add_argument("value")

    description_parser = subparsers.add_parser("set-description", help="Replace the collection description")
    description_parser.add_argument("value")

    url_parser = subparsers.add_parser("set-external-url", help="Replace the external URL")
    url_parser.add_argument("value")

    return parser


def _cmd_seed(args: argparse.Namespace) -> int:
    settings = load_settings()
    counts = args.counts or settings.trait_counts
    hash_name = args.hash_name or settings.hash_name
    seed = generate_seed(
        args.identifier,
        args.requester,
        args.entropy,
        args.timestamp,
        counts,
        hash_name=hash_name,
    )
    windows = derive_windows(args.identifier, args.requester, args.entropy, args.timestamp, hash_name=hash_name)
    _emit(
        {
            "identifier": args.identifier,
            "seed": seed.to_dict(),
            "counts": counts.to_dict(),
            "windows": windows,
            "hash": hash_name,
        }
    )
    return 0


def _cmd_render(args: argparse.Namespace) -> int:
    settings = load_settings()
    uri = render_metadata(
        args.identifier,
        args.seed,
        settings.image_base_uri,
        settings.description,
        settings.external_url,
        _name_table(),
        name_prefix=settings.name_prefix,
    )
    if args.decoded:
        _emit(decode_metadata(uri))
    else:
        print(uri)
    return 0


def _cmd_mint(args: argparse.Namespace) -> int:
    engine = _build_engine()

    def _entropy(identifier: int) -> str:
        return args.entropy or "0x" + secrets.token_hex(32)

    records = engine.mint_batch(args.count, args.requester, _entropy, timestamp=args.timestamp)
    _emit([record.to_dict() for record in records])
    return 0


def _cmd_token_uri(args: argparse.Namespace) -> int:
    engine = _build_engine()
    if args.decoded:
        _emit(engine.metadata(args.identifier))
    else:
        print(engine.token_uri(args.identifier))
    return 0


def _cmd_decode(args: argparse.Namespace) -> int:
    _emit(decode_metadata(args.uri))
    return 0


def _cmd_review(args: argparse.Namespace) -> int:
    identifier: Optional[int] = None
    target = args.target
    if target.isdigit():
        identifier = int(target)
        target = _build_engine().token_uri(identifier)

    review = MetadataCritic().review(target, identifier=identifier)
    _emit(review)
    if not review["ok"]:
        _LOGGER.error("Metadata review failed: %s", "; ".join(review["issues"]))
        return 1
    return 0


def _cmd_export(args: argparse.Namespace) -> int:
    paths = _build_engine().export_metadata(args.directory)
    _emit({"directory": args.directory, "written": len(paths)})
    return 0


def _cmd_set_counts(args: argparse.Namespace) -> int:
    engine = _build_engine()
    applied = engine.set_counts(args.counts)
    _emit({"trait_counts": applied.to_dict()})
    return 0


def _admin_setter(method: str, key: str) -> Callable[[argparse.Namespace], int]:
    def _run(args: argparse.Namespace) -> int:
        engine = _build_engine()
        getattr(engine, method)(args.value)
        _emit({key: args.value})
        return 0

    return _run


_COMMANDS: Dict[str, Callable[[argparse.Namespace], int]] = {
    "seed": _cmd_seed,
    "render": _cmd_render,
    "mint": _cmd_mint,
    "token-uri": _cmd_token_uri,
    "decode": _cmd_decode,
    "review": _cmd_review,
    "export": _cmd_export,
    "set-counts": _cmd_set_counts,
    "set-image-base-uri": _admin_setter("set_image_base_uri", "image_base_uri"),
    "set-description": _admin_setter("set_collection_description", "description"),
    "set-external-url": _admin_setter("set_external_url", "external_url"),
}


def main(argv: Optional[list[str]] = None) -> int:
    """Entry point for the YOYO CLI."""

    _configure_logging()
    parser = _build_parser()
    args = parser.parse_args(argv)

    handler = _COMMANDS.get(args.command)
    if handler is None:
        parser.error("Unknown command")
        return 2

    try:
        return handler(args)
    except YoyoError as exc:
        _LOGGER.error("%s failed: %s", args.command, exc)
        return 1
    except ValueError as exc:
        _LOGGER.error("%s rejected input: %s", args.command, exc)
        return 1
    except OSError as exc:
        _LOGGER.error("%s could not access %s: %s", args.command, exc.filename or "file", exc.strerror or exc)
        return 1


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
