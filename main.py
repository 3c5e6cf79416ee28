"""PDF workbench command line.

Commands:
- `merge FILE... [--output-name NAME | --name-from N] [--exclude DOC:PAGE] [--rotate DOC:PAGE] [--no-compress]`
- `sign PDF... --signature IMG [--corner TL|TR|BL|BR | --at FX,FY] [--pages all|first|last] [--scale S] [--margin M]`
- `compress PDF`

DOC, PAGE and N are 1-based. Every command writes into --out-dir (default:
the configured download folder) without overwriting existing files.
Exit code 0 on success, 2 on a reported failure.
"""
from __future__ import annotations

import argparse
import asyncio
import mimetypes
import sys
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from assembly.models.source_file import SourceFile
from core.config.config_service import get_config
from core.exceptions.errors import describe_failure
from core.output.sinks import DownloadSink
from orchestration.logic.batch_orchestrator import BatchOrchestrator
from signature.models.signature_asset import SignatureAsset
from signature.models.signature_enums import Corner, PageSelection
from signature.models.signature_placement import PlacementSpec


def _doc_page(text: str) -> Tuple[int, int]:
    try:
        doc, page = (int(part) for part in text.split(":", 1))
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected DOC:PAGE, got {text!r}")
    if doc < 1 or page < 1:
        raise argparse.ArgumentTypeError("DOC and PAGE are 1-based")
    return doc, page


def _fractions(text: str) -> Tuple[float, float]:
    try:
        fx, fy = (float(part) for part in text.split(",", 1))
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected FX,FY, got {text!r}")
    return fx, fy


def build_parser() -> argparse.ArgumentParser:
    cfg = get_config()
    p = argparse.ArgumentParser(prog="pdf-workbench")
    sub = p.add_subparsers(dest="cmd", required=True)

    pm = sub.add_parser("merge", help="Merge PDFs, images and office documents into one PDF")
    pm.add_argument("files", nargs="+", type=Path)
    pm.add_argument("--output-name", default="", help="Output file name (.pdf is added if missing)")
    pm.add_argument("--name-from", type=int, metavar="N", help="Name the output after input file N")
    pm.add_argument("--exclude", type=_doc_page, action="append", default=[], metavar="DOC:PAGE")
    pm.add_argument("--rotate", type=_doc_page, action="append", default=[], metavar="DOC:PAGE",
                    help="Rotate a page by 90 degrees clockwise; repeat to rotate further")
    pm.add_argument("--no-compress", action="store_true")
    pm.add_argument("--no-image-compression", action="store_true")
    pm.add_argument("--out-dir", type=Path)

    ps = sub.add_parser("sign", help="Stamp a signature image onto PDFs")
    ps.add_argument("pdfs", nargs="+", type=Path)
    ps.add_argument("--signature", required=True, type=Path)
    where = ps.add_mutually_exclusive_group()
    where.add_argument("--corner", choices=[c.value for c in Corner], default=Corner.BOTTOM_RIGHT.value)
    where.add_argument("--at", type=_fractions, metavar="FX,FY",
                       help="Top-left corner as fractions of page width/height, from the top")
    ps.add_argument("--pages", choices=[s.value for s in PageSelection], default=PageSelection.ALL.value)
    ps.add_argument("--scale", type=float, default=cfg.stamp.default_scale)
    ps.add_argument("--margin", type=float, default=cfg.stamp.corner_margin)
    ps.add_argument("--out-dir", type=Path)

    pc = sub.add_parser("compress", help="Re-encode one PDF more compactly")
    pc.add_argument("pdf", type=Path)
    pc.add_argument("--out-dir", type=Path)
    return p


class BadReference(ValueError):
    """A DOC, PAGE or N argument pointing past the given inputs."""


def _sources(paths: Sequence[Path]) -> List[SourceFile]:
    return [SourceFile.from_path(p) for p in paths]


def _check_document(number: int, count: int, option: str) -> None:
    if not 1 <= number <= count:
        raise BadReference(f"{option}: document {number} outside 1..{count}")


def _page_store(ws, docs: Sequence, ref: Tuple[int, int], option: str):
    doc_number, page_number = ref
    store = ws.config_for(docs[doc_number - 1].id)
    if page_number > store.page_count:
        raise BadReference(f"{option}: page {page_number} outside 1..{store.page_count} of document {doc_number}")
    return store


def _run_merge(orch: BatchOrchestrator, args: argparse.Namespace, sink: DownloadSink):
    count = len(args.files)
    for option, refs in (("--exclude", args.exclude), ("--rotate", args.rotate)):
        for doc_number, _ in refs:
            _check_document(doc_number, count, option)
    if args.name_from is not None:
        _check_document(args.name_from, count, "--name-from")

    docs = asyncio.run(orch.add_sources(
        _sources(args.files),
        compress_images=False if args.no_image_compression else None,
    ))
    ws = orch.working_set
    for ref in args.exclude:
        _page_store(ws, docs, ref, "--exclude").set(ref[1] - 1, selected=False)
    for ref in args.rotate:
        _page_store(ws, docs, ref, "--rotate").rotate(ref[1] - 1)
    if args.name_from is not None:
        ws.set_name_source(docs[args.name_from - 1].id)
    if args.output_name:
        ws.set_custom_name(args.output_name)
    return orch.merge(sink, compress=False if args.no_compress else None)


def _run_sign(orch: BatchOrchestrator, args: argparse.Namespace, sink: DownloadSink):
    declared, _ = mimetypes.guess_type(args.signature.name)
    asset = SignatureAsset.from_bytes(args.signature.read_bytes(), declared or args.signature.suffix.lstrip("."))
    pages = PageSelection(args.pages)
    if args.at is not None:
        spec = PlacementSpec.interactive(*args.at, scale=args.scale, pages=pages)
    else:
        spec = PlacementSpec.fixed_corner(Corner(args.corner), margin=args.margin, scale=args.scale, pages=pages)
    docs = asyncio.run(orch.normalize_batch(_sources(args.pdfs), compress_images=False))
    return orch.stamp(docs, asset, sink, spec)


def _run_compress(orch: BatchOrchestrator, args: argparse.Namespace, sink: DownloadSink):
    (doc,) = asyncio.run(orch.normalize_batch(_sources([args.pdf])))
    return orch.compress(doc, sink)


_COMMANDS = {"merge": _run_merge, "sign": _run_sign, "compress": _run_compress}


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    orch = BatchOrchestrator()
    sink = DownloadSink(args.out_dir or orch.config.output.download_dir)
    try:
        record = _COMMANDS[args.cmd](orch, args, sink)
    except BadReference as exc:
        print(f"Invalid page or document reference: {exc}", file=sys.stderr)
        return 2
    except Exception as exc:
        message = describe_failure(exc)
        if message:
            print(message, file=sys.stderr)
            return 2
        return 0
    if record is not None:
        print(record.path)
    return 0


if __name__ == "__main__":
    sys.exit(main())
