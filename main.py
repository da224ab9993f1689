# main.py

import argparse
import os
import sys
import time
from pathlib import Path

from rich.console import Console
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeElapsedColumn,
    TimeRemainingColumn,
)

from cutru_ocr.config import get_config, reset_config
from cutru_ocr.exceptions import CutruError
from cutru_ocr.logger import get_logger, log_timing, reset_logging
from cutru_ocr.models import PageResult, group_by_household, map_records_to_persons
from cutru_ocr.normalization import normalize_records
from cutru_ocr.persistence import JSONStore, load_json
from cutru_ocr.processors import AIOCRProcessor, PDFExtractor, ProcessingContext
from cutru_ocr.utils import expand_image_inputs, parse_ai_response

console = Console()


def get_progress():
    return Progress(
        SpinnerColumn(),
        TextColumn("[bold blue]{task.description}"),
        BarColumn(),
        TextColumn("{task.completed}/{task.total}"),
        TimeElapsedColumn(),
        TimeRemainingColumn(),
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cutru-ocr",
        description="Residence registration OCR: extract and normalize household records",
    )
    parser.add_argument("--output-dir", type=Path, help="Directory for JSON/CSV results")
    parser.add_argument("--csv", action="store_true", help="Also write a CSV with CT3A headers")
    parser.add_argument("--debug", action="store_true", help="Verbose logging and raw response dumps")

    sub = parser.add_subparsers(dest="command", required=True)

    image = sub.add_parser("image", help="OCR household registration images")
    image.add_argument("files", nargs="+", type=Path, help="Image files or directories of images")
    image.add_argument("--name", help="Batch name (default: first image name)")

    pdf = sub.add_parser("pdf", help="OCR every page of a CT3A table PDF")
    pdf.add_argument("file", type=Path)

    normalize = sub.add_parser("normalize", help="Normalize a saved raw OCR JSON file")
    normalize.add_argument("file", type=Path)

    return parser


def run_ocr(context: ProcessingContext, processor: AIOCRProcessor, progress: Progress) -> bool:
    task_id = progress.add_task("OCR", total=processor.queued_count)
    processor.on_page_complete = lambda _page: progress.advance(task_id)
    return processor.run()


def cmd_image(args, context: ProcessingContext, progress: Progress) -> bool:
    paths = expand_image_inputs(args.files)
    if not paths:
        raise CutruError("No images found", details={"inputs": [str(p) for p in args.files]})

    context.setup_paths(Path(args.name) if args.name else paths[0])
    context.stats.total_pages = len(paths)

    processor = AIOCRProcessor(context)
    processor.add_images(paths)
    return run_ocr(context, processor, progress)


def cmd_pdf(args, context: ProcessingContext, progress: Progress) -> bool:
    context.setup_paths(args.file)

    extractor = PDFExtractor(context)
    if not extractor.run():
        return False

    processor = AIOCRProcessor(context)
    processor.add_pdf_pages(extractor.pages, source=args.file.name)
    return run_ocr(context, processor, progress)


def cmd_normalize(args, context: ProcessingContext, progress: Progress) -> bool:
    context.setup_paths(args.file)

    if args.file.suffix.lower() == ".json":
        data = load_json(args.file)
        if isinstance(data, dict) and isinstance(data.get("records"), list):
            data = data["records"]
    else:
        data = parse_ai_response(args.file.read_text(encoding="utf-8"))

    rows = data if isinstance(data, list) else [data]
    result = normalize_records(rows)

    context.stats.total_pages = 1
    context.stats.add_page_result(PageResult(
        page_number=1,
        source=args.file.name,
        records=result.records,
        corrections=result.corrections,
        raw_record_count=len(rows),
    ))
    return True


COMMANDS = {
    "image": cmd_image,
    "pdf": cmd_pdf,
    "normalize": cmd_normalize,
}


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    if args.debug:
        os.environ["DEBUG"] = "1"
    reset_config()
    reset_logging()

    config = get_config()
    if args.output_dir:
        config.output_dir = args.output_dir.resolve()
    logger = get_logger("main")

    context = ProcessingContext(config=config)
    start_time = time.perf_counter()
    context.stats.start()

    try:
        with get_progress() as progress:
            ok = COMMANDS[args.command](args, context, progress)
    except CutruError as e:
        logger.error(f"❌ {e}")
        context.stats.fail(str(e))
        ok = False
    else:
        if ok:
            context.stats.complete()
        else:
            context.stats.fail("All pages failed" if context.stats.page_results else "Processing failed")

    context.stats.total_time_sec = time.perf_counter() - start_time
    log_timing(logger, f"🎉 {args.command} finished", context.stats.total_time_sec)

    if context.stats.source_name:
        store = JSONStore(config.output_dir)
        for page in context.stats.page_results:
            store.save_page(context.stats.source_name, page)
        output_path = store.save_batch(context.stats)
        store.save_stats(context.stats)
        logger.info(f"✅ Results written to {output_path}")
        if args.csv:
            csv_path = store.save_csv(context.stats)
            logger.info(f"✅ CSV written to {csv_path}")

    persons = map_records_to_persons(context.stats.all_records)
    if persons:
        grouping = group_by_household(persons)
        logger.info(
            f"🏠 {len(grouping.households)} household(s), "
            f"{grouping.total_persons} person(s), {len(grouping.orphan_persons)} without a head"
        )

    console.print(context.stats.summary_str())
    return 0 if ok else 1


if __name__ == "__main__":
    sys.exit(main())
