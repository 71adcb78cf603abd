#!/usr/bin/env python3
"""Compose a paper from the question bank and write its export payload.

Draws questions for a class, subject and set of chapters, either from
explicit per-type counts or from a template in a catalog file, then
writes payload.json and paper.json.

Usage:
    python scripts/compose_paper.py --bank data/bank --class 9th --subject chemistry \\
        --chapters 9_chem_ch1 9_chem_ch2 --mcq 12 --short 8 --long 3 --seed 42 --out output
    python scripts/compose_paper.py --bank data/bank --class 9th --subject chemistry \\
        --all-chapters --templates data/templates.json --template 9th_chemistry_half_book --half first
"""

import argparse
import logging
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "src"))

from paperpress.composer import (
    BankError,
    BuildError,
    ComposerConfig,
    CompositionRequest,
    PaperSettings,
    QuestionBank,
    build_paper,
    settings_for_template,
)
from paperpress.composer.templates import (
    find_template,
    load_template_catalog,
    split_half_chapters,
)
from paperpress.core.models import SectionTargets
from paperpress.core.utils import dumps, load_json

logger = logging.getLogger("compose_paper")


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Compose an exam paper from the question bank")
    parser.add_argument("--bank", required=True, type=Path, help="Question bank root directory")
    parser.add_argument("--class", dest="class_id", required=True, help="Class id, e.g. 9th")
    parser.add_argument("--subject", required=True, help="Subject id, e.g. chemistry")

    chapters = parser.add_mutually_exclusive_group(required=True)
    chapters.add_argument("--chapters", nargs="+", default=[], help="Chapter ids to draw from")
    chapters.add_argument("--all-chapters", action="store_true", help="Use every chapter")
    parser.add_argument("--half", choices=["first", "second"], help="Restrict to half of the chapters")

    parser.add_argument("--mcq", type=int, default=0, help="MCQs to draw")
    parser.add_argument("--short", type=int, default=0, help="Short questions to draw")
    parser.add_argument("--long", type=int, default=0, help="Long questions to draw")
    parser.add_argument("--templates", type=Path, help="Template catalog JSON")
    parser.add_argument("--template", help="Template id from the catalog (overrides counts)")

    parser.add_argument("--difficulty", default="all", help="easy, medium, hard or all")
    parser.add_argument("--seed", type=int, help="Random seed for a reproducible paper")
    parser.add_argument("--settings", type=Path, help="Paper settings JSON")
    parser.add_argument("--edits", type=Path, help="Edited/custom questions JSON")
    parser.add_argument("--out", type=Path, help="Output directory (prints payload if omitted)")
    parser.add_argument("--no-validate", action="store_true", help="Skip JSON Schema validation")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(message)s',
    )

    config = ComposerConfig(
        bank_path=args.bank,
        seed=args.seed,
        validate_schema=not args.no_validate,
    )
    bank = QuestionBank(config.bank_path, validate=config.validate_schema)

    try:
        if args.all_chapters:
            chapter_ids = [c.id for c in bank.list_chapters(args.class_id, args.subject)]
        else:
            chapter_ids = list(args.chapters)
        if args.half:
            chapter_ids = split_half_chapters(chapter_ids, args.half)
    except BankError as e:
        logger.error(f"Error reading bank: {e}")
        return 1

    if not chapter_ids:
        logger.error(f"No chapters found for {args.class_id}/{args.subject}")
        return 1

    settings = PaperSettings.from_dict(load_json(args.settings)) if args.settings else None
    edits = load_json(args.edits) if args.edits else None

    if args.template:
        if not args.templates:
            logger.error("--template needs --templates")
            return 1
        template = find_template(load_template_catalog(args.templates), args.template)
        if template is None:
            logger.error(f"Template not found: {args.template}")
            return 1
        request = CompositionRequest.from_template(
            template, args.class_id, args.subject, chapter_ids, args.difficulty
        )
        settings = settings_for_template(template, settings)
    else:
        request = CompositionRequest(
            class_id=args.class_id,
            subject_id=args.subject,
            chapter_ids=tuple(chapter_ids),
            targets=SectionTargets(mcq=args.mcq, short=args.short, long=args.long),
            difficulty=args.difficulty,
        )

    try:
        result = build_paper(
            config,
            request,
            settings,
            edited_questions=edits,
            bank=bank,
            output_dir=args.out,
        )
    except BuildError as e:
        logger.error(f"Build failed: {e}")
        return 1

    # Shortfall and marks warnings were already logged by build_paper()
    if args.out is None:
        print(dumps(result.payload))
    else:
        logger.info(f"Wrote {result.payload_path} and {result.record_path}")
    logger.info(
        f"{result.totals.question_count} questions, {result.totals.total_marks} marks"
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
