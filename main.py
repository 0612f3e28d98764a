# main.py
"""
Main script to run the OMR Grader in batch mode.

This script finds all images in the input directory, grades each one against
the region catalog, and saves the per-student CSVs, graded images, a JSON file
of all reports and a summary CSV in the output directories.
"""
import argparse
import glob
import logging
import os
import sys

import cv2

from omr_grader import (
    BatchResult,
    CatalogError,
    SheetFailure,
    config,
    iter_graded_sheets,
    load_catalog,
    reporting,
)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Grade photographed answer sheets against a region catalog.")
    parser.add_argument('--catalog', default=config.CATALOG_PATH, help="Region catalog JSON file.")
    parser.add_argument('--layout', action='store_true', help="The catalog file is a raw layout-service response.")
    parser.add_argument('--input', default=config.INPUT_DIR, help="Directory of sheet images.")
    parser.add_argument('--output', default=config.OUTPUT_VISUAL_DIR, help="Directory for graded images.")
    parser.add_argument('--csv-dir', default=config.CSV_DIR, help="Directory for the JSON reports and the summary CSV.")
    parser.add_argument('--results', default=None, help="Directory for per-student CSVs (default: <csv-dir>/student_results).")
    parser.add_argument('--workers', type=int, default=config.DEFAULT_WORKERS, help="Sheets graded in parallel.")
    parser.add_argument('--no-visual', action='store_true', help="Skip the graded images.")
    args = parser.parse_args(argv)
    if args.results is None:
        args.results = os.path.join(args.csv_dir, 'student_results')
    return args


def setup_directories(args):
    """Create output directories if they don't exist."""
    for directory in (args.output, args.results, args.csv_dir):
        os.makedirs(directory, exist_ok=True)
    print("Output directories verified.")


def find_images(input_dir):
    image_files = []
    for pattern in config.IMAGE_EXTENSIONS:
        image_files.extend(glob.glob(os.path.join(input_dir, pattern)))
    return sorted(image_files)


def save_visual_feedback(sheet, catalog, output_dir):
    report = sheet.report
    visual = reporting.create_visual_feedback(sheet.image, catalog, sheet.verdicts, report)
    visual_output_path = os.path.join(output_dir, f"{report.student_id}_graded.png")
    cv2.imwrite(visual_output_path, visual)
    print(f"Saved graded image to {visual_output_path}")


def main(argv=None):
    """Main function to orchestrate the batch processing."""
    args = parse_args(argv)
    logging.basicConfig(level=config.LOG_LEVEL, format=config.LOG_FORMAT)
    setup_directories(args)

    try:
        catalog = load_catalog(args.catalog, layout=args.layout)
    except (FileNotFoundError, CatalogError) as e:
        print(f"FATAL ERROR: {e}. Cannot proceed without a region catalog.", file=sys.stderr)
        return 1

    image_files = find_images(args.input)
    if not image_files:
        print(f"No images found in the input directory: {args.input}")
        return 0

    print(f"Found {len(image_files)} image(s) to process.")
    result = BatchResult()
    sheets = iter_graded_sheets(image_files, catalog, max_workers=args.workers, keep_images=not args.no_visual)
    for sheet in sheets:
        result.add(sheet)
        if isinstance(sheet, SheetFailure):
            continue
        report = sheet.report
        print(f"\n--- {report.student_id}: {report.score}/{report.total} ---")
        csv_output_path = os.path.join(args.results, f"{report.student_id}.csv")
        reporting.save_report_csv(report, csv_output_path)
        if report.warnings:
            print(f"Check questions with multiple marks: {report.warnings}")
        if not args.no_visual:
            save_visual_feedback(sheet, catalog, args.output)

    for failure in result.failures:
        print(f"Could not grade {failure.source}: {failure.error}", file=sys.stderr)

    print("\n--- Creating summary report of all students ---")
    reporting.save_reports_json(result.reports, os.path.join(args.csv_dir, config.REPORTS_JSON_NAME))
    if reporting.create_summary_report(result.reports, os.path.join(args.csv_dir, config.SUMMARY_CSV_NAME)) is not None:
        print(f"Average score: {result.average_score:.2f}")

    print("\n--- Batch processing complete. ---")
    return 0


if __name__ == '__main__':
    sys.exit(main())
