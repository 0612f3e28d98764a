# omr_grader/reporting.py
"""
Functions for generating final reports (CSV, JSON and visual image).
"""
import json
import logging

import cv2
import pandas as pd

from . import config

logger = logging.getLogger(__name__)

DETAIL_COLUMNS = ['question', 'studentAnswer', 'correctAnswer', 'isCorrect', 'isWarning']
SUMMARY_COLUMNS = ['studentId', 'score', 'total', 'percentage', 'warnings', 'timestamp']


def report_details_frame(report):
    """One row per graded question."""
    rows = [d.to_dict() for d in report.details]
    return pd.DataFrame(rows, columns=DETAIL_COLUMNS)


# FUNCTION 1: Saves the individual result for one student
def save_report_csv(report, output_path):
    """Saves the detailed grading results and summary rows to a CSV file."""
    df = report_details_frame(report)

    summary_rows = pd.DataFrame([
        {'question': 'Total', 'studentAnswer': 'Obtained', 'correctAnswer': report.total, 'isCorrect': report.score, 'isWarning': len(report.warnings)},
        {'question': 'Percentage', 'studentAnswer': '', 'correctAnswer': '', 'isCorrect': f"{report.percentage:.2f}%", 'isWarning': ''},
    ], columns=DETAIL_COLUMNS)
    df = pd.concat([df, summary_rows], ignore_index=True)

    df.to_csv(output_path, index=False)
    logger.info("Results for %s saved to %s", report.student_id, output_path)
    return df


def summary_frame(reports):
    """One row per student, in the order given."""
    rows = [{
        'studentId': r.student_id,
        'score': r.score,
        'total': r.total,
        'percentage': round(r.percentage, 2),
        'warnings': len(r.warnings),
        'timestamp': r.timestamp,
    } for r in reports]
    return pd.DataFrame(rows, columns=SUMMARY_COLUMNS)


def summary_statistics(summary_df):
    scores = summary_df['percentage']
    std_dev = scores.std() if len(scores) > 1 else 0.0
    return pd.DataFrame({
        'Statistic': ['Number of Students', 'Average Score', 'Average Score (%)', 'Highest Score (%)', 'Lowest Score (%)', 'Std Deviation'],
        'Value': [
            len(summary_df),
            f"{summary_df['score'].mean():.2f}",
            f"{scores.mean():.2f}",
            f"{scores.max():.2f}",
            f"{scores.min():.2f}",
            f"{std_dev:.2f}",
        ],
    })


# FUNCTION 2: Creates the summary report of all students
def create_summary_report(reports, output_path):
    """
    Compiles all reports into a summary table, appends overall statistics
    and saves both to a single CSV file. Returns the summary table, or None
    when there is nothing to summarise.
    """
    if not reports:
        logger.warning("No reports to summarise. Summary report will not be created.")
        return None

    summary_df = summary_frame(reports)
    stats_df = summary_statistics(summary_df)

    with open(output_path, 'w', newline='', encoding='utf-8') as f:
        summary_df.to_csv(f, index=False)
        f.write('\n--- Overall Statistics ---\n')
        stats_df.to_csv(f, index=False)
    logger.info("Created summary report at %s", output_path)
    return summary_df


def save_reports_json(reports, output_path):
    with open(output_path, 'w', encoding='utf-8') as f:
        json.dump([r.to_dict() for r in reports], f, ensure_ascii=False, indent=2)
    logger.info("Saved %d reports to %s", len(reports), output_path)


def _region_rect(region, img_w, img_h):
    x = int(round(region.x / 100.0 * img_w))
    y = int(round(region.y / 100.0 * img_h))
    w = int(round(region.w / 100.0 * img_w))
    h = int(round(region.h / 100.0 * img_h))
    return (x, y), (x + w, y + h)


# FUNCTION 3: Creates the graded image with score header
def create_visual_feedback(base_image, catalog, verdicts, report):
    """
    Draws feedback onto a copy of the sheet: the score at the top, every
    region outlined, the chosen answer green or red, ambiguous marks orange,
    and the key outlined where the student missed it.
    """
    vis_image = base_image.copy()
    if vis_image.ndim == 2 or vis_image.shape[2] == 1:
        vis_image = cv2.cvtColor(vis_image, cv2.COLOR_GRAY2BGR)
    elif vis_image.shape[2] == 4:
        vis_image = cv2.cvtColor(vis_image, cv2.COLOR_BGRA2BGR)
    img_h, img_w = vis_image.shape[:2]

    # Header first so the region outlines stay visible on top of it.
    x0, y0 = config.VIS_HEADER_ORIGIN
    lines = [
        f"Student: {report.student_id}",
        f"Score: {report.score} / {report.total} ({report.percentage:.1f}%)",
    ]
    if report.warnings:
        lines.append(f"Check: {', '.join(str(q) for q in report.warnings)}")
    for i, text in enumerate(lines):
        cv2.putText(vis_image, text, (x0, y0 + i * config.VIS_HEADER_LINE_HEIGHT),
                    config.VIS_INFO_FONT, config.VIS_INFO_FONT_SCALE,
                    config.VIS_TEXT_COLOR, config.VIS_INFO_FONT_THICKNESS)

    verdict_by_q = {v.question_number: v for v in verdicts}

    for region in catalog.regions:
        q_num, label = region.question_number, region.option_label
        verdict = verdict_by_q.get(q_num)
        correct_ans = catalog.correct_answers.get(q_num)

        color = config.VIS_DEFAULT_REGION_COLOR
        thickness = config.VIS_THICKNESS_REGION
        if verdict is not None and verdict.is_ambiguous and label in verdict.marked_labels:
            color = config.VIS_WARNING_COLOR
            thickness = config.VIS_THICKNESS_ANSWER
        elif verdict is not None and verdict.student_answer == label:
            color = config.VIS_CORRECT_ANSWER_COLOR if label == correct_ans else config.VIS_WRONG_ANSWER_COLOR
            thickness = config.VIS_THICKNESS_ANSWER
        elif label == correct_ans:
            color = config.VIS_KEY_COLOR
            thickness = config.VIS_THICKNESS_ANSWER

        top_left, bottom_right = _region_rect(region, img_w, img_h)
        cv2.rectangle(vis_image, top_left, bottom_right, color, thickness)

    logger.debug("Visual feedback image created for %s.", report.student_id)
    return vis_image
