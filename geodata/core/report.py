"""
Report generation for repair and validation runs.

Handles JSON report creation, human-readable summaries, and saving/loading.
"""

import json
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Union

from geodata import __version__


def generate_repair_report(repair_results: Dict) -> Dict[str, Any]:
    """
    Generate a JSON report for a repair run.

    Args:
        repair_results: Results from RepairEngine.run

    Returns:
        Report with summary counts and the per-step results
    """
    steps = {step['step']: step['results'] for step in repair_results.get('processing_steps', [])}
    names = steps.get('invalid_names', {})
    missing = steps.get('missing_features', {})
    canonical = steps.get('canonical_format', {})

    warnings = [w for results in steps.values() for w in results.get('warnings', [])]
    errors = [e for results in steps.values() for e in results.get('errors', [])]

    return {
        'geodata_version': __version__,
        'timestamp': datetime.now().isoformat(),
        'command': 'repair',
        'processing_summary': {
            'success': repair_results.get('success', False),
            'entries_checked': names.get('checked', 0),
            'invalid_names': len(names.get('invalid', [])),
            'features_created': len(missing.get('created', [])),
            'files_processed': canonical.get('processed', 0),
            'files_rewritten': canonical.get('rewritten', 0),
            'files_failed': canonical.get('failed', 0),
            'issues_found': len(warnings) + len(errors)
        },
        'processing_steps': repair_results.get('processing_steps', []),
        'warnings': warnings,
        'errors': errors
    }


def generate_validation_report(validation_results: Dict) -> Dict[str, Any]:
    """
    Generate a JSON report for a validation run.

    Args:
        validation_results: Results from validate_tree

    Returns:
        Report with summary counts and the individual file reports
    """
    return {
        'geodata_version': __version__,
        'timestamp': datetime.now().isoformat(),
        'command': 'validate',
        'processing_summary': {
            'success': not validation_results.get('errors'),
            'files_processed': validation_results.get('total_files', 0),
            'files_clean': validation_results.get('clean', 0),
            'files_with_issues': validation_results.get('issues_found', 0),
            'files_failed': validation_results.get('failed', 0),
            'issues_found': (
                len(validation_results.get('warnings', []))
                + len(validation_results.get('errors', []))
            )
        },
        'individual_reports': validation_results.get('reports', []),
        'warnings': validation_results.get('warnings', []),
        'errors': validation_results.get('errors', [])
    }


def format_report_for_display(report: Dict) -> List[str]:
    """
    Summarize a report as lines of text for the console.

    Args:
        report: Report from generate_repair_report or generate_validation_report

    Returns:
        Lines of text, without trailing newlines
    """
    summary = report.get('processing_summary', {})
    status = 'OK' if summary.get('success', False) else 'Problems found'

    lines = [f"{report.get('command', 'report')}: {status}"]
    for key, value in summary.items():
        if key == 'success':
            continue
        lines.append(f"  {key.replace('_', ' ')}: {value}")

    return lines


def save_report(report: Dict, output_path: Union[str, Path]) -> None:
    """
    Save a report to a JSON file.

    Args:
        report: Report dictionary to save
        output_path: Path to save the report
    """
    output_path = Path(output_path)

    # Ensure output directory exists
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with open(output_path, 'w', encoding='utf-8') as f:
        json.dump(report, f, indent=2, ensure_ascii=False)


def load_report(report_path: Union[str, Path]) -> Dict[str, Any]:
    """
    Load a report from a JSON file.

    Args:
        report_path: Path to the report file

    Returns:
        Loaded report dictionary
    """
    report_path = Path(report_path)

    with open(report_path, 'r', encoding='utf-8') as f:
        return json.load(f)
