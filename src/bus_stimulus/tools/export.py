#
# Bus Stimulus Engine - Trace Export
#
# Copyright (c) 2026 Shareef Jalloq
# SPDX-License-Identifier: BSD-2-Clause
#
# Export command trace records to various formats.
#

import csv
import json
from pathlib import Path
from typing import Iterable

from bus_stimulus.engine.dispatch import TraceRecord


CSV_FIELDS = ['line', 'protocol', 'operation', 'address', 'burst', 'size', 'length', 'data',
              'expected', 'status', 'detail']


def export_jsonl(records: Iterable[TraceRecord], output: Path) -> int:
    """
    Export trace records to JSON Lines format.

    Returns:
        Number of records exported
    """
    count = 0
    with open(output, 'w') as f:
        for rec in records:
            f.write(json.dumps(rec.to_dict()) + '\n')
            count += 1
    return count


def export_csv(records: Iterable[TraceRecord], output: Path) -> int:
    """
    Export trace records to CSV format.

    Multi-beat data and expected values are joined with spaces.

    Returns:
        Number of records exported
    """
    count = 0
    with open(output, 'w', newline='') as f:
        writer = csv.DictWriter(f, fieldnames=CSV_FIELDS)
        writer.writeheader()
        for rec in records:
            row = rec.to_dict()
            row['data'] = ' '.join(row['data'])
            row['expected'] = '' if row['expected'] is None else ' '.join(row['expected'])
            writer.writerow(row)
            count += 1
    return count


def export_trace(records: Iterable[TraceRecord], output: Path, format: str = 'auto') -> int:
    """
    Write trace records, picking the format from the suffix when 'auto'.

    Returns:
        Number of records exported
    """
    output = Path(output)
    if format == 'auto':
        format = 'csv' if output.suffix.lower() == '.csv' else 'jsonl'

    if format == 'csv':
        return export_csv(records, output)
    if format == 'jsonl':
        return export_jsonl(records, output)
    raise ValueError(f"Unknown format: {format}")
