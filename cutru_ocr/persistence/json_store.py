"""
JSON file-based storage implementation.

Stores batch results as JSON files, one folder per source document, and
exports normalized records to CSV with the CT3A Vietnamese headers.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, List, Optional, Sequence

import pandas as pd

from ..exceptions import DataPersistenceError
from ..models import CT3A_COLUMNS, NormalizedRecord, PageResult, ProcessingStats


def write_records_csv(records: Sequence[NormalizedRecord], csv_path: Path) -> Path:
    """
    Write records to CSV in CT3A column order.

    Absent values are written as empty cells. The file is UTF-8 with BOM so
    spreadsheet tools display Vietnamese diacritics correctly.
    """
    csv_path = Path(csv_path)
    csv_path.parent.mkdir(parents=True, exist_ok=True)

    df = pd.DataFrame(
        [r.to_dict() for r in records],
        columns=list(CT3A_COLUMNS.keys()),
    )
    # row_index_hint may be missing; keep it integer-valued instead of float
    df["row_index_hint"] = df["row_index_hint"].astype("Int64")
    df = df.rename(columns=CT3A_COLUMNS)

    try:
        df.to_csv(csv_path, index=False, encoding="utf-8-sig")
    except OSError as e:
        raise DataPersistenceError(f"Failed to write CSV: {e}", str(csv_path), "save") from e
    return csv_path


class JSONStore:
    """
    JSON file-based result storage.

    Layout:
    - <base_dir>/<source_name>/<source_name>.json (combined output)
    - <base_dir>/<source_name>/<source_name>-stats.json (processing stats)
    - <base_dir>/<source_name>/page_wise/page-NNN.json (per-page data)
    - <base_dir>/<source_name>/csv/<source_name>.csv (optional export)
    """

    def __init__(self, base_dir: Path):
        self.base_dir = Path(base_dir)

    def _get_output_dir(self, source_name: str) -> Path:
        output_dir = self.base_dir / source_name
        output_dir.mkdir(parents=True, exist_ok=True)
        return output_dir

    def _get_page_wise_dir(self, source_name: str) -> Path:
        page_dir = self._get_output_dir(source_name) / "page_wise"
        page_dir.mkdir(parents=True, exist_ok=True)
        return page_dir

    def _write_json(self, path: Path, data: Any) -> Path:
        try:
            path.write_text(
                json.dumps(data, ensure_ascii=False, indent=2),
                encoding="utf-8"
            )
        except OSError as e:
            raise DataPersistenceError(f"Failed to write JSON: {e}", str(path), "save") from e
        return path

    def save_batch(self, stats: ProcessingStats) -> Path:
        """
        Save the combined result of one batch.

        Returns:
            Path to saved file
        """
        source_name = stats.source_name or "batch"
        output_path = self._get_output_dir(source_name) / f"{source_name}.json"

        data = {
            "source": source_name,
            "generated_at": datetime.now(timezone.utc).isoformat(),
            "records": [r.to_dict() for r in stats.all_records],
            "corrections": stats.corrections.to_dict(),
            "pages": [
                {k: v for k, v in p.to_dict().items() if k != "records"}
                for p in stats.page_results
            ],
            "stats": stats.to_dict(),
        }
        return self._write_json(output_path, data)

    def save_page(self, source_name: str, page: PageResult) -> Path:
        """Save one page's records and corrections."""
        output_path = self._get_page_wise_dir(source_name) / f"page-{page.page_number:03d}.json"
        return self._write_json(output_path, page.to_dict())

    def save_stats(self, stats: ProcessingStats) -> Path:
        source_name = stats.source_name or "batch"
        output_path = self._get_output_dir(source_name) / f"{source_name}-stats.json"
        return self._write_json(output_path, stats.to_dict())

    def save_csv(self, stats: ProcessingStats) -> Path:
        source_name = stats.source_name or "batch"
        csv_path = self._get_output_dir(source_name) / "csv" / f"{source_name}.csv"
        return write_records_csv(stats.all_records, csv_path)

    def load_batch(self, source_name: str) -> Optional[dict[str, Any]]:
        """
        Load a saved batch.

        Returns:
            Batch data as dictionary, or None if not found
        """
        path = self.base_dir / source_name / f"{source_name}.json"
        if not path.exists():
            return None
        return load_json(path)

    def load_records(self, source_name: str) -> List[NormalizedRecord]:
        """Records of a saved batch, or [] when nothing was saved."""
        data = self.load_batch(source_name)
        if not data:
            return []
        return [NormalizedRecord.from_dict(r) for r in data.get("records", [])]

    def list_processed(self) -> List[str]:
        """Names of all sources with a saved batch file."""
        if not self.base_dir.exists():
            return []
        return sorted(
            folder.name for folder in self.base_dir.iterdir()
            if folder.is_dir() and (folder / f"{folder.name}.json").exists()
        )


def load_json(path: Path) -> Any:
    """
    Read a JSON file.

    Raises:
        DataPersistenceError: missing file or invalid JSON
    """
    path = Path(path)
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise DataPersistenceError("File not found", str(path), "load") from e
    except (OSError, json.JSONDecodeError) as e:
        raise DataPersistenceError(f"Failed to read JSON: {e}", str(path), "load") from e
