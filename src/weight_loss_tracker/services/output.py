"""
Output service for exporting entries, chart series and progress reports.

Handles CSV, Parquet, and JSON output.
"""

import json
import logging
from pathlib import Path

import pandas as pd

from weight_loss_tracker.domain.progress import ChartSeries, DashboardReport
from weight_loss_tracker.domain.weekly_entry import WeeklyEntry
from weight_loss_tracker.utils.parameters import OutputConfig

logger = logging.getLogger(__name__)


class OutputService:
    """
    Service for writing data to output files.

    Entry exports use snake_case columns, one row per entry in ascending
    date order.
    """

    def __init__(self, config: OutputConfig) -> None:
        """
        Initialize output service.

        Args:
            config: Output configuration.
        """
        self.config = config
        self.output_dir = Path(config.dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)

    def write_entries(self, entries: list[WeeklyEntry]) -> list[Path]:
        """
        Write weekly entries to CSV and/or Parquet.

        Args:
            entries: Weekly entries, already sorted.

        Returns:
            Paths written.
        """
        if not entries:
            logger.warning("No weekly entries to write")
            return []

        df = pd.DataFrame([e.model_dump(mode="json") for e in entries])
        written: list[Path] = []

        if "csv" in self.config.formats:
            csv_path = self.output_dir / self.config.files.entries_csv
            df.to_csv(csv_path, index=False, encoding="utf-8")
            logger.info(f"Wrote CSV to {csv_path}")
            written.append(csv_path)

        if "parquet" in self.config.formats:
            parquet_path = self.output_dir / self.config.files.entries_parquet
            df.to_parquet(  # type: ignore[call-overload]
                parquet_path,
                engine=self.config.parquet.engine,
                compression=self.config.parquet.compression,
                index=False,
            )
            logger.info(f"Wrote Parquet to {parquet_path}")
            written.append(parquet_path)

        logger.info(f"Wrote {len(entries)} weekly entries to output")
        return written

    def write_series(self, series: ChartSeries) -> Path:
        """
        Write a chart series to CSV.

        Args:
            series: Weight or waist series.

        Returns:
            Path written.
        """
        file_name = (
            self.config.files.weight_series_csv
            if series.name == "weight"
            else self.config.files.waist_series_csv
        )
        series_path = self.output_dir / file_name

        df = pd.DataFrame(series.to_records(), columns=["label", "measured_value", "target_value"])
        df.to_csv(series_path, index=False, encoding="utf-8")

        logger.info(f"Wrote {len(df)} {series.name} points to {series_path}")
        return series_path

    def write_report(self, report: DashboardReport) -> Path:
        """
        Write a dashboard snapshot to JSON.

        Args:
            report: Dashboard report.

        Returns:
            Path written.
        """
        report_path = self.output_dir / self.config.files.progress_report

        with open(report_path, "w", encoding="utf-8") as f:
            json.dump(report.to_dict(), f, indent=2, default=str)

        logger.info(f"Wrote progress report to {report_path}")
        return report_path
