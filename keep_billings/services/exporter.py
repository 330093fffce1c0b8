"""Report export for the document renderer"""
import json
import logging
import os

from keep_billings.models.report import Report

logger = logging.getLogger(__name__)


class JsonExporter:
    """Writes one JSON billing record per customer into the target directory"""

    def __init__(self, target_dir: str):
        self.target_dir = target_dir

    def file_name(self, report: Report) -> str:
        name = report.customer.name.replace(' ', '_')
        return os.path.join(self.target_dir, f"{name}_Billing.json")

    def export(self, report: Report) -> str:
        """Write the report and return the path of the written file"""
        os.makedirs(self.target_dir, exist_ok=True)

        output_path = self.file_name(report)
        with open(output_path, 'w', encoding='utf-8') as f:
            json.dump(report.model_dump(mode='json'), f, indent=2)

        logger.info(f"Wrote billing report to {output_path}")
        return output_path
