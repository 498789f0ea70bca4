from __future__ import annotations

import csv
import io

from ..dtos.distribution_dto import FullDistributionDTO


class ExportService:
    def export_json(self, distribution: FullDistributionDTO) -> str:
        return distribution.model_dump_json(indent=2)

    def export_csv(self, distribution: FullDistributionDTO) -> str:
        output = io.StringIO()
        writer = csv.writer(output)

        output.write("# COMPANY\n")
        writer.writerow(["Field", "Value"])
        writer.writerow(["Id", distribution.company_id])
        writer.writerow(["Name", distribution.company_name])
        output.write("\n")

        for view in distribution.views:
            output.write(f"# {view.label.upper()} ({view.view_id})\n")
            if view.empty:
                writer.writerow(["No distribution data"])
                output.write("\n")
                continue
            writer.writerow(["Name", "Percentage", "Shares", "Category"])
            for s in view.slices:
                writer.writerow([s.name, f"{s.percentage:.4f}", s.shares, s.category])
            writer.writerow(["Total", f"{view.total_raw:.4f}", view.total_shares_sum, ""])
            output.write("\n")

        return output.getvalue()
