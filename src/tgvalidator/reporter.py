# Copyright 2025 Multikernel Technologies, Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Report formatting.
"""

import json
from typing import Dict, List, Tuple

from .models import Report

FORMATS = ('json', 'yaml', 'text')


class ReportFormatter:
    """Formats a Report as JSON, YAML or a text summary."""

    def format(self, report: Report, format: str = 'json', verbose: bool = False) -> str:
        if format == 'json':
            return json.dumps(report.to_dict(), indent=2)
        elif format == 'yaml':
            return self.generate_yaml_report(report)
        elif format == 'text':
            return self._generate_text_report(report, verbose)
        raise ValueError(f"unknown report format '{format}', expected one of {', '.join(FORMATS)}")

    def generate_yaml_report(self, report: Report) -> str:
        import yaml
        return yaml.safe_dump(report.to_dict(), default_flow_style=False, sort_keys=False)

    def _generate_text_report(self, report: Report, verbose: bool = False) -> str:
        """Generate per-target text summary; failed outputs shown when verbose."""
        lines = []

        lines.append("Target Validation Report")
        lines.append("=" * 24)
        lines.append("")

        lines.extend(self._format_features(report, verbose))
        lines.extend(self._format_peripherals(report, verbose))

        total = len(report.features) + len(report.peripherals)
        if report.failures:
            lines.append(f"✗ {report.failures} of {total} tests failed")
        else:
            lines.append(f"✓ All {total} tests passed")

        return "\n".join(lines)

    def _format_features(self, report: Report, verbose: bool) -> List[str]:
        if not report.features:
            return []

        lines = ["Features:"]
        current = None
        for result in report.features:
            if result.target != current:
                current = result.target
                lines.append(f"  {current}:")
            lines.append(f"    {self._mark(result.passed)} {result.feature}")
            if verbose and not result.passed:
                lines.extend(self._indent(result.output, 8))
        lines.append("")
        return lines

    def _format_peripherals(self, report: Report, verbose: bool) -> List[str]:
        if not report.peripherals:
            return []

        lines = ["Peripherals:"]
        counts: Dict[Tuple[str, str], List[int]] = {}
        current = None
        for result in report.peripherals:
            key = (result.target, result.pclass)
            if key != current:
                current = key
                lines.append(f"  {result.target} {result.pclass}:")
            tally = counts.setdefault(key, [0, 0])
            tally[0 if result.passed else 1] += 1
            lines.append(f"    {self._mark(result.passed)} {result.feature} {result.peripheral}")
            if verbose and not result.passed:
                lines.extend(self._indent(result.output, 8))
        lines.append("")

        lines.append("Summary:")
        for (target, pclass), (passed, failed) in counts.items():
            lines.append(f"  {target} {pclass}: {passed} passed, {failed} failed")
        lines.append("")
        return lines

    @staticmethod
    def _mark(passed: bool) -> str:
        return "✓" if passed else "✗"

    @staticmethod
    def _indent(text: str, width: int) -> List[str]:
        return [" " * width + line for line in text.rstrip().splitlines()]
