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
Report aggregation.
"""

from typing import Iterable, List

from .models import FeatureResult, PeripheralResult, Report


class ReportAggregator:
    """
    Collects results in the order they are added and produces a Report.

    No deduplication or summarizing; callers add results in matrix order.
    """

    def __init__(self):
        self._features: List[FeatureResult] = []
        self._peripherals: List[PeripheralResult] = []
        self._report = None

    def add_feature(self, result: FeatureResult) -> None:
        self._check_open()
        self._features.append(result)

    def add_peripheral(self, result: PeripheralResult) -> None:
        self._check_open()
        self._peripherals.append(result)

    def extend(self, results: Iterable) -> None:
        """Add a mix of feature and peripheral results."""
        for result in results:
            if isinstance(result, PeripheralResult):
                self.add_peripheral(result)
            elif isinstance(result, FeatureResult):
                self.add_feature(result)
            else:
                raise TypeError(f"not a test result: {result!r}")

    def finalize(self) -> Report:
        """Freeze the collected results. Further additions raise RuntimeError."""
        if self._report is None:
            self._report = Report(features=tuple(self._features),
                                  peripherals=tuple(self._peripherals))
        return self._report

    def _check_open(self) -> None:
        if self._report is not None:
            raise RuntimeError("report already finalized")
