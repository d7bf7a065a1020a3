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
Peripheral detection by trial compilation.

The toolchain has no capability manifest; a peripheral such as ``SPI1``
exists on a target only if a program referencing ``machine.SPI1`` compiles.
Every candidate from ``<CLASS>0`` up to the configured bound is tried, one
build each. A failed build is taken to mean "absent", even when the real
cause is something else in the trial program.
"""

from typing import List

from .build import BuildDriver
from .models import DEFAULT_MAX_INSTANCE_INDEX
from .templates import ProgramTemplate

PROBE_SOURCE = """package main

import "machine"

func main() {
	_ = machine.{{.Peripheral}}
}
"""

PROBE_TEMPLATE = ProgramTemplate.parse(PROBE_SOURCE, "peripheral-probe")


def peripheral_name(pclass: str, index: int) -> str:
    return f"{pclass.upper()}{index}"


class PeripheralDetector:
    """
    Discovers the peripheral instances of a class on a target.

    Attributes:
        driver: Build driver used for every probe
        max_instance_index: Exclusive upper bound of probed indices
    """

    def __init__(self, driver: BuildDriver, max_instance_index: int = DEFAULT_MAX_INSTANCE_INDEX):
        if max_instance_index < 0:
            raise ValueError(f"max_instance_index must be >= 0, got {max_instance_index}")
        self.driver = driver
        self.max_instance_index = max_instance_index

    def candidates(self, pclass: str) -> List[str]:
        """Peripheral names to probe for a class, in index order."""
        return [peripheral_name(pclass, i) for i in range(self.max_instance_index)]

    def probe(self, target: str, peripheral: str) -> bool:
        """Return True if a program referencing the peripheral compiles."""
        return self.driver.build(PROBE_TEMPLATE, target, peripheral).passed

    def detect(self, target: str, pclass: str) -> List[str]:
        """
        Detect all instances of a peripheral class on a target.

        All candidates are probed; a missing index does not stop the scan.
        MatrixRunner runs the same scan as one cell per candidate, so a change
        to the probe rule belongs in candidates() or probe().

        Raises:
            ToolchainError: If a probe could not be run at all
        """
        return [name for name in self.candidates(pclass) if self.probe(target, name)]
