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
Data models for test results, reports and run configuration.
"""

from dataclasses import dataclass, asdict
from typing import Any, Dict, List, Optional, Tuple


DEFAULT_MAX_INSTANCE_INDEX = 8
DEFAULT_BUILD_TIMEOUT = 300.0


@dataclass(frozen=True)
class BuildOutcome:
    """Result of one build attempt."""
    passed: bool
    output: str


@dataclass(frozen=True)
class FeatureResult:
    """Outcome of one feature test on one target."""
    target: str
    feature: str
    passed: bool
    output: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class PeripheralResult:
    """Outcome of one peripheral test on one peripheral instance of a target."""
    target: str
    pclass: str
    feature: str
    peripheral: str
    passed: bool
    output: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class Report:
    """All results of one run, in matrix order."""
    features: Tuple[FeatureResult, ...] = ()
    peripherals: Tuple[PeripheralResult, ...] = ()

    @property
    def failures(self) -> int:
        """Number of results that did not compile."""
        return (sum(1 for r in self.features if not r.passed)
                + sum(1 for r in self.peripherals if not r.passed))

    def to_dict(self) -> Dict[str, List[Dict[str, Any]]]:
        return {
            "features": [r.to_dict() for r in self.features],
            "peripherals": [r.to_dict() for r in self.peripherals],
        }


@dataclass
class RunConfig:
    """
    Caller-supplied configuration for a test run.

    Attributes:
        targets: Explicit target list; ``None`` asks the toolchain
        peripheral_classes: Explicit class list; ``None`` enumerates the corpus
        max_instance_index: Exclusive upper bound for peripheral probing
        jobs: Number of concurrent builds
        include_features: Run feature tests; ``None`` means "unless classes
            were restricted"
    """
    targets: Optional[List[str]] = None
    peripheral_classes: Optional[List[str]] = None
    max_instance_index: int = DEFAULT_MAX_INSTANCE_INDEX
    jobs: int = 1
    include_features: Optional[bool] = None

    def __post_init__(self):
        if self.max_instance_index < 0:
            raise ValueError(f"max_instance_index must be >= 0, got {self.max_instance_index}")
        if self.jobs < 1:
            raise ValueError(f"jobs must be >= 1, got {self.jobs}")

    @property
    def run_features(self) -> bool:
        if self.include_features is None:
            return self.peripheral_classes is None
        return self.include_features
