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
tgvalidator: TinyGo target validator

Checks which hardware peripheral APIs a TinyGo toolchain exposes for each of
its targets by compiling small test programs and recording which compile.
"""

__version__ = "0.1.0"

from .build import BuildDriver
from .detector import PeripheralDetector
from .runner import MatrixRunner, SerialExecutor
from .report import ReportAggregator
from .reporter import ReportFormatter
from .templates import ProgramTemplate, TemplateLoader
from .toolchain import Compiler, CompileResult, TinyGo
from .models import (
    BuildOutcome,
    FeatureResult,
    PeripheralResult,
    Report,
    RunConfig,
)
from .exceptions import (
    ValidatorError,
    CorpusError,
    TestNotFoundError,
    ParseError,
    ToolchainError,
    RunError,
)

__all__ = [
    # Core classes
    'BuildDriver',
    'PeripheralDetector',
    'MatrixRunner',
    'SerialExecutor',
    'ReportAggregator',
    'ReportFormatter',
    'ProgramTemplate',
    'TemplateLoader',
    # Toolchain
    'Compiler',
    'CompileResult',
    'TinyGo',
    # Models
    'BuildOutcome',
    'FeatureResult',
    'PeripheralResult',
    'Report',
    'RunConfig',
    # Exceptions
    'ValidatorError',
    'CorpusError',
    'TestNotFoundError',
    'ParseError',
    'ToolchainError',
    'RunError',
]
