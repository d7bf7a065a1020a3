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
Detect peripheral instances without running any tests.
"""

import sys
from typing import Optional

import click

from ..build import BuildDriver
from ..detector import PeripheralDetector
from ..exceptions import ToolchainError
from ..models import DEFAULT_BUILD_TIMEOUT, DEFAULT_MAX_INSTANCE_INDEX
from ..toolchain import TOOL_ENV_VAR, TinyGo
from ..utils import EXIT_FAILURE, EXIT_USAGE, split_list


@click.command(name='detect')
@click.option('--target', '-t', required=True, help='Targets to probe (comma separated)')
@click.option('--pclass', '-p', required=True, help='Peripheral classes to probe (comma separated)')
@click.option('--max-instances', type=click.IntRange(min=0), default=DEFAULT_MAX_INSTANCE_INDEX,
              show_default=True, help='Number of peripheral indices probed per class')
@click.option('--timeout', type=click.FloatRange(min=0, min_open=True), default=DEFAULT_BUILD_TIMEOUT,
              show_default=True, help='Seconds before a single build is abandoned')
@click.option('--tool', envvar=TOOL_ENV_VAR, help=f'Compiler executable [env: {TOOL_ENV_VAR}]')
def detect_cmd(target: str, pclass: str, max_instances: int, timeout: float, tool: Optional[str]):
    """Detects the peripherals of each class on each target."""
    targets = split_list(target)
    pclasses = split_list(pclass)
    if not targets or not pclasses:
        click.echo("Error: --target and --pclass need at least one value", err=True)
        sys.exit(EXIT_USAGE)

    detector = PeripheralDetector(BuildDriver(TinyGo(executable=tool, timeout=timeout)),
                                  max_instance_index=max_instances)

    for name in targets:
        for cls in pclasses:
            try:
                peripherals = detector.detect(name, cls)
            except ToolchainError as e:
                click.echo(
                    f"Error: unable to detect peripherals of class {cls} for target {name}: {e}",
                    err=True,
                )
                sys.exit(EXIT_FAILURE)
            click.echo(f"{name} {cls}: {' '.join(peripherals) or '(none)'}")
