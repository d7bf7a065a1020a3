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
List the targets the toolchain supports.
"""

import sys
from typing import Optional

import click

from ..exceptions import ToolchainError
from ..toolchain import TOOL_ENV_VAR, TinyGo
from ..utils import EXIT_FAILURE


@click.command(name='targets')
@click.option('--tool', envvar=TOOL_ENV_VAR, help=f'Compiler executable [env: {TOOL_ENV_VAR}]')
def targets_cmd(tool: Optional[str]):
    """Lists the targets known to the toolchain."""
    try:
        targets = TinyGo(executable=tool).list_targets()
    except ToolchainError as e:
        click.echo(f"Error: failed to get list of targets: {e}", err=True)
        sys.exit(EXIT_FAILURE)

    for target in targets:
        click.echo(target)
