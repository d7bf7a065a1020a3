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
Test subcommand implementation.

Runs every feature test on every target and every peripheral test on every
detected peripheral, then prints the report. Failing tests are part of the
report; only infrastructure errors make the command exit non-zero.
"""

import os
import sys
from pathlib import Path
from typing import Optional

import click

from ..exceptions import ValidatorError
from ..models import DEFAULT_BUILD_TIMEOUT, DEFAULT_MAX_INSTANCE_INDEX, RunConfig
from ..reporter import FORMATS, ReportFormatter
from ..runner import MatrixRunner
from ..templates import TemplateLoader
from ..toolchain import TOOL_ENV_VAR, TinyGo
from ..utils import EXIT_USAGE, default_corpus_dir, exit_code_for, split_list


@click.command(name='test')
@click.option('--target', '-t', help='Limits tests to the specified targets (comma separated)')
@click.option('--pclass', '-p', help='Limits tests to the specified peripheral classes (comma separated)')
@click.option('--max-instances', type=click.IntRange(min=0), default=DEFAULT_MAX_INSTANCE_INDEX,
              show_default=True, help='Number of peripheral indices probed per class')
@click.option('--jobs', '-j', type=click.IntRange(min=0), default=1, show_default=True,
              help='Concurrent builds (0 = one per CPU)')
@click.option('--timeout', type=click.FloatRange(min=0, min_open=True), default=DEFAULT_BUILD_TIMEOUT,
              show_default=True, help='Seconds before a single build is abandoned')
@click.option('--tool', envvar=TOOL_ENV_VAR, help=f'Compiler executable [env: {TOOL_ENV_VAR}]')
@click.option('--corpus', type=click.Path(file_okay=False), help='Test corpus directory')
@click.option('--format', 'fmt', type=click.Choice(FORMATS), default='json', show_default=True,
              help='Report format')
@click.option('--output', '-o', type=click.Path(dir_okay=False), help='Write the report to a file')
@click.option('--verbose', '-v', is_flag=True, help='Include build output of failures in text reports')
@click.pass_context
def run_cmd(ctx, target: Optional[str], pclass: Optional[str], max_instances: int, jobs: int,
            timeout: float, tool: Optional[str], corpus: Optional[str], fmt: str,
            output: Optional[str], verbose: bool):
    """Performs the tests to validate tinygo targets."""
    targets = split_list(target)
    pclasses = split_list(pclass)
    if targets == [] or pclasses == []:
        click.echo("Error: --target and --pclass need at least one value", err=True)
        sys.exit(EXIT_USAGE)

    config = RunConfig(
        targets=targets,
        peripheral_classes=pclasses,
        max_instance_index=max_instances,
        jobs=jobs or os.cpu_count() or 1,
    )
    compiler = TinyGo(executable=tool, timeout=timeout)
    loader = TemplateLoader(corpus or default_corpus_dir())

    # Progress goes to stderr when the report itself goes to stdout
    def echo(message: str) -> None:
        click.echo(message, err=output is None)

    runner = MatrixRunner(compiler, loader, config, echo=echo)

    try:
        report = runner.run()
    except ValidatorError as e:
        click.echo(f"Error: {e}", err=True)
        if ctx.obj and ctx.obj.get("debug"):
            import traceback
            traceback.print_exc()
        sys.exit(exit_code_for(e))

    text = ReportFormatter().format(report, fmt, verbose)
    if output:
        output_path = Path(output)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, 'w', encoding='utf-8') as f:
            f.write(text + "\n")
        click.echo(f"Generated: {output_path}")
    else:
        click.echo(text)
