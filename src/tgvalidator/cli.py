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
Command-line interface for tgvalidator.
"""

import logging

import click
from . import __version__
from .run.main import run_cmd
from .targets.main import targets_cmd
from .detect.main import detect_cmd


def _configure_logging(debug: bool) -> None:
    logger = logging.getLogger("tgvalidator")
    if not debug:
        logger.setLevel(logging.WARNING)
        return
    if not any(isinstance(h, logging.StreamHandler) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
        logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)


@click.group()
@click.version_option(version=__version__, prog_name="tgvalidator")
@click.option("--debug", is_flag=True, help="Enable debug mode")
@click.pass_context
def main(ctx, debug):
    """tgvalidator: validate TinyGo targets by trial compilation."""
    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug
    _configure_logging(debug)


# Add subcommands
main.add_command(run_cmd)
main.add_command(targets_cmd)
main.add_command(detect_cmd)


if __name__ == "__main__":
    main()
