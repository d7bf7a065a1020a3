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
Build driver: renders a template into a scratch directory and compiles it.
"""

import logging
import tempfile
from pathlib import Path

from .exceptions import ToolchainError
from .models import BuildOutcome
from .templates import SOURCE_FILE, ProgramTemplate
from .toolchain import Compiler

log = logging.getLogger(__name__)

APP_NAME = "tinygo-target-validator"
ARTIFACT_NAME = "test.elf"


class BuildDriver:
    """
    Single point of contact with the compiler.

    Every build gets its own scratch directory, so concurrent builds never
    share files. The compiled artifact is discarded; only the exit status and
    output are kept.
    """

    def __init__(self, compiler: Compiler):
        self.compiler = compiler

    def build(self, template: ProgramTemplate, target: str, peripheral: str = "") -> BuildOutcome:
        """
        Render and compile a template for a target.

        Args:
            template: Program template to render
            target: Compilation target
            peripheral: Value for the peripheral slot, empty for feature tests

        Returns:
            BuildOutcome; ``passed`` is False when the compiler exits non-zero

        Raises:
            ToolchainError: If scratch space cannot be prepared or the
                compiler cannot be run
        """
        source = template.render(peripheral)

        try:
            scratch = tempfile.TemporaryDirectory(prefix=f"{APP_NAME}-")
        except OSError as e:
            raise ToolchainError(f"unable to create scratch directory: {e}") from e

        with scratch as tmpdir:
            source_path = Path(tmpdir) / SOURCE_FILE
            try:
                with open(source_path, "w", encoding="utf-8") as f:
                    f.write(source)
            except OSError as e:
                raise ToolchainError(f"unable to write source {source_path}: {e}") from e

            result = self.compiler.compile(target, source_path, Path(tmpdir) / ARTIFACT_NAME)

        log.debug("build %s [%s] for %s: %s", template.name, peripheral or "-", target,
                  "ok" if result.ok else f"exit {result.returncode}")
        return BuildOutcome(passed=result.ok, output=result.output)
