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
External compiler interface.

Everything else in tgvalidator talks to the compiler through the
``Compiler`` interface, so tests can substitute a deterministic fake.
"""

import logging
import os
import subprocess
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from .exceptions import ToolchainError
from .models import DEFAULT_BUILD_TIMEOUT

log = logging.getLogger(__name__)

TOOL_ENV_VAR = "TINYGO"
DEFAULT_TOOL = "tinygo"


@dataclass(frozen=True)
class CompileResult:
    """Exit status and combined stdout/stderr of one compiler run."""
    returncode: int
    output: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class Compiler(ABC):
    """Something that can attempt a build and list its targets."""

    @abstractmethod
    def compile(self, target: str, source: Path, artifact: Path) -> CompileResult:
        """
        Compile one source file for a target.

        A non-zero exit is returned, not raised.

        Raises:
            ToolchainError: If the compiler could not be run
        """

    @abstractmethod
    def list_targets(self) -> List[str]:
        """
        List the compilation targets the toolchain supports.

        Raises:
            ToolchainError: If the listing could not be obtained
        """


class TinyGo(Compiler):
    """
    TinyGo command-line compiler.

    Args:
        executable: Compiler executable; defaults to ``$TINYGO`` or ``tinygo``
        timeout: Seconds before a single invocation is abandoned
    """

    def __init__(self, executable: Optional[str] = None,
                 timeout: Optional[float] = DEFAULT_BUILD_TIMEOUT):
        self.executable = executable or os.environ.get(TOOL_ENV_VAR) or DEFAULT_TOOL
        self.timeout = timeout

    def build_command(self, target: str, source: Path, artifact: Path) -> List[str]:
        return [self.executable, "build", f"-target={target}", "-opt=0",
                "-o", str(artifact), str(source)]

    def compile(self, target: str, source: Path, artifact: Path) -> CompileResult:
        return self._run(self.build_command(target, source, artifact))

    def list_targets(self) -> List[str]:
        result = self._run([self.executable, "targets"])
        if not result.ok:
            raise ToolchainError(
                f"targets command '{self.executable} targets' failed "
                f"with exit status {result.returncode}: {result.output.strip()}"
            )
        return parse_target_list(result.output)

    def _run(self, cmd: List[str]) -> CompileResult:
        cmd_str = " ".join(cmd)
        log.debug("Running %s", cmd_str)
        start = time.monotonic()
        try:
            process = subprocess.run(
                cmd,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                errors="replace",
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired as e:
            raise ToolchainError(f"'{cmd_str}' timed out after {self.timeout}s") from e
        except OSError as e:
            raise ToolchainError(f"unable to start '{cmd_str}': {e}") from e

        log.debug("'%s' exited %d in %.2fs", cmd_str, process.returncode,
                  time.monotonic() - start)
        return CompileResult(returncode=process.returncode, output=process.stdout or "")


def parse_target_list(output: str) -> List[str]:
    """Split ``targets`` output into target names, one per line."""
    text = output.replace("\r\n", "\n").strip()
    return [line.strip() for line in text.split("\n") if line.strip()]
