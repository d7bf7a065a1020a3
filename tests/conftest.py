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
Pytest configuration and fixtures for tgvalidator tests.
"""

import re
import sys
import threading
from pathlib import Path

import pytest

# Add src to path for imports
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

from tgvalidator.detector import PROBE_TEMPLATE
from tgvalidator.exceptions import ToolchainError
from tgvalidator.toolchain import Compiler, CompileResult


PERIPHERAL_REF = re.compile(r"machine\.([A-Z]+[0-9]+)")

SPI_TEST = """package main

import "machine"

func main() {
	p := machine.{{.Peripheral}}
	p.Configure(machine.SPIConfig{})
}
"""

I2C_TEST = """package main

import "machine"

func main() {
	_ = machine.{{ .Peripheral }}
}
"""

FEATURE_TEST = """package main

func main() {
}
"""


def referenced_peripheral(source):
    """Return the peripheral a rendered program references, or None."""
    match = PERIPHERAL_REF.search(source)
    return match.group(1) if match else None


def is_probe(source):
    """True if the source is a detection probe rather than a test."""
    name = referenced_peripheral(source)
    return name is not None and source == PROBE_TEMPLATE.render(name)


class FakeCompiler(Compiler):
    """
    Deterministic stand-in for the TinyGo compiler.

    ``passes(target, source)`` decides whether a build succeeds; ``fails_hard``
    (same signature) raises ToolchainError instead. Every build is recorded in
    ``calls`` as ``(target, source)``.
    """

    def __init__(self, passes=None, fails_hard=None, targets=None):
        self.passes = passes or (lambda target, source: True)
        self.fails_hard = fails_hard
        self.targets = list(targets or [])
        self.calls = []
        self.list_calls = 0
        self.artifacts = []
        self._lock = threading.Lock()

    def compile(self, target, source, artifact):
        text = source.read_text(encoding="utf-8")
        with self._lock:
            self.calls.append((target, text))
            self.artifacts.append((source, artifact))
        if self.fails_hard is not None and self.fails_hard(target, text):
            raise ToolchainError("unable to start 'tinygo build': no such file")
        if self.passes(target, text):
            return CompileResult(returncode=0, output="")
        return CompileResult(
            returncode=1,
            output=f"# command-line-arguments\n{source}:6:14: undefined: machine.X\n",
        )

    def list_targets(self):
        self.list_calls += 1
        return list(self.targets)


def only_peripherals(*names):
    """Pass predicate: probes succeed only for the given peripheral names."""
    allowed = set(names)

    def passes(target, source):
        name = referenced_peripheral(source)
        return name is None or name in allowed

    return passes


def write_corpus(root, features=None, peripherals=None):
    """Lay out a corpus directory from {name: body} mappings."""
    root = Path(root)
    (root / "features").mkdir(parents=True, exist_ok=True)
    (root / "peripherals").mkdir(parents=True, exist_ok=True)
    for name, body in (features or {}).items():
        test_dir = root / "features" / name
        test_dir.mkdir(parents=True)
        (test_dir / "main.go").write_text(body, encoding="utf-8")
    for pclass, tests in (peripherals or {}).items():
        class_dir = root / "peripherals" / pclass
        class_dir.mkdir(parents=True, exist_ok=True)
        for name, body in tests.items():
            (class_dir / name).mkdir()
            (class_dir / name / "main.go").write_text(body, encoding="utf-8")
    return root


@pytest.fixture
def sample_corpus(tmp_path):
    """Corpus with one feature test and spi/i2c peripheral tests."""
    return write_corpus(
        tmp_path / "corpus",
        features={"uart-echo": FEATURE_TEST},
        peripherals={
            "spi": {"core": SPI_TEST},
            "i2c": {"core": I2C_TEST, "bus-speed-control": I2C_TEST},
        },
    )


@pytest.fixture
def fake_compiler():
    """FakeCompiler that passes every build."""
    return FakeCompiler()
