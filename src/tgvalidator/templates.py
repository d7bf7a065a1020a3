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
Test corpus loading and program templates.

A corpus has two roots::

    <root>/features/<test>/main.go
    <root>/peripherals/<class>/<test>/main.go

Each ``main.go`` is a program skeleton with a single named slot,
``{{.Peripheral}}``, which is replaced by the peripheral instance name
(e.g. ``SPI0``) or left empty for feature tests.
"""

import re
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

from .exceptions import CorpusError, ParseError, TestNotFoundError


SOURCE_FILE = "main.go"
SLOT_NAME = ".Peripheral"

FEATURES_DIR = "features"
PERIPHERALS_DIR = "peripherals"

_ACTION_OPEN = "{{"
_ACTION_CLOSE = "}}"


class ProgramTemplate:
    """
    Parsed program skeleton with one substitution slot.

    The body is split once into literal segments; ``render`` joins them
    with the peripheral name. A template may reference the slot any number
    of times, including zero.
    """

    def __init__(self, name: str, segments: Tuple[str, ...], pclass: Optional[str] = None):
        self.name = name
        self.pclass = pclass
        self._segments = segments

    @property
    def slot_count(self) -> int:
        return len(self._segments) - 1

    def render(self, peripheral: str = "") -> str:
        return peripheral.join(self._segments)

    @classmethod
    def parse(cls, text: str, name: str, pclass: Optional[str] = None) -> "ProgramTemplate":
        """
        Parse a template body.

        Args:
            text: Template source
            name: Test name, used in error messages
            pclass: Peripheral class the test belongs to, if any

        Returns:
            ProgramTemplate ready to render

        Raises:
            ParseError: If an action is unterminated, empty, or names
                anything other than the peripheral slot
        """
        segments: List[str] = []
        literal = ""
        pos = 0

        while True:
            start = text.find(_ACTION_OPEN, pos)
            if start < 0:
                literal += text[pos:]
                break

            end = text.find(_ACTION_CLOSE, start + len(_ACTION_OPEN))
            if end < 0:
                line = text.count("\n", 0, start) + 1
                raise ParseError(f"{name}:{line}: unterminated action")

            literal += text[pos:start]
            action = text[start + len(_ACTION_OPEN):end]
            pos = end + len(_ACTION_CLOSE)

            # Go-style trim markers: "{{- " strips before, " -}}" strips after
            if re.match(r"-\s", action):
                literal = literal.rstrip()
                action = action[1:]
            trim_after = re.search(r"\s-$", action) is not None
            if trim_after:
                action = action[:-1]

            action = action.strip()
            if not action:
                line = text.count("\n", 0, start) + 1
                raise ParseError(f"{name}:{line}: empty action")
            if action != SLOT_NAME:
                line = text.count("\n", 0, start) + 1
                raise ParseError(
                    f"{name}:{line}: unsupported action '{{{{{action}}}}}', "
                    f"only '{{{{{SLOT_NAME}}}}}' is allowed"
                )

            segments.append(literal)
            literal = ""
            if trim_after:
                stripped = text[pos:].lstrip()
                pos = len(text) - len(stripped)

        segments.append(literal)
        return cls(name, tuple(segments), pclass)

    def __repr__(self) -> str:
        owner = f"{self.pclass}." if self.pclass else ""
        return f"ProgramTemplate({owner}{self.name}, slots={self.slot_count})"


class TemplateLoader:
    """
    Loads program templates from a test corpus.

    Attributes:
        root: Corpus root directory
        features_dir: Directory of feature tests
        peripherals_dir: Directory of peripheral class directories
    """

    def __init__(self, root: Union[str, Path]):
        self.root = Path(root)
        self.features_dir = self.root / FEATURES_DIR
        self.peripherals_dir = self.root / PERIPHERALS_DIR

    def feature_names(self) -> List[str]:
        """List feature tests in the corpus."""
        return self._list_dirs(self.features_dir, "feature tests")

    def peripheral_classes(self) -> List[str]:
        """List peripheral classes that have tests in the corpus."""
        return self._list_dirs(self.peripherals_dir, "peripheral classes")

    def class_test_names(self, pclass: str) -> List[str]:
        """List tests for one peripheral class."""
        return self._list_dirs(self.peripherals_dir / pclass, f"tests for '{pclass}' peripheral")

    def load_feature(self, name: str) -> ProgramTemplate:
        test_path = self.features_dir / name
        if not test_path.exists():
            raise TestNotFoundError(f"test '{name}' not found")
        return self._load(test_path, name)

    def load_peripheral_test(self, pclass: str, name: str) -> ProgramTemplate:
        test_path = self.peripherals_dir / pclass / name
        if not test_path.exists():
            raise TestNotFoundError(f"class '{pclass}' is missing test '{name}'")
        return self._load(test_path, name, pclass)

    def load_features(self) -> Dict[str, ProgramTemplate]:
        """Load every feature test, keyed by name in sorted order."""
        tests = {}
        for name in self.feature_names():
            tests[name] = self.load_feature(name)
        return tests

    def load_class(self, pclass: str) -> Dict[str, ProgramTemplate]:
        """Load every test of a peripheral class, keyed by name in sorted order."""
        tests = {}
        for name in self.class_test_names(pclass):
            tests[name] = self.load_peripheral_test(pclass, name)
        return tests

    def _load(self, test_path: Path, name: str, pclass: Optional[str] = None) -> ProgramTemplate:
        source_path = test_path / SOURCE_FILE
        try:
            with open(source_path, "r", encoding="utf-8") as f:
                text = f.read()
        except (OSError, UnicodeDecodeError) as e:
            raise CorpusError(f"unable to read test '{test_path}': {e}") from e

        try:
            return ProgramTemplate.parse(text, name, pclass)
        except ParseError as e:
            raise ParseError(
                f"unable to parse '{SOURCE_FILE}' as a template for test {test_path}: {e}"
            ) from e

    @staticmethod
    def _list_dirs(path: Path, what: str) -> List[str]:
        try:
            entries = sorted(
                entry.name for entry in path.iterdir()
                if entry.is_dir() and not entry.name.startswith('.')
            )
        except OSError as e:
            raise CorpusError(f"failed to enumerate {what} in '{path}': {e}") from e
        return entries
