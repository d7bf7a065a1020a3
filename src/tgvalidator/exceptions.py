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
Exception classes for tgvalidator.

Only infrastructure problems are exceptions. A build that runs and exits
non-zero is a normal outcome and is reported as data, never raised.
"""

from typing import Optional


class ValidatorError(Exception):
    """Base exception for all tgvalidator errors."""


class CorpusError(ValidatorError):
    """Raised when the test corpus cannot be read."""


class TestNotFoundError(CorpusError):
    """Raised when a named test does not exist in the corpus."""

    __test__ = False


class ParseError(ValidatorError):
    """Raised when a test body is not a valid program template."""


class ToolchainError(ValidatorError):
    """Raised when the compiler cannot be run at all."""


class RunError(ValidatorError):
    """
    Raised when a fatal error aborts a test run.

    Carries the matrix cell that was in flight so the environment problem
    can be located. The underlying error is chained as ``__cause__``.
    """

    def __init__(self, message: str, target: Optional[str] = None,
                 pclass: Optional[str] = None, test: Optional[str] = None):
        super().__init__(message)
        self.target = target
        self.pclass = pclass
        self.test = test
