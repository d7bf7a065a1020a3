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
Utility functions shared by the tgvalidator subcommands.
"""

from pathlib import Path
from typing import List, Optional

from .exceptions import CorpusError, ParseError

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2
EXIT_CORPUS = 3
EXIT_PARSE = 4


def default_corpus_dir() -> Path:
    """Corpus bundled with the package."""
    return Path(__file__).parent / "corpus"


def split_list(value: Optional[str]) -> Optional[List[str]]:
    """
    Split a comma-separated option value.

    Args:
        value: Option value such as "pico,feather-m4"

    Returns:
        List of non-empty, stripped items, or None if the option was not given
    """
    if value is None:
        return None
    return [item.strip() for item in value.split(",") if item.strip()]


def exit_code_for(error: BaseException) -> int:
    """Map a fatal error, or the error it was raised from, to an exit status."""
    cause = error
    while cause is not None:
        if isinstance(cause, ParseError):
            return EXIT_PARSE
        if isinstance(cause, CorpusError):
            return EXIT_CORPUS
        cause = cause.__cause__
    return EXIT_FAILURE
