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
Tests for program templates and corpus loading.
"""

import pytest

from tgvalidator.exceptions import CorpusError, ParseError, TestNotFoundError
from tgvalidator.templates import ProgramTemplate, TemplateLoader
from tgvalidator.utils import default_corpus_dir

from conftest import FEATURE_TEST, SPI_TEST, write_corpus


class TestProgramTemplate:
    """Test template parsing and rendering."""

    def test_render_substitutes_slot(self):
        """Test the peripheral slot is replaced."""
        tmpl = ProgramTemplate.parse(SPI_TEST, "core", "spi")

        source = tmpl.render("SPI1")

        assert "p := machine.SPI1\n" in source
        assert "{{" not in source
        assert tmpl.slot_count == 1
        assert tmpl.pclass == "spi"

    def test_render_without_slot(self):
        """Test a feature template renders unchanged."""
        tmpl = ProgramTemplate.parse(FEATURE_TEST, "empty")

        assert tmpl.slot_count == 0
        assert tmpl.render() == FEATURE_TEST
        assert tmpl.render("SPI0") == FEATURE_TEST

    def test_repeated_slot(self):
        """Test every occurrence of the slot is replaced."""
        tmpl = ProgramTemplate.parse("a={{.Peripheral}} b={{ .Peripheral }}", "twice")

        assert tmpl.render("I2C0") == "a=I2C0 b=I2C0"

    def test_template_is_reusable(self):
        """Test rendering does not alter the template."""
        tmpl = ProgramTemplate.parse(SPI_TEST, "core", "spi")

        first = tmpl.render("SPI0")
        tmpl.render("SPI7")

        assert tmpl.render("SPI0") == first

    def test_trim_markers(self):
        """Test Go-style trim markers strip surrounding whitespace."""
        tmpl = ProgramTemplate.parse("x =  {{- .Peripheral -}}  ;", "trim")

        assert tmpl.render("UART0") == "x =UART0;"

    def test_unterminated_action(self):
        """Test an unterminated action is rejected."""
        with pytest.raises(ParseError, match="unterminated action"):
            ProgramTemplate.parse("package main\n_ = machine.{{.Peripheral\n", "broken")

    def test_unknown_field(self):
        """Test only the peripheral slot is accepted."""
        with pytest.raises(ParseError, match="unsupported action"):
            ProgramTemplate.parse("_ = machine.{{.Pin}}", "pin")

    def test_empty_action(self):
        """Test an empty action is rejected."""
        with pytest.raises(ParseError, match="empty action"):
            ProgramTemplate.parse("x {{ }} y", "empty")

    def test_error_reports_line(self):
        """Test parse errors name the test and line."""
        with pytest.raises(ParseError, match="bad:3:"):
            ProgramTemplate.parse("a\nb\n{{range .X}}", "bad")


class TestTemplateLoader:
    """Test loading templates from a corpus."""

    def test_enumeration_is_sorted(self, sample_corpus):
        """Test names come back sorted."""
        loader = TemplateLoader(sample_corpus)

        assert loader.feature_names() == ["uart-echo"]
        assert loader.peripheral_classes() == ["i2c", "spi"]
        assert loader.class_test_names("i2c") == ["bus-speed-control", "core"]

    def test_load_class(self, sample_corpus):
        """Test loading every test of a class."""
        tests = TemplateLoader(sample_corpus).load_class("spi")

        assert list(tests) == ["core"]
        assert tests["core"].pclass == "spi"
        assert tests["core"].render("SPI0").count("machine.SPI0") == 1

    def test_load_features(self, sample_corpus):
        """Test loading feature tests."""
        tests = TemplateLoader(sample_corpus).load_features()

        assert list(tests) == ["uart-echo"]
        assert tests["uart-echo"].pclass is None

    def test_missing_feature(self, sample_corpus):
        """Test a missing feature test raises TestNotFoundError."""
        with pytest.raises(TestNotFoundError, match="test 'nope' not found"):
            TemplateLoader(sample_corpus).load_feature("nope")

    def test_missing_peripheral_test(self, sample_corpus):
        """Test a missing peripheral test raises TestNotFoundError."""
        with pytest.raises(TestNotFoundError, match="class 'spi' is missing test 'dma'"):
            TemplateLoader(sample_corpus).load_peripheral_test("spi", "dma")

    def test_missing_class_directory(self, sample_corpus):
        """Test enumerating a missing class raises CorpusError."""
        with pytest.raises(CorpusError, match="tests for 'can' peripheral"):
            TemplateLoader(sample_corpus).load_class("can")

    def test_missing_corpus(self, tmp_path):
        """Test a missing corpus root raises CorpusError."""
        loader = TemplateLoader(tmp_path / "absent")

        with pytest.raises(CorpusError):
            loader.peripheral_classes()
        with pytest.raises(CorpusError):
            loader.feature_names()

    def test_missing_source_file(self, tmp_path):
        """Test a test directory without main.go raises CorpusError."""
        (tmp_path / "features" / "hollow").mkdir(parents=True)

        with pytest.raises(CorpusError, match="unable to read test"):
            TemplateLoader(tmp_path).load_feature("hollow")

    def test_unparseable_source(self, tmp_path):
        """Test an invalid template body raises ParseError naming main.go."""
        write_corpus(tmp_path, peripherals={"spi": {"bad": "_ = machine.{{.Peripheral"}})

        with pytest.raises(ParseError, match="main.go"):
            TemplateLoader(tmp_path).load_class("spi")

    def test_hidden_directories_ignored(self, sample_corpus):
        """Test dot-directories are not treated as tests."""
        (sample_corpus / "peripherals" / ".git").mkdir()

        assert TemplateLoader(sample_corpus).peripheral_classes() == ["i2c", "spi"]

    def test_bundled_corpus_loads(self):
        """Test every bundled test parses."""
        loader = TemplateLoader(default_corpus_dir())

        assert "spi" in loader.peripheral_classes()
        for pclass in loader.peripheral_classes():
            for tmpl in loader.load_class(pclass).values():
                assert tmpl.slot_count >= 1
        assert loader.load_features()
