"""Tests for autofix.core.errors.

Covers the ordered signature table, parameter extraction for missing
commands, libraries and ports, and classifier determinism.
"""

from __future__ import annotations

import pytest

from autofix.core.errors import (
    ClassifiedFailure,
    FailureCategory,
    FailureClassifier,
    Signature,
    extract_command,
    extract_library,
    extract_port,
)


@pytest.fixture
def classifier() -> FailureClassifier:
    return FailureClassifier()


class TestCategoryMatching:
    """First matching signature wins, case-insensitively."""

    @pytest.mark.parametrize(
        "stderr, expected",
        [
            ("bash: foo: command not found", FailureCategory.MISSING_COMMAND),
            ("/bin/sh: 1: nosuchprog: not found", FailureCategory.MISSING_COMMAND),
            ('exec: "kubectl": executable file not found in $PATH', FailureCategory.MISSING_COMMAND),
            ("gcc: error trying to exec 'cc1': execvp: No such file or directory",
             FailureCategory.MISSING_COMPILER),
            ("gcc: fatal error: cannot execute 'cc1plus': not found",
             FailureCategory.MISSING_COMPILER),
            ("configure: error: no acceptable C compiler found in $PATH",
             FailureCategory.MISSING_BUILD_TOOLS),
            ("/usr/bin/ld: cannot find -lssl", FailureCategory.MISSING_LIBRARY),
            ("error while loading shared libraries: libfoo.so.1", FailureCategory.MISSING_LIBRARY),
            ("Error: listen EADDRINUSE: address already in use :::3000",
             FailureCategory.PORT_IN_USE),
            ("mkdir: cannot create directory '/opt/x': Permission denied",
             FailureCategory.PERMISSION_DENIED),
            ("chown: changing ownership: Operation not permitted",
             FailureCategory.PERMISSION_DENIED),
            ("error: Microsoft Visual C++ 14.0 or greater is required. Get it with build tools",
             FailureCategory.MISSING_BUILD_TOOLS),
            ("E: package manager lock not found", FailureCategory.PACKAGE_MANAGER_NOT_FOUND),
            ("./app: cannot execute binary file: Exec format error",
             FailureCategory.ARCHITECTURE_MISMATCH),
            ("Bad CPU type in executable", FailureCategory.ARCHITECTURE_MISMATCH),
            ("segmentation fault", FailureCategory.UNKNOWN),
            ("", FailureCategory.UNKNOWN),
        ],
    )
    def test_categories(
        self, classifier: FailureClassifier, stderr: str, expected: FailureCategory,
    ) -> None:
        assert classifier.classify(stderr, 1).category == expected

    def test_missing_command_outranks_compiler(self, classifier: FailureClassifier) -> None:
        """'gcc: command not found' mentions gcc and 'not found' but is a missing command."""
        failure = classifier.classify("bash: gcc: command not found", 127)
        assert failure.category == FailureCategory.MISSING_COMMAND
        assert failure.command == "gcc"

    def test_dash_layout_outranks_compiler(self, classifier: FailureClassifier) -> None:
        failure = classifier.classify("/bin/sh: 1: gcc: not found", 127)
        assert failure.category == FailureCategory.MISSING_COMMAND
        assert failure.command == "gcc"

    def test_bare_make_not_found_is_build_tools(self, classifier: FailureClassifier) -> None:
        failure = classifier.classify("make: not found", 127)
        assert failure.category == FailureCategory.MISSING_BUILD_TOOLS
        assert failure.command is None

    def test_compiler_requires_both_halves(self, classifier: FailureClassifier) -> None:
        assert classifier.classify("gcc: warning: unused variable", 1).category == (
            FailureCategory.UNKNOWN
        )

    def test_case_insensitive(self, classifier: FailureClassifier) -> None:
        assert classifier.classify("ADDRESS ALREADY IN USE", 1).category == (
            FailureCategory.PORT_IN_USE
        )

    def test_custom_signature_table(self) -> None:
        classifier = FailureClassifier(
            signatures=(Signature(FailureCategory.PERMISSION_DENIED, ("eacces",)),)
        )
        assert classifier.classify("npm ERR! EACCES", 243).category == (
            FailureCategory.PERMISSION_DENIED
        )
        assert classifier.classify("bash: x: command not found", 127).is_unknown


class TestExtraction:
    """Parameter extraction per category."""

    def test_bash_missing_command(self, classifier: FailureClassifier) -> None:
        failure = classifier.classify("bash: foo: command not found", 127)
        assert failure.category == FailureCategory.MISSING_COMMAND
        assert failure.command == "foo"
        assert failure.package is None
        assert failure.port is None

    @pytest.mark.parametrize(
        "stderr, expected",
        [
            ("foo: command not found", "foo"),
            ("/bin/sh: 1: terraform: command not found", "terraform"),
            ("zsh: command not found: rg", "rg"),
            ('exec: "kubectl": executable file not found in $PATH', "kubectl"),
            ("some output\nsh: 'jq': command not found\n", "jq"),
            ("/bin/sh: 1: nosuchprog: not found", "nosuchprog"),
            ("make: ***\nsh: 12: cmake: not found\n", "cmake"),
        ],
    )
    def test_command_layouts(self, stderr: str, expected: str) -> None:
        assert extract_command(stderr) == expected

    def test_command_without_name(self) -> None:
        assert extract_command("command not found") is None

    def test_missing_library(self, classifier: FailureClassifier) -> None:
        failure = classifier.classify("/usr/bin/ld: cannot find -lssl", 1)
        assert failure.category == FailureCategory.MISSING_LIBRARY
        assert failure.package == "ssl"
        assert failure.command is None

    @pytest.mark.parametrize(
        "stderr, expected",
        [
            ("cannot find -lcrypto: No such file or directory", "crypto"),
            ("ld: cannot find -lz)", "z"),
            ("error while loading shared libraries: libfoo.so.1", None),
        ],
    )
    def test_library_flags(self, stderr: str, expected: str | None) -> None:
        assert extract_library(stderr) == expected

    def test_library_flag_must_start_token(self) -> None:
        assert extract_library("gcc -o build-lssl main.c") is None

    def test_port_in_use(self, classifier: FailureClassifier) -> None:
        failure = classifier.classify("address already in use :: 8080:", 1)
        assert failure.category == FailureCategory.PORT_IN_USE
        assert failure.port == "8080"

    @pytest.mark.parametrize(
        "stderr, expected",
        [
            ("listen tcp 0.0.0.0:5432: bind: address already in use", "5432"),
            ("address already in use 123456:", None),
            ("address already in use", None),
            ("bind: address already in use port:", None),
        ],
    )
    def test_port_tokens(self, stderr: str, expected: str | None) -> None:
        assert extract_port(stderr) == expected

    def test_other_categories_extract_nothing(self, classifier: FailureClassifier) -> None:
        failure = classifier.classify("Permission denied: foo: command", 1)
        assert failure.category == FailureCategory.PERMISSION_DENIED
        assert failure.extracted is None


class TestDeterminism:
    def test_identical_inputs_equal_outputs(self, classifier: FailureClassifier) -> None:
        stderr = "bash: make: command not found"
        first = classifier.classify(stderr, 127)
        second = FailureClassifier().classify(stderr, 127)
        assert first == second
        assert isinstance(first, ClassifiedFailure)

    def test_message_and_exit_code(self, classifier: FailureClassifier) -> None:
        failure = classifier.classify("nothing recognizable", 3)
        assert failure.is_unknown
        assert failure.message == "Unknown error"
        assert failure.exit_code == 3
