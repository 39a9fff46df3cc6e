# -*- coding: utf-8 -*-
"""练习语言与各语言的测试策略"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple

from core.exceptions import UnsupportedLanguageError


NO_TEST_RESULTS = "No test results"

_RUST_RESULT_RE = re.compile(r"test result: (?:ok|FAILED)\. ([0-9]+) passed; ([0-9]+) failed;")
_PYTEST_SUMMARY_RE = re.compile(r"^=+ (.*?) in [0-9.]+s.*=+$", re.MULTILINE)
_PYTEST_COUNT_RE = re.compile(r"([0-9]+) (passed|failed|errors?)\b")


class KnownLanguage(str, Enum):
    """已支持的语言"""
    PYTHON = "python"
    RUST = "rust"


@dataclass(frozen=True)
class LanguageId:
    """练习语言

    服务器可能引入新语言，因此任何字符串都能反序列化成 LanguageId；
    需要语言相关行为时再通过 LanguagePolicy 检查是否支持。
    """
    raw: str

    @property
    def known(self) -> Optional[KnownLanguage]:
        try:
            return KnownLanguage(self.raw)
        except ValueError:
            return None

    def __str__(self) -> str:
        return self.raw


def _format_coverage(passed: int, failed: int) -> str:
    if passed == 0 and failed == 0:
        return NO_TEST_RESULTS
    return f"{passed}/{passed + failed}"


def parse_rust_coverage(command_output: str) -> str:
    """解析 cargo test 输出

    输出里可能有多个 "test result" 块（单元测试、集成测试、文档测试），
    所有块的通过/失败数累加。
    """
    passed = failed = 0
    for match in _RUST_RESULT_RE.finditer(command_output):
        passed += int(match.group(1))
        failed += int(match.group(2))
    return _format_coverage(passed, failed)


def parse_python_coverage(command_output: str) -> str:
    """解析 pytest 汇总行，例如 `==== 3 passed, 1 failed in 0.12s ====`

    errors 计为失败；多个汇总行同样累加。
    """
    passed = failed = 0
    for summary in _PYTEST_SUMMARY_RE.finditer(command_output):
        for count, kind in _PYTEST_COUNT_RE.findall(summary.group(1)):
            if kind == "passed":
                passed += int(count)
            else:
                failed += int(count)
    return _format_coverage(passed, failed)


@dataclass(frozen=True)
class LanguageProfile:
    """单个语言的测试约定"""
    test_command: Tuple[str, ...]
    test_file: Path
    solution_file: Path
    coverage_parser: Optional[Callable[[str], str]] = None


LANGUAGE_PROFILES: Dict[KnownLanguage, LanguageProfile] = {
    KnownLanguage.PYTHON: LanguageProfile(
        test_command=("pytest",),
        test_file=Path("tests/tests.py"),
        solution_file=Path("src/main.py"),
        coverage_parser=parse_python_coverage,
    ),
    KnownLanguage.RUST: LanguageProfile(
        test_command=("cargo", "test"),
        test_file=Path("tests/tests.rs"),
        solution_file=Path("src/lib.rs"),
        coverage_parser=parse_rust_coverage,
    ),
}


class LanguagePolicy:
    """按语言查表，返回测试命令、测试文件、解答文件和覆盖率解析器

    无法识别的语言在请求任何一项时都直接报错，不做猜测。
    """

    def __init__(self, language: LanguageId):
        self.language = language

    def _profile(self) -> LanguageProfile:
        known = self.language.known
        if known is None:
            raise UnsupportedLanguageError(self.language.raw)
        return LANGUAGE_PROFILES[known]

    def test_command(self) -> List[str]:
        return list(self._profile().test_command)

    def test_file_path(self) -> Path:
        return self._profile().test_file

    def solution_file_path(self) -> Path:
        return self._profile().solution_file

    def has_coverage_parser(self) -> bool:
        return self._profile().coverage_parser is not None

    def parse_coverage(self, command_output: str) -> str:
        if not self.has_coverage_parser():
            raise UnsupportedLanguageError(self.language.raw)
        return self._profile().coverage_parser(command_output)
