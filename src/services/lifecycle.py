# -*- coding: utf-8 -*-
"""
练习生命周期编排

把元数据、语言策略、校验和、安装器和提交客户端组合成对外的命令：
download / list / test / submit / forfeit / hint

所有步骤同步执行，任一步失败立即抛出，不做重试；
元数据只在前面的步骤全部成功后才写回。
"""

from __future__ import annotations

import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from loguru import logger

from core.exceptions import (
    MissingSubmissionTokenError,
    NotAuthenticatedError,
    TestCommandError,
    TestOutputDecodeError,
)
from .archive_installer import ArchiveInstaller
from .checksum import ChecksumVerifier
from .language import LanguagePolicy
from .meta_store import ExerciseMetadata, MetaStore
from .submission_client import SubmissionClient, SubmissionRecord, SubmissionStatus


@dataclass
class TestRun:
    """一次测试命令执行的结果"""
    __test__ = False

    returncode: int
    stdout: Optional[str] = None


@dataclass
class SubmitResult:
    """提交结果"""
    exercise: str
    coverage: str
    checksum: str
    returncode: int


@dataclass
class HintResult:
    """提示结果；has_hints 为 False 时 revealed 为空"""
    has_hints: bool
    revealed: List[str] = field(default_factory=list)
    hints_seen: int = 0
    total: int = 0


def run_test_command(command: Sequence[str], cwd: Path, capture: bool = False) -> TestRun:
    """同步运行测试命令并等待结束

    Args:
        command: 命令及参数
        cwd: 工作目录（练习根目录）
        capture: 是否捕获 stdout（提交时需要解析输出）

    Returns:
        TestRun；capture 为 True 时 stdout 为解码后的文本
    """
    printable = " ".join(command)
    logger.debug(f"[测试] 运行 {printable} (cwd={cwd})")
    try:
        proc = subprocess.run(
            list(command),
            cwd=str(cwd),
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE if capture else None,
        )
    except OSError as e:
        raise TestCommandError(printable, str(e)) from e

    logger.debug(f"[测试] {printable} 退出码 {proc.returncode}")
    if not capture:
        return TestRun(returncode=proc.returncode)

    try:
        stdout = proc.stdout.decode("utf-8")
    except UnicodeDecodeError as e:
        raise TestOutputDecodeError(str(e)) from e
    return TestRun(returncode=proc.returncode, stdout=stdout)


class LifecycleOrchestrator:
    """练习生命周期编排器"""

    def __init__(
        self,
        client: Optional[SubmissionClient] = None,
        installer: Optional[ArchiveInstaller] = None,
        meta_store: Optional[MetaStore] = None,
        checksum: Optional[ChecksumVerifier] = None,
        workdir: Optional[Path] = None,
    ):
        self._client = client
        self.installer = installer or ArchiveInstaller()
        self.meta_store = meta_store or MetaStore()
        self.checksum = checksum or ChecksumVerifier()
        self.workdir = Path(workdir) if workdir is not None else None

    @property
    def client(self) -> SubmissionClient:
        if self._client is None:
            raise NotAuthenticatedError()
        return self._client

    def _cwd(self) -> Path:
        return self.workdir if self.workdir is not None else Path.cwd()

    def _locate(self) -> Tuple[ExerciseMetadata, Path]:
        return self.meta_store.locate(self._cwd())

    @staticmethod
    def _require_token(meta: ExerciseMetadata) -> str:
        if not meta.submission_token:
            raise MissingSubmissionTokenError(meta.name)
        return meta.submission_token

    def download(self, token: str) -> Path:
        """按令牌下载并安装练习，返回练习目录"""
        submission = self.client.get(token)
        return self.installer.install(submission, self._cwd())

    def list_pending(self) -> List[SubmissionRecord]:
        return self.client.list(SubmissionStatus.PENDING)

    def test(self) -> int:
        """运行当前练习的测试，输出直接显示在终端，返回退出码"""
        meta, meta_path = self._locate()
        policy = LanguagePolicy(meta.language)
        run = run_test_command(policy.test_command(), meta_path.parent)
        return run.returncode

    def submit(self) -> SubmitResult:
        """运行测试、计算覆盖率和测试文件校验和，然后上传"""
        meta, meta_path = self._locate()
        token = self._require_token(meta)
        policy = LanguagePolicy(meta.language)
        exercise_dir = meta_path.parent

        run = run_test_command(policy.test_command(), exercise_dir, capture=True)
        coverage = policy.parse_coverage(run.stdout)
        checksum = self.checksum.digest(exercise_dir / policy.test_file_path())

        self.client.submit(
            token,
            run.stdout,
            coverage,
            checksum,
            exercise_dir / policy.solution_file_path(),
        )
        return SubmitResult(exercise=meta.name, coverage=coverage, checksum=checksum, returncode=run.returncode)

    def forfeit(self) -> SubmissionRecord:
        """放弃当前练习，返回替换练习的提交记录（需要再执行 download）"""
        meta, _ = self._locate()
        token = self._require_token(meta)
        return self.client.forfeit(token)

    def hint(self) -> HintResult:
        """每次多显示一条提示，最多显示全部提示"""
        meta, meta_path = self._locate()
        if not meta.hints:
            return HintResult(has_hints=False)

        total = len(meta.hints)
        hints_seen = min((meta.hints_seen or 0) + 1, total)
        meta.hints_seen = hints_seen
        self.meta_store.persist(meta, meta_path)
        return HintResult(
            has_hints=True,
            revealed=list(meta.hints[:hints_seen]),
            hints_seen=hints_seen,
            total=total,
        )
