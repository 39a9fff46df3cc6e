# -*- coding: utf-8 -*-
"""练习压缩包的下载、解压与元数据关联"""

from __future__ import annotations

import io
import tarfile
from pathlib import Path
from typing import Optional, Union

import requests
from loguru import logger

from core.exceptions import (
    ExerciseDownloadError,
    OpenMetaFileError,
    ParseMetaFileError,
    UnpackArchiveError,
    WriteMetaFileError,
)
from .config_service import DEFAULT_BUCKET_URL
from .meta_store import META_FILENAME, ExerciseMetadata
from .submission_client import SubmissionRecord


GS_SCHEME = "gs://"


def resolve_download_url(download_url: str, bucket_url: str = DEFAULT_BUCKET_URL) -> str:
    """把 gs://bucket/key 形式的地址改写为对象存储的 HTTPS 地址

    其他形式的地址原样返回。
    """
    if download_url.startswith(GS_SCHEME):
        return bucket_url.rstrip("/") + "/" + download_url[len(GS_SCHEME):]
    return download_url


class ArchiveInstaller:
    """练习安装器

    下载 tar.gz → 解压到目标目录 → 在 <练习名>/.meta.json 中写入提交令牌并清零 hints_seen
    """

    def __init__(
        self,
        bucket_url: str = DEFAULT_BUCKET_URL,
        timeout: float = 30,
        session: Optional[requests.Session] = None,
    ):
        self.bucket_url = bucket_url
        self.timeout = timeout
        # 对象存储不需要认证头，不复用 API 的 Session
        self.session = session or requests.Session()

    def download(self, download_url: str) -> bytes:
        """下载压缩包内容"""
        url = resolve_download_url(download_url, self.bucket_url)
        logger.info(f"[安装] 下载练习: {url}")
        try:
            r = self.session.get(url, timeout=self.timeout)
            r.raise_for_status()
        except requests.RequestException as e:
            logger.error(f"[安装] 下载失败: {e}")
            raise ExerciseDownloadError(url, str(e)) from e
        logger.debug(f"[安装] 下载完成: {len(r.content)} 字节")
        return r.content

    def unpack(self, payload: bytes, destination: Path) -> None:
        """解压 gzip 压缩的 tar 包到 destination"""
        try:
            with tarfile.open(fileobj=io.BytesIO(payload), mode="r:gz") as archive:
                archive.extractall(destination, filter="data")
        except (tarfile.TarError, OSError, EOFError) as e:
            logger.error(f"[安装] 解压失败: {e}")
            raise UnpackArchiveError(str(e)) from e

    def link_metadata(self, meta_path: Path, submission_token: str) -> ExerciseMetadata:
        """在刚解压的元数据中写入提交令牌，hints_seen 置 0

        以读写模式打开一次：读取 → 回到开头 → 截断 → 写入
        """
        try:
            fh = open(meta_path, "r+", encoding="utf-8")
        except OSError as e:
            raise OpenMetaFileError(meta_path, str(e)) from e

        with fh:
            try:
                meta = ExerciseMetadata.from_json(fh.read())
            except (ValueError, OSError) as e:
                raise ParseMetaFileError(meta_path, str(e)) from e

            meta.submission_token = submission_token
            meta.hints_seen = 0
            try:
                fh.seek(0)
                fh.truncate()
                fh.write(meta.to_json())
            except OSError as e:
                raise WriteMetaFileError(meta_path, str(e)) from e
        return meta

    def install(
        self,
        submission: SubmissionRecord,
        destination: Optional[Union[str, Path]] = None,
    ) -> Path:
        """安装练习

        Args:
            submission: 要安装的提交记录
            destination: 解压目标目录，默认当前工作目录

        Returns:
            练习目录路径
        """
        destination = Path(destination) if destination is not None else Path.cwd()
        payload = self.download(submission.download_url)
        self.unpack(payload, destination)

        exercise_dir = destination / submission.exercise_name
        meta = self.link_metadata(exercise_dir / META_FILENAME, submission.submission_token)
        logger.info(f"[安装] 已安装练习 {meta.name} ({meta.language}) -> {exercise_dir}")
        return exercise_dir
