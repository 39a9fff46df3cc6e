# -*- coding: utf-8 -*-
"""测试文件校验和"""

import hashlib
from pathlib import Path
from typing import Union

from loguru import logger

from core.exceptions import ChecksumReadError


CHUNK_SIZE = 8192


class ChecksumVerifier:
    """分块读取文件并计算 MD5

    服务器只用它判断测试文件是否被改动，不需要抗碰撞。
    """

    def __init__(self, chunk_size: int = CHUNK_SIZE):
        self.chunk_size = max(1, chunk_size)

    def digest(self, path: Union[str, Path]) -> str:
        """计算文件的十六进制摘要

        Args:
            path: 文件路径

        Returns:
            MD5 十六进制字符串

        Raises:
            ChecksumReadError: 文件不存在或无法读取
        """
        path = Path(path)
        hasher = hashlib.md5()
        try:
            with open(path, "rb") as fh:
                for chunk in iter(lambda: fh.read(self.chunk_size), b""):
                    hasher.update(chunk)
        except OSError as e:
            raise ChecksumReadError(path, str(e)) from e

        checksum = hasher.hexdigest()
        logger.debug(f"[校验和] {path}: {checksum}")
        return checksum
