# -*- coding: utf-8 -*-
# Sharpener 提交 API 封装

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Any, List, Optional, Union

import requests
from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError, field_validator

from core.exceptions import (
    InvalidAPIResponseError,
    InvalidForfeitError,
    InvalidTokenError,
    ParseSubmissionResponseError,
    ServerRequestError,
    SolutionFileError,
)
from .language import LanguageId


HTTP_OK = 200


class SubmissionStatus(str, Enum):
    """提交状态（由服务器维护，客户端只读）"""
    SKIPPED = "skipped"
    SUBMITTED = "submitted"
    PENDING = "pending"


class SubmissionRecord(BaseModel):
    """服务器返回的提交记录"""
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    exercise_name: str = Field(..., description="练习名称")
    exercise_language: LanguageId = Field(..., description="练习语言")
    download_url: str = Field(..., description="练习压缩包地址")
    submission_token: str = Field(..., description="提交令牌")
    attempts: int = Field(..., description="已尝试次数")
    submission_status: SubmissionStatus = Field(..., description="提交状态")

    @field_validator("exercise_language", mode="before")
    @classmethod
    def _parse_language(cls, value: Any) -> LanguageId:
        if isinstance(value, LanguageId):
            return value
        if not isinstance(value, str):
            raise ValueError("exercise_language 必须是字符串")
        return LanguageId(value)


class ForfeitResponse(BaseModel):
    """放弃接口的响应信封"""
    success: bool = False
    data: Optional[SubmissionRecord] = None


_RECORD_LIST = TypeAdapter(List[SubmissionRecord])


class SubmissionClient:
    """与 Sharpener 服务器的交互封装

    认证头在构造时一次性挂到 Session 上；所有接口只接受 HTTP 200，失败不重试。
    """

    def __init__(
        self,
        api_url: str,
        token: str,
        timeout: float = 30,
        session: Optional[requests.Session] = None,
    ):
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({
            "Authorization": self._auth_header(token),
            "Accept": "application/json",
            "User-Agent": "sharpener-cli/1.0",
        })

    @staticmethod
    def _auth_header(token: str) -> str:
        token = (token or "").strip()
        if not token or any(ch in token for ch in "\r\n\0"):
            raise InvalidTokenError("CLI token 无效，请使用 `sharpener config` 重新生成")
        return f"Bearer {token}"

    def _url(self, suffix: str) -> str:
        return f"{self.api_url}/{suffix}"

    def _request(self, method: str, url: str, **kwargs) -> requests.Response:
        logger.debug(f"[提交客户端] {method} {url}")
        try:
            r = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            logger.error(f"[提交客户端] 请求失败 {method} {url}: {e}")
            raise ServerRequestError(str(e), url) from e

        if r.status_code != HTTP_OK:
            logger.error(f"[提交客户端] HTTP {r.status_code}: {r.text[:200]}")
            raise InvalidAPIResponseError(HTTP_OK, r.status_code, url)
        return r

    @staticmethod
    def _json(r: requests.Response) -> Any:
        try:
            return r.json()
        except ValueError as e:
            raise ParseSubmissionResponseError(str(e)) from e

    def list(self, status: Optional[SubmissionStatus] = None) -> List[SubmissionRecord]:
        """列出当前用户的提交

        Args:
            status: 只保留该状态的记录（保持服务器返回的顺序）

        Returns:
            提交记录列表
        """
        r = self._request("GET", self._url("submissions"))
        try:
            submissions = _RECORD_LIST.validate_python(self._json(r))
        except ValidationError as e:
            raise ParseSubmissionResponseError(str(e)) from e

        if status is None:
            return submissions
        return [s for s in submissions if s.submission_status == status]

    def get(self, token: str) -> SubmissionRecord:
        """按令牌获取单条提交"""
        r = self._request("GET", self._url(f"submissions/{token}"))
        try:
            return SubmissionRecord.model_validate(self._json(r))
        except ValidationError as e:
            raise ParseSubmissionResponseError(str(e)) from e

    def forfeit(self, token: str) -> SubmissionRecord:
        """放弃当前练习，换取一道新练习

        Returns:
            新练习的提交记录

        Raises:
            InvalidForfeitError: 服务器没有可替换的练习
        """
        r = self._request("POST", self._url(f"submissions/{token}/forfeit"))
        try:
            envelope = ForfeitResponse.model_validate(self._json(r))
        except ValidationError as e:
            raise ParseSubmissionResponseError(str(e)) from e

        if not envelope.success or envelope.data is None:
            logger.warning(f"[提交客户端] 放弃失败: {token}")
            raise InvalidForfeitError()
        logger.info(f"[提交客户端] 已放弃 {token}，新令牌 {envelope.data.submission_token}")
        return envelope.data

    def submit(
        self,
        token: str,
        test_output: str,
        test_coverage: str,
        test_checksum: str,
        solution_path: Union[str, Path],
    ) -> None:
        """上传测试结果与解答文件（multipart/form-data）"""
        solution_path = Path(solution_path)
        try:
            solution = solution_path.read_bytes()
        except OSError as e:
            raise SolutionFileError(solution_path, str(e)) from e

        data = {
            "test_output": test_output,
            "test_coverage": test_coverage,
            "test_checksum": test_checksum,
        }
        files = {"solution": (solution_path.name, solution, "application/octet-stream")}
        self._request("POST", self._url(f"submissions/{token}"), data=data, files=files)
        logger.info(f"[提交客户端] 已提交 {token}，覆盖率 {test_coverage}")
