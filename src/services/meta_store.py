# -*- coding: utf-8 -*-
"""练习元数据（.meta.json）的定义、查找与写回"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

from loguru import logger

from core.exceptions import MissingMetaError, OpenMetaFileError, WriteMetaFileError
from .language import LanguageId


META_FILENAME = ".meta.json"


@dataclass
class ExerciseMetadata:
    """练习元数据

    name / language / difficulty / topics / hints 由服务器打包时写入，之后不再改动；
    hints_seen 只由 hint 命令修改；submission_token 在下载安装时写入一次。
    """
    name: str
    language: LanguageId
    difficulty: int
    topics: Optional[List[str]] = None
    hints: Optional[List[str]] = None
    hints_seen: Optional[int] = None
    submission_token: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """转换为字典，缺省的可选字段直接省略（不写 null）"""
        data: Dict[str, Any] = {
            "name": self.name,
            "language": self.language.raw,
            "difficulty": self.difficulty,
        }
        optional = {
            "topics": self.topics,
            "hints": self.hints,
            "hints_seen": self.hints_seen,
            "submission_token": self.submission_token,
        }
        data.update({k: v for k, v in optional.items() if v is not None})
        return data

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False, indent=2)

    @staticmethod
    def from_dict(data: Any) -> 'ExerciseMetadata':
        """从字典创建

        Raises:
            ValueError: 缺少必需字段或字段类型不对
        """
        if not isinstance(data, dict):
            raise ValueError("元数据必须是 JSON 对象")

        for field_name in ("name", "language", "difficulty"):
            if field_name not in data:
                raise ValueError(f"缺少必需字段: {field_name}")
        if not isinstance(data["name"], str) or not isinstance(data["language"], str):
            raise ValueError("name 和 language 必须是字符串")
        if not _is_int(data["difficulty"]):
            raise ValueError("difficulty 必须是整数")

        for field_name in ("topics", "hints"):
            value = data.get(field_name)
            if value is not None and not (
                isinstance(value, list) and all(isinstance(v, str) for v in value)
            ):
                raise ValueError(f"{field_name} 必须是字符串列表")

        hints_seen = data.get("hints_seen")
        if hints_seen is not None and (not _is_int(hints_seen) or hints_seen < 0):
            raise ValueError("hints_seen 必须是非负整数")
        hints_total = len(data.get("hints") or [])
        if hints_seen is not None and hints_seen > hints_total:
            logger.warning(f"[元数据] hints_seen={hints_seen} 超过提示总数 {hints_total}，按 {hints_total} 处理")
            hints_seen = hints_total

        token = data.get("submission_token")
        if token is not None and not isinstance(token, str):
            raise ValueError("submission_token 必须是字符串")

        return ExerciseMetadata(
            name=data["name"],
            language=LanguageId(data["language"]),
            difficulty=data["difficulty"],
            topics=data.get("topics"),
            hints=data.get("hints"),
            hints_seen=hints_seen,
            submission_token=token,
        )

    @staticmethod
    def from_json(json_str: str) -> 'ExerciseMetadata':
        return ExerciseMetadata.from_dict(json.loads(json_str))


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _try_load(path: Path) -> Optional[ExerciseMetadata]:
    """读取并解析一个候选文件，不存在或无效都返回 None"""
    try:
        return ExerciseMetadata.from_json(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return None
    except (OSError, ValueError) as e:
        # json.JSONDecodeError / UnicodeDecodeError 都是 ValueError
        logger.debug(f"[元数据] 跳过无效文件 {path}: {e}")
        return None


class MetaStore:
    """元数据存储

    从工作目录逐级向上查找 .meta.json，返回第一个能成功解析的文件。
    """

    def __init__(self, filename: str = META_FILENAME):
        self.filename = filename

    def locate(self, start: Optional[Union[str, Path]] = None) -> Tuple[ExerciseMetadata, Path]:
        """查找最近的元数据

        Args:
            start: 起始目录，默认当前工作目录

        Returns:
            (元数据, 元数据文件绝对路径)

        Raises:
            MissingMetaError: 一直到文件系统根目录都没有可用的元数据
        """
        origin = Path(start) if start is not None else Path.cwd()
        origin = origin.resolve()

        current: Optional[Path] = origin
        while current is not None:
            candidate = current / self.filename
            meta = _try_load(candidate)
            if meta is not None:
                logger.debug(f"[元数据] 找到 {candidate}")
                return meta, candidate
            parent = current.parent
            current = parent if parent != current else None

        raise MissingMetaError(origin)

    def persist(self, meta: ExerciseMetadata, path: Union[str, Path]) -> None:
        """完整覆盖写回元数据文件（先截断再写入）"""
        path = Path(path)
        content = meta.to_json()
        try:
            fh = open(path, "w", encoding="utf-8")
        except OSError as e:
            raise OpenMetaFileError(path, str(e)) from e
        try:
            with fh:
                fh.write(content)
        except OSError as e:
            raise WriteMetaFileError(path, str(e)) from e
        logger.debug(f"[元数据] 已写回 {path}")
