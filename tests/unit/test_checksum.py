# -*- coding: utf-8 -*-
"""
ChecksumVerifier 单元测试
"""

import hashlib
import sys
from pathlib import Path

# 添加src到路径
sys.path.insert(0, str(Path(__file__).parent.parent.parent / "src"))

import pytest
from core.exceptions import ChecksumReadError
from services.checksum import ChecksumVerifier


EMPTY_MD5 = "d41d8cd98f00b204e9800998ecf8427e"


class TestChecksumVerifier:
    """ChecksumVerifier 测试类"""

    def test_empty_file(self, tmp_path):
        target = tmp_path / "tests.rs"
        target.write_bytes(b"")
        assert ChecksumVerifier().digest(target) == EMPTY_MD5

    def test_matches_hashlib(self, tmp_path):
        content = b"#[test]\nfn it_works() { assert_eq!(2 + 2, 4); }\n"
        target = tmp_path / "tests.rs"
        target.write_bytes(content)
        assert ChecksumVerifier().digest(target) == hashlib.md5(content).hexdigest()

    def test_deterministic(self, tmp_path):
        target = tmp_path / "tests.py"
        target.write_bytes(b"def test_a():\n    assert True\n")
        verifier = ChecksumVerifier()
        assert verifier.digest(target) == verifier.digest(target)

    def test_single_byte_change(self, tmp_path):
        target = tmp_path / "tests.py"
        target.write_bytes(b"assert add(1, 2) == 3\n")
        before = ChecksumVerifier().digest(target)
        target.write_bytes(b"assert add(1, 2) == 4\n")
        assert ChecksumVerifier().digest(target) != before

    def test_chunk_size_does_not_change_digest(self, tmp_path):
        """跨越多个分块的文件与一次性计算结果一致"""
        content = bytes(range(256)) * 97
        target = tmp_path / "big.bin"
        target.write_bytes(content)
        expected = hashlib.md5(content).hexdigest()
        assert ChecksumVerifier(chunk_size=7).digest(target) == expected
        assert ChecksumVerifier(chunk_size=8192).digest(target) == expected

    def test_missing_file(self, tmp_path):
        with pytest.raises(ChecksumReadError):
            ChecksumVerifier().digest(tmp_path / "missing.rs")

    def test_directory_is_unreadable(self, tmp_path):
        with pytest.raises(ChecksumReadError):
            ChecksumVerifier().digest(tmp_path)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
