# -*- coding: utf-8 -*-
"""
Sharpener CLI - 编程练习命令行客户端

运行方式:
    sharpener config <token>      # 保存 CLI token
    sharpener download <token>    # 下载练习
    sharpener test                # 运行测试
    sharpener submit              # 提交当前练习
"""

from __future__ import annotations
import sys
import argparse
from pathlib import Path

from dotenv import load_dotenv
from loguru import logger


# 设置Python路径（直接运行 python src/main.py 时）
def setup_path():
    """设置Python路径"""
    src_dir = Path(__file__).resolve().parent
    if str(src_dir) not in sys.path:
        sys.path.insert(0, str(src_dir))
    return src_dir


setup_path()

from core import __version__  # noqa: E402
from core.exceptions import SharpenerError  # noqa: E402
from services.logger import LOG_LEVELS, configure_logger  # noqa: E402


def cmd_config(args) -> int:
    from services.config_service import UserConfig, get_app_config

    UserConfig.create(args.token, get_app_config().config_path)
    print("配置已保存")
    return 0


def cmd_download(args) -> int:
    from services import create_orchestrator

    exercise_dir = create_orchestrator().download(args.token)
    print(f"练习已下载到 {exercise_dir}")
    return 0


def cmd_list(args) -> int:
    from services import create_orchestrator

    for submission in create_orchestrator().list_pending():
        print(
            f"{submission.exercise_language} - {submission.exercise_name} "
            f"(提交令牌: {submission.submission_token})"
        )
    return 0


def cmd_test(args) -> int:
    from services import create_orchestrator

    return create_orchestrator(authenticated=False).test()


def cmd_hint(args) -> int:
    from services import create_orchestrator

    result = create_orchestrator(authenticated=False).hint()
    if not result.has_hints:
        print("这道练习没有提示，加油！")
        return 0
    for index, hint in enumerate(result.revealed, start=1):
        print(f"提示 #{index}:\n{hint}\n")
    return 0


def cmd_submit(args) -> int:
    from services import create_orchestrator

    result = create_orchestrator().submit()
    print(f"已提交 {result.exercise}，测试结果: {result.coverage}")
    return 0


def cmd_solution(args) -> int:
    from services import create_orchestrator

    submission = create_orchestrator().forfeit()
    print(
        "已放弃当前练习。运行以下命令下载替换的练习:\n\n"
        f"\tsharpener download {submission.submission_token}\n"
    )
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sharpener",
        description="Sharpener CLI - 编程练习命令行客户端",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=LOG_LEVELS,
        help="控制台日志级别 (默认: WARNING 或 SHARPENER_LOG_LEVEL)",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("download", help="下载练习")
    p.add_argument("token", help="提交令牌")
    p.set_defaults(func=cmd_download)

    sub.add_parser("test", help="运行自动化测试").set_defaults(func=cmd_test)
    sub.add_parser("list", help="列出待完成的提交").set_defaults(func=cmd_list)
    sub.add_parser("hint", help="显示当前练习的提示").set_defaults(func=cmd_hint)
    sub.add_parser("submit", help="提交当前练习的解答").set_defaults(func=cmd_submit)
    sub.add_parser(
        "solution",
        help="放弃当前练习，并换取一道难度相当的新练习",
    ).set_defaults(func=cmd_solution)

    p = sub.add_parser("config", help="配置用户")
    p.add_argument("token", help="CLI token")
    p.set_defaults(func=cmd_config)
    return parser


def main(argv=None) -> int:
    """主函数"""
    load_dotenv()

    from services.config_service import get_app_config

    args = build_parser().parse_args(argv)
    configure_logger(args.log_level or get_app_config().log_level)

    try:
        return args.func(args)
    except SharpenerError as e:
        logger.debug(f"命令 {args.command} 失败: {e.to_dict()}")
        print(f"错误: {e.message}", file=sys.stderr)
        if e.hint:
            print(f"\n{e.hint}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
