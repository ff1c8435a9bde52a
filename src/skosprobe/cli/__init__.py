"""CLI 工具模块。

提供基于 typer 的命令行工具实现，
将执行器、能力分析、查询规划与整理流程暴露为 CLI 命令。

使用方式：
    ```bash
    # 测试端点连通性
    skosprobe test https://vocabs.example.org/sparql

    # 分析端点并保存快照
    skosprobe analyze https://vocabs.example.org/sparql -o snapshot.json

    # 显示版本
    skosprobe version
    ```
"""

from skosprobe.cli.probe_typer import ProbeTyper

__all__ = ["ProbeTyper", "app", "main"]

app = ProbeTyper()


def main() -> None:
    """CLI 入口函数。

    用于 pyproject.toml 中的 project.scripts 注册。
    """
    app()
