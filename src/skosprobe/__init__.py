"""skosprobe - 面向 SKOS 端点的 SPARQL 执行与能力探测工具。

本模块提供以下核心功能：
- 带重试、超时与错误分类的 SPARQL 查询执行
- 端点能力探测（命名图、概念方案、关系谓词、标签谓词、语言）
- 基于能力快照的自适应查询规划
- 端点整理（curation）工作流
"""

from importlib.metadata import version

__version__ = version("skosprobe")
