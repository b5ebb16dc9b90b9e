"""tegen - C/C++ 项目依赖拉取与构建辅助工具"""

__version__ = "0.3.0"
