"""核心层：清单、工作空间、拉取、集成、补丁、清理与安装流水线"""
