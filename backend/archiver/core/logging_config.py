"""
日志配置模块

提供应用程序的日志配置，集中管理各模块的日志级别。
"""

import logging
from archiver.core.config import settings


class ColorFormatter(logging.Formatter):
    """为日志添加颜色的格式化器"""

    COLORS = {
        'DEBUG': '\033[36m',  # 青色
        'INFO': '\033[32m',   # 绿色
        'WARNING': '\033[33m', # 黄色
        'ERROR': '\033[31m',   # 红色
        'CRITICAL': '\033[41m\033[37m', # 白字红底
        'RESET': '\033[0m'
    }

    def __init__(self, fmt):
        super().__init__(fmt)

    def format(self, record):
        levelname = record.levelname
        if levelname in self.COLORS:
            record = logging.makeLogRecord(record.__dict__)
            record.levelname = f"{self.COLORS[levelname]}{levelname}{self.COLORS['RESET']}"
        return super().format(record)


def configure_logging():
    """配置应用程序日志"""

    log_level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)
    log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # 清除已有的处理器
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(ColorFormatter(log_format))
    root_logger.addHandler(console_handler)

    # 设置特定模块的日志级别
    module_levels = {
        # 数据库日志
        "sqlalchemy": logging.WARNING,

        # Web服务器日志，过滤掉一般HTTP请求
        "uvicorn": logging.INFO,
        "uvicorn.access": logging.WARNING,

        # 其他库日志
        "passlib": logging.WARNING,
        "multipart": logging.WARNING,

        "archiver.api": logging.INFO,
        "archiver": logging.INFO,
    }

    for module, level in module_levels.items():
        logging.getLogger(module).setLevel(level)

    if settings.DEBUG:
        logging.getLogger("archiver.api").setLevel(logging.DEBUG)

    return root_logger


def get_logger(name):
    """获取指定名称的日志器"""
    return logging.getLogger(name)
