"""
Article Archiver 后端服务启动脚本

使用方法:
python -m archiver.server [--host HOST] [--port PORT] [--reload]
"""

import argparse

import uvicorn
from dotenv import load_dotenv

# 导入dotenv加载环境变量
load_dotenv()

from archiver.core.logging_config import configure_logging, get_logger  # noqa: E402
from archiver.main import create_app  # noqa: E402

# 配置日志
configure_logging()
logger = get_logger("archiver_server")

app = create_app()


def main():
    parser = argparse.ArgumentParser(description="Article Archiver后端服务启动脚本")
    parser.add_argument("--host", type=str, default="0.0.0.0", help="服务器监听地址，默认为0.0.0.0")
    parser.add_argument("--port", type=int, default=8000, help="服务器监听端口，默认为8000")
    parser.add_argument("--reload", action="store_true", help="启用热重载，开发环境下有用")
    args = parser.parse_args()

    logger.info(f"启动服务: http://{args.host}:{args.port}")
    uvicorn.run(
        "archiver.server:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_config=None,
    )


if __name__ == "__main__":
    main()
