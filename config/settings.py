"""
全局配置 — 模型参数、Figma API、构建阈值、站点路径等
"""
import os

from dotenv import load_dotenv

# ============================================================
# 项目根目录
# ============================================================
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))

# 加载 .env 文件（位于项目根目录）
load_dotenv(os.path.join(PROJECT_ROOT, ".env"))

# ============================================================
# 日志
# ============================================================
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# ============================================================
# 模型配置
# ============================================================
MODEL_NAME = os.getenv("MODEL_NAME", "Qwen/Qwen2.5-72B-Instruct")
MODEL_BASE_URL = os.getenv("MODEL_BASE_URL", "https://api-inference.modelscope.cn/v1")
MODEL_API_KEY = os.getenv("MODEL_API_KEY", "")
MODEL_FAMILY = os.getenv("MODEL_FAMILY", "qwen2.5")
MODEL_TEMPERATURE = float(os.getenv("MODEL_TEMPERATURE", "0.7"))

# 模型 429 限流后的重试次数（超过后抛出 RateLimitError）
MODEL_MAX_RETRIES = int(os.getenv("MODEL_MAX_RETRIES", "2"))

# 服务端未给出 Retry-After 时的默认等待时间（秒）
MODEL_RETRY_WAIT_SECONDS = 10

# 单次等待上限（秒）
MODEL_MAX_RETRY_WAIT = 30

# ============================================================
# Figma 配置
# ============================================================
FIGMA_API_KEY = os.getenv("FIGMA_API_KEY", "")
FIGMA_API_BASE = os.getenv("FIGMA_API_BASE", "https://api.figma.com/v1")

FIGMA_MAX_RETRIES = 2              # 主文件接口 429 重试次数
FIGMA_SECONDARY_MAX_RETRIES = 1    # styles / components 接口重试次数
FIGMA_DEFAULT_RETRY_AFTER = 60     # 缺少 Retry-After 头时的默认值（秒）
FIGMA_MAX_RETRY_WAIT = 30          # 单次等待上限（秒）
FIGMA_REQUEST_TIMEOUT = 30         # HTTP 请求超时（秒）

# ============================================================
# 设计稿识别阈值（经验值，可通过环境变量调整）
# ============================================================
SECTION_MIN_WIDTH = int(os.getenv("SECTION_MIN_WIDTH", "100"))
SECTION_MIN_HEIGHT = int(os.getenv("SECTION_MIN_HEIGHT", "50"))
PAGE_MIN_WIDTH = int(os.getenv("PAGE_MIN_WIDTH", "300"))
PAGE_MIN_HEIGHT = int(os.getenv("PAGE_MIN_HEIGHT", "400"))
REPEAT_SIZE_TOLERANCE = int(os.getenv("REPEAT_SIZE_TOLERANCE", "50"))

# ============================================================
# 对话与构建配置
# ============================================================
COMPLETION_MARKER = "READY_TO_BUILD"     # 模型输出结构化方案前的完成标记
PREFLIGHT_DB_TIMEOUT = 10                # 预检时等待数据库就绪的上限（秒）
BUILD_SETTLE_SECONDS = 2                 # 站点安装完成到开始构建之间的缓冲（秒）
COMPLETION_WAIT_TIMEOUT = int(os.getenv("COMPLETION_WAIT_TIMEOUT", "600"))
PROGRESS_HISTORY_LIMIT = 1000            # Web 进度消息历史保留条数

DEFAULT_BASE_THEME = "twentytwentyfive"
DEFAULT_CHILD_THEME = "ai-generated-theme"

# ============================================================
# 站点与 WP-CLI
# ============================================================
SITES_ROOT = os.getenv("SITES_ROOT", os.path.join(os.path.expanduser("~"), "Local Sites"))
WP_CLI_BINARY = os.getenv("WP_CLI_BINARY", "wp")
WP_CLI_TIMEOUT = 120               # 单条 WP-CLI 命令超时（秒）

# ============================================================
# 输出目录
# ============================================================
OUTPUT_DIR = os.path.join(PROJECT_ROOT, "output")
