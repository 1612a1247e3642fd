"""工具模块.

主要工具:
- structlog_config: 结构化日志配置
- response_utils: 统一 JSON 响应
- route_safety: 视图层异常与日志封装
- decorators: 权限装饰器
- time_utils: 时间处理工具
"""
