"""工具模块.

主要工具:
- structlog_config: 结构化日志配置
- route_safety: 视图安全执行与上下文日志
- response_utils: 统一错误响应
- payload_converters: 表单/JSON 字段类型转换
"""
