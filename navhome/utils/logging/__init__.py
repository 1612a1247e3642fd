"""日志辅助子模块: 上下文变量与错误元数据推导."""

from navhome.utils.logging.context_vars import request_id_var, user_id_var
from navhome.utils.logging.error_adapter import ErrorContext, ErrorMetadata, derive_error_metadata

__all__ = ["ErrorContext", "ErrorMetadata", "derive_error_metadata", "request_id_var", "user_id_var"]
