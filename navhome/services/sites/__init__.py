"""书签管理服务."""
