"""管理员认证服务."""
