"""分类管理服务."""
