"""公共提交与审核服务."""
