"""主页设置服务."""
