"""首页快照缓存服务."""
