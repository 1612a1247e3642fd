"""数据库结构保障服务."""
