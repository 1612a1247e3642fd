"""公开配置、单条书签读取与导出服务."""
