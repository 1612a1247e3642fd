"""服务层模块.

提供业务逻辑服务,不做序列化/Response.

主要模块:
- home: 分类树构建、可见性解析与首页组装
- cache: 首页快照缓存与失效
- schema: 结构迁移保障
- settings: 主页设置解析与保存
- categories / sites / pending_sites: 管理端写操作
"""
