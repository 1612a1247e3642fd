"""首页渲染服务: 分类树、可见性解析与页面组装."""
