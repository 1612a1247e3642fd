"""路由模块,按资源拆分蓝图,统一在 create_app 中注册."""
