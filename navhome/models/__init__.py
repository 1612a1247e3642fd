"""数据模型模块.

主要模型:
- Category: 分类(支持父子层级与私密标记)
- Site: 书签
- PendingSite: 待审核的公共提交
- Setting: 主页设置键值
- User: 管理员账户
"""

__all__ = [
    "Category",
    "PendingSite",
    "Setting",
    "Site",
    "User",
]


def __getattr__(name: str):
    """延迟加载模型, 避免初始化周期引发的循环导入."""

    if name not in __all__:
        msg = f"module 'navhome.models' has no attribute {name}"
        raise AttributeError(msg)

    from importlib import import_module

    module_map = {
        "Category": "navhome.models.category",
        "PendingSite": "navhome.models.pending_site",
        "Setting": "navhome.models.setting",
        "Site": "navhome.models.site",
        "User": "navhome.models.user",
    }

    module = import_module(module_map[name])
    value = getattr(module, name)
    globals()[name] = value
    return value
