"""跨层共享的数据结构定义."""
