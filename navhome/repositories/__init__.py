"""数据访问层.

Repository 只负责 Query 组装与数据库读取,不做序列化、不 commit.
"""
